"""Best-effort audit event delivery.

Audit events are dispatched as detached tasks: the authorize response never
waits for them, and a failed delivery is logged and dropped. There is no
retry.
"""

import asyncio
import logging
from typing import Optional

import httpx

from oidc.models import AuditEvent

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("oidc-stub-audit")


class AuditEmitter:
    """Base emitter. Subclasses implement _send()."""

    def __init__(self):
        self._pending: set[asyncio.Task] = set()

    async def _send(self, message: str, destination: Optional[str]) -> Optional[str]:
        raise NotImplementedError

    async def emit(self, event: AuditEvent, destination: Optional[str] = None) -> Optional[str]:
        """Attempt delivery once.

        Returns the message id reported by the destination, or None if the
        delivery failed. Never raises.
        """
        try:
            message_id = await self._send(event.to_message(), destination)
        except Exception as e:
            logger.error(f"[AUDIT] Failed to deliver {event.event_name} event {event.event_id}: {e}")
            return None
        logger.info(f"[AUDIT] Delivered {event.event_name} event {event.event_id}")
        return message_id

    def dispatch(self, event: AuditEvent, destination: Optional[str] = None) -> asyncio.Task:
        """Schedule emit() without waiting for it. Needs a running event loop."""
        task = asyncio.create_task(self.emit(event, destination))
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("[AUDIT] Audit delivery cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[AUDIT] Audit delivery task failed: {exc!r}")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class QueueAuditEmitter(AuditEmitter):
    """POSTs the JSON message body to a queue URL over HTTP."""

    def __init__(self, timeout: float = 5.0, transport: httpx.AsyncBaseTransport = None):
        super().__init__()
        self.timeout = timeout
        self.transport = transport

    async def _send(self, message: str, destination: Optional[str]) -> Optional[str]:
        if not destination:
            raise ValueError("No audit queue URL")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                destination,
                content=message,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError:
                return None
        if isinstance(data, dict):
            return data.get("MessageId") or data.get("message_id")
        return None


class LoggingAuditEmitter(AuditEmitter):
    """Writes audit messages to the audit logger. Used when no queue is configured."""

    async def _send(self, message: str, destination: Optional[str]) -> Optional[str]:
        audit_logger.info(message)
        return None
