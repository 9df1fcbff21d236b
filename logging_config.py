"""Logging configuration for the OIDC stub.

This module provides:
- PlainFormatter for stderr output
- JSONFormatter for structured log entries
- SupabaseLogHandler for batched log shipping to a Supabase table
Remote shipping is optional; stderr logging is always on.
"""

import atexit
import logging
import re
import sys
import threading
from queue import Queue, Empty
from typing import Optional

SERVICE_NAME = "oidc-stub"

_TAG_PATTERN = re.compile(r'\[([A-Z_]+)\]\s*(.*)', re.DOTALL)


class JSONFormatter(logging.Formatter):
    """Builds a structured log entry (dict) from a record.

    A leading "[TAG]" in the message is split out into the tag field.
    """

    def __init__(self, environment: str = None):
        super().__init__()
        self.environment = environment or "unknown"

    def format(self, record: logging.LogRecord) -> dict:
        tag = None
        message = record.getMessage()
        tag_match = _TAG_PATTERN.match(message)
        if tag_match:
            tag = tag_match.group(1)
            message = tag_match.group(2)

        entry = {
            "service": SERVICE_NAME,
            "environment": self.environment,
            "level": record.levelname,
            "tag": tag,
            "message": message,
            "logger": record.name,
            "extra": {
                "function": record.funcName,
                "line": record.lineno,
            },
        }
        if record.exc_info:
            entry["extra"]["exception"] = self.formatException(record.exc_info)
        return entry


class PlainFormatter(logging.Formatter):
    """Plain text formatter for stderr."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


class SupabaseLogHandler(logging.Handler):
    """Buffers log entries and inserts them into a Supabase table in batches.

    A flush happens every flush_interval seconds, when batch_size entries
    are queued, and on close.
    """

    def __init__(
        self,
        supabase_client,
        table: str = "logs",
        batch_size: int = 20,
        flush_interval: float = 10.0,
    ):
        super().__init__()
        self.supabase = supabase_client
        self.table = table
        self.batch_size = batch_size
        self.flush_interval = flush_interval

        self._queue: Queue = Queue()
        self._shutdown = threading.Event()
        self._flush_thread = threading.Thread(target=self._flush_worker, daemon=True)
        self._flush_thread.start()
        atexit.register(self.close)

    def emit(self, record: logging.LogRecord):
        try:
            if isinstance(self.formatter, JSONFormatter):
                entry = self.formatter.format(record)
            else:
                entry = {
                    "service": SERVICE_NAME,
                    "level": record.levelname,
                    "message": record.getMessage(),
                    "logger": record.name,
                }
            self._queue.put(entry)
            if self._queue.qsize() >= self.batch_size:
                self.flush()
        except Exception:
            self.handleError(record)

    def _flush_worker(self):
        # wait() returns early when close() sets the event
        while not self._shutdown.wait(self.flush_interval):
            if not self._queue.empty():
                self.flush()

    def flush(self):
        entries = []
        while len(entries) < self.batch_size * 2:
            try:
                entries.append(self._queue.get_nowait())
            except Empty:
                break
        if not entries or not self.supabase:
            return
        try:
            self.supabase.table(self.table).insert(entries).execute()
        except Exception as e:
            # Not through logging, that would recurse into this handler
            print(f"[WARNING] Failed to ship logs to Supabase: {e}", file=sys.stderr)

    def close(self):
        if not self._shutdown.is_set():
            self._shutdown.set()
            self.flush()
        super().close()


_supabase_handler: Optional[SupabaseLogHandler] = None


def setup_logging(
    environment: str = None,
    supabase_client=None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure the root logger.

    Args:
        environment: Deployment environment tag added to shipped entries.
        supabase_client: Supabase client for remote log shipping (optional).
        level: Root log level.

    Returns:
        The configured root logger.
    """
    global _supabase_handler

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(PlainFormatter())
    root_logger.addHandler(stderr_handler)

    shipping_enabled = False
    if supabase_client:
        try:
            _supabase_handler = SupabaseLogHandler(supabase_client)
            _supabase_handler.setLevel(level)
            _supabase_handler.setFormatter(JSONFormatter(environment))
            root_logger.addHandler(_supabase_handler)
            shipping_enabled = True
        except Exception as e:
            print(f"[WARNING] Supabase log shipping setup failed: {e}", file=sys.stderr)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    if shipping_enabled:
        logger.info(f"[STARTUP] Supabase log shipping enabled for environment: {environment}")
    else:
        logger.info("[STARTUP] Supabase log shipping disabled (no client)")

    return root_logger


def flush_logs():
    """Flush any pending log entries to Supabase."""
    if _supabase_handler:
        _supabase_handler.flush()
