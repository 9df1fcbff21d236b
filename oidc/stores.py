"""Nonce binding stores.

Each issued authorization code is written once with its nonce, user id and
a removeAt expiry. Expired records are swept by the backing store's TTL,
never by this service, and nothing here reads bindings back.
"""

import asyncio
import logging

from oidc.errors import StoreUnavailable
from oidc.models import NonceBinding

logger = logging.getLogger(__name__)


class NonceStore:
    """Write side of the code -> nonce binding table."""

    async def put(self, code: str, nonce: str, user_id: str, remove_at: int) -> NonceBinding:
        raise NotImplementedError


class InMemoryNonceStore(NonceStore):
    """Process-local store for local runs and tests.

    There is no TTL sweep; records stay until the process exits.
    """

    def __init__(self):
        self.bindings: dict[str, NonceBinding] = {}

    async def put(self, code: str, nonce: str, user_id: str, remove_at: int) -> NonceBinding:
        binding = NonceBinding(code=code, nonce=nonce, user_id=user_id, remove_at=remove_at)
        self.bindings[code] = binding
        return binding


class SupabaseNonceStore(NonceStore):
    """Supabase table store. Configure a TTL sweep on the removeAt column."""

    def __init__(self, supabase_client, table: str = "nonces"):
        self.supabase = supabase_client
        self.table = table

    def _write(self, item: dict):
        # upsert keeps the last write if a code is ever written twice
        return self.supabase.table(self.table).upsert(item).execute()

    async def put(self, code: str, nonce: str, user_id: str, remove_at: int) -> NonceBinding:
        binding = NonceBinding(code=code, nonce=nonce, user_id=user_id, remove_at=remove_at)
        try:
            # supabase-py client is blocking
            await asyncio.to_thread(self._write, binding.to_item())
        except Exception as e:
            logger.error(f"[STORE] Failed to write nonce binding to {self.table}: {e}")
            raise StoreUnavailable(f"Could not write nonce binding to {self.table}") from e
        logger.debug(f"[STORE] Nonce binding written, removeAt: {remove_at}")
        return binding
