"""Config management for the OIDC stub.

All settings come from environment variables (main.py loads .env or the
bundled .env.public first).
"""
import os
from typing import Mapping, Optional

from oidc.errors import ConfigurationMissing
from oidc.models import DEFAULT_AUDIT_CLIENT_ID


CONFIG_KEYS = (
    "OIDC_CLIENT_ID",
    "SIGNING_KEY_ID",
    "ENVIRONMENT",
    "AUDIT_QUEUE_URL",
    "AUDIT_CLIENT_ID",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "NONCE_TABLE",
    "SIGNER_URL",
    "SIGNING_KEY_FILE",
    "HTTP_TIMEOUT",
    "HOST",
    "PORT",
)

# Needed before an id_token can be signed
TOKEN_CONFIG_KEYS = ("OIDC_CLIENT_ID", "SIGNING_KEY_ID", "ENVIRONMENT")


class Config:
    """Configuration container."""

    def __init__(self, data: dict = None):
        # Empty strings count as unset
        self.data = {k: v for k, v in (data or {}).items() if v not in (None, "")}

    @property
    def oidc_client_id(self) -> Optional[str]:
        return self.data.get("OIDC_CLIENT_ID")

    @property
    def signing_key_id(self) -> Optional[str]:
        return self.data.get("SIGNING_KEY_ID")

    @property
    def environment(self) -> Optional[str]:
        return self.data.get("ENVIRONMENT")

    @property
    def audit_queue_url(self) -> Optional[str]:
        return self.data.get("AUDIT_QUEUE_URL")

    @property
    def audit_client_id(self) -> str:
        return self.data.get("AUDIT_CLIENT_ID", DEFAULT_AUDIT_CLIENT_ID)

    @property
    def supabase_url(self) -> Optional[str]:
        return self.data.get("SUPABASE_URL")

    @property
    def supabase_key(self) -> Optional[str]:
        return self.data.get("SUPABASE_KEY")

    @property
    def nonce_table(self) -> str:
        return self.data.get("NONCE_TABLE", "nonces")

    @property
    def signer_url(self) -> Optional[str]:
        return self.data.get("SIGNER_URL")

    @property
    def signing_key_file(self) -> Optional[str]:
        return self.data.get("SIGNING_KEY_FILE")

    @property
    def http_timeout(self) -> float:
        return float(self.data.get("HTTP_TIMEOUT", "5.0"))

    @property
    def host(self) -> str:
        return self.data.get("HOST", "0.0.0.0")

    @property
    def port(self) -> int:
        return int(self.data.get("PORT", "8080"))

    def missing(self, *keys: str) -> list[str]:
        return [key for key in keys if key not in self.data]

    def require(self, *keys: str) -> None:
        """Raise ConfigurationMissing naming every unset key."""
        missing = self.missing(*keys)
        if missing:
            raise ConfigurationMissing(missing)

    def require_token_config(self) -> None:
        self.require(*TOKEN_CONFIG_KEYS)

    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def load_config(environ: Mapping[str, str] = None) -> Config:
    """Load config from the environment."""
    environ = os.environ if environ is None else environ
    return Config({key: environ.get(key) for key in CONFIG_KEYS})
