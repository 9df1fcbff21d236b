"""Records passed between the OIDC stub components."""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

# Placeholder identity for codes issued without a scenario or userId cookie
DEFAULT_USER_ID = "F5CE808F-75AB-4ECD-BBFC-FF9DBF5330FA"
DEFAULT_SCENARIO = "default"

AUTH_CODE_ISSUED_EVENT = "AUTH_AUTH_CODE_ISSUED"
DEFAULT_AUDIT_CLIENT_ID = "vehicleOperatorLicense"

NONCE_TTL_SECONDS = 24 * 60 * 60  # 24 hours


@dataclass(frozen=True)
class AuthorizationRequest:
    """Inbound /authorize parameters. Never persisted."""

    state: Optional[str]
    nonce: Optional[str]
    redirect_uri: Optional[str]
    scenario: Optional[str] = None
    user_id_hint: Optional[str] = None  # from the userId cookie

    @property
    def scenario_name(self) -> str:
        return self.scenario or DEFAULT_SCENARIO

    def missing_fields(self) -> list[str]:
        """Names of required parameters that are absent or empty."""
        required = {
            "state": self.state,
            "nonce": self.nonce,
            "redirect_uri": self.redirect_uri,
        }
        return [name for name, value in required.items() if not value]

    def resolve_user_id(self) -> str:
        """Scenario name, then userId cookie, then the placeholder identity."""
        if self.scenario:
            return self.scenario
        if self.user_id_hint:
            return self.user_id_hint
        return DEFAULT_USER_ID


@dataclass(frozen=True)
class NonceBinding:
    """Persisted code -> nonce/user binding, expired by the store's TTL sweep."""

    code: str
    nonce: str
    user_id: str
    remove_at: int

    def to_item(self) -> dict:
        """Record layout written to the backing store."""
        return {
            "code": self.code,
            "nonce": self.nonce,
            "userId": self.user_id,
            "removeAt": self.remove_at,
        }


@dataclass(frozen=True)
class AuditEvent:
    user_id: str
    client_id: str = DEFAULT_AUDIT_CLIENT_ID
    event_name: str = AUTH_CODE_ISSUED_EVENT
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp,
            "event_name": self.event_name,
            "client_id": self.client_id,
            "user": {
                "user_id": self.user_id,
                "session_id": self.session_id,
            },
        }

    def to_message(self) -> str:
        """Self-describing JSON message body for the audit queue."""
        return json.dumps(self.to_dict(), separators=(",", ":"))
