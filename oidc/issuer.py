"""Authorization code issuance.

CodeIssuer turns a validated AuthorizationRequest into a redirect carrying a
fresh code. Two side effects run per code:
- the nonce binding write, which must succeed
- the audit event, dispatched without waiting and allowed to fail
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional
from urllib.parse import urlencode

from oidc.audit import AuditEmitter
from oidc.errors import InvalidRequest, StoreUnavailable
from oidc.models import (
    DEFAULT_AUDIT_CLIENT_ID,
    NONCE_TTL_SECONDS,
    AuditEvent,
    AuthorizationRequest,
    NonceBinding,
)
from oidc.stores import NonceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedCode:
    code: str
    binding: NonceBinding
    location: str


def parse_authorization_request(
    params: Optional[Mapping[str, str]],
    cookies: Optional[Mapping[str, str]] = None,
) -> AuthorizationRequest:
    """Build an AuthorizationRequest from query/form parameters.

    Accepts redirect_uri or redirectUri. A missing or empty parameter set
    raises InvalidRequest.
    """
    if not params:
        raise InvalidRequest(message="Missing request parameters")

    cookies = cookies or {}
    return AuthorizationRequest(
        state=params.get("state"),
        nonce=params.get("nonce"),
        redirect_uri=params.get("redirect_uri") or params.get("redirectUri"),
        scenario=params.get("scenario") or None,
        user_id_hint=cookies.get("userId") or None,
    )


def build_redirect_location(redirect_uri: str, state: str, code: str) -> str:
    return f"{redirect_uri}?{urlencode({'state': state, 'code': code})}"


class CodeIssuer:
    """Issues authorization codes for the single relying party."""

    def __init__(
        self,
        nonce_store: NonceStore,
        audit_emitter: AuditEmitter,
        audit_destination: Optional[str] = None,
        audit_client_id: str = DEFAULT_AUDIT_CLIENT_ID,
        clock: Callable[[], float] = time.time,
    ):
        self.nonce_store = nonce_store
        self.audit_emitter = audit_emitter
        self.audit_destination = audit_destination
        self.audit_client_id = audit_client_id
        self.clock = clock

    @staticmethod
    def generate_code() -> str:
        return secrets.token_urlsafe(32)

    async def issue(self, request: AuthorizationRequest) -> IssuedCode:
        """Issue a code and return the redirect target.

        Raises InvalidRequest before any side effect, and StoreUnavailable
        if the nonce binding could not be written.
        """
        missing = request.missing_fields()
        if missing:
            raise InvalidRequest(missing)

        code = self.generate_code()
        remove_at = int(self.clock()) + NONCE_TTL_SECONDS
        user_id = request.resolve_user_id()

        # Dispatched first so it is attempted even when the store write fails
        event = AuditEvent(user_id=user_id, client_id=self.audit_client_id)
        self.audit_emitter.dispatch(event, self.audit_destination)

        try:
            binding = await self.nonce_store.put(code, request.nonce, user_id, remove_at)
        except StoreUnavailable:
            raise
        except Exception as e:
            logger.error(f"[AUTHORIZE] Nonce store write failed: {e}")
            raise StoreUnavailable("Could not write nonce binding") from e

        logger.info(f"[AUTHORIZE] Code issued for scenario: {request.scenario_name}")
        return IssuedCode(
            code=code,
            binding=binding,
            location=build_redirect_location(request.redirect_uri, request.state, code),
        )
