"""ES256 id_token construction.

The token is assembled here but never signed here: the signing input
(base64url header "." base64url payload) is handed to a signing service
and its signature bytes are appended as the third segment.

Signing services:
- RemoteSigningService: external asymmetric signing API over HTTP
- LocalKeySigningService: PEM key on disk, for local development only
"""

import base64
import json
import logging
import time
import uuid
from typing import Callable, Optional

import httpx
from jwt.algorithms import ECAlgorithm
from jwt.utils import base64url_encode

from oidc.errors import SigningUnavailable

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "ES256"
SIGNING_ALGORITHM = "ECDSA_SHA_256"
ID_TOKEN_EXPIRE_SECONDS = 3600  # 1 hour

SUBJECT_PREFIX = "urn:fdc:gov.uk:2022:"
ISSUER_DOMAIN = "account.gov.uk"
PRODUCTION_ENVIRONMENT = "production"

# Stub artifacts returned alongside the id_token. These are NOT credentials.
PLACEHOLDER_ACCESS_TOKEN = "123ABC"
PLACEHOLDER_REFRESH_TOKEN = "456DEF"


def encode_segment(data: dict) -> str:
    """Compact JSON, unpadded base64url."""
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64url_encode(raw).decode("ascii")


def issuer_for(environment: str) -> str:
    """Issuer URL; non-production environments get their own subdomain."""
    if environment == PRODUCTION_ENVIRONMENT:
        return f"https://oidc-stub.home.{ISSUER_DOMAIN}/"
    return f"https://oidc-stub.home.{environment}.{ISSUER_DOMAIN}/"


class SigningService:
    async def sign(self, message: bytes, key_id: str, algorithm: str = SIGNING_ALGORITHM) -> Optional[bytes]:
        """Return signature bytes for message, or None if none was produced."""
        raise NotImplementedError


class RemoteSigningService(SigningService):
    """Client for an external signing API.

    POST {base_url}/sign
        {"key_id", "message" (base64), "message_type": "RAW", "signing_algorithm"}
    -> {"signature": base64}
    """

    def __init__(self, base_url: str, timeout: float = 5.0, transport: httpx.AsyncBaseTransport = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def sign(self, message: bytes, key_id: str, algorithm: str = SIGNING_ALGORITHM) -> Optional[bytes]:
        payload = {
            "key_id": key_id,
            "message": base64.b64encode(message).decode("ascii"),
            "message_type": "RAW",
            "signing_algorithm": algorithm,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/sign", json=payload)
                response.raise_for_status()
                data = response.json()
            signature = data.get("signature") if isinstance(data, dict) else None
            if not signature:
                return None
            return base64.b64decode(signature)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[SIGNER] Signing request for key {key_id} failed: {e}")
            raise SigningUnavailable(f"Signing service unavailable for key {key_id}") from e


class LocalKeySigningService(SigningService):
    """Signs with a local EC P-256 private key (PEM). Development only."""

    def __init__(self, private_key_pem: bytes):
        self._algorithm = ECAlgorithm(ECAlgorithm.SHA256)
        self._key = self._algorithm.prepare_key(private_key_pem)

    async def sign(self, message: bytes, key_id: str, algorithm: str = SIGNING_ALGORITHM) -> Optional[bytes]:
        if algorithm != SIGNING_ALGORITHM:
            raise SigningUnavailable(f"Unsupported signing algorithm: {algorithm}")
        # PyJWT returns the raw r||s form used by JWS
        return self._algorithm.sign(message, self._key)


class TokenSigner:
    """Builds and signs id_tokens for the relying party."""

    def __init__(self, signing_service: SigningService, clock: Callable[[], float] = time.time):
        self.signing_service = signing_service
        self.clock = clock

    @staticmethod
    def build_header(key_id: str) -> dict:
        return {"kid": key_id, "alg": JWT_ALGORITHM}

    def build_claims(self, client_id: str, environment: str, random_id: str = None) -> dict:
        """id_token claims. sub is random and not tied to any authorize call."""
        random_id = random_id or str(uuid.uuid4())
        now = int(self.clock())
        return {
            "sub": f"{SUBJECT_PREFIX}{random_id}",
            "iss": issuer_for(environment),
            "aud": client_id,
            "exp": now + ID_TOKEN_EXPIRE_SECONDS,
            "iat": now,
            "sid": str(uuid.uuid4()),
        }

    async def sign_jwt(self, header: dict, payload: dict, key_id: str) -> str:
        """Assemble the compact token from the signing service's signature."""
        signing_input = f"{encode_segment(header)}.{encode_segment(payload)}"
        signature = await self.signing_service.sign(signing_input.encode("ascii"), key_id, SIGNING_ALGORITHM)
        if not signature:
            raise SigningUnavailable(f"Failed to sign JWT with key {key_id}")
        return f"{signing_input}.{base64url_encode(signature).decode('ascii')}"

    async def sign(self, key_id: str, client_id: str, environment: str) -> str:
        token = await self.sign_jwt(
            self.build_header(key_id),
            self.build_claims(client_id, environment),
            key_id,
        )
        logger.info(f"[TOKEN] id_token signed with key {key_id} for audience {client_id}")
        return token


def build_token_response(id_token: str) -> dict:
    """Token endpoint body. access_token/refresh_token are fixed placeholders."""
    return {
        "access_token": PLACEHOLDER_ACCESS_TOKEN,
        "refresh_token": PLACEHOLDER_REFRESH_TOKEN,
        "token_type": "Bearer",
        "expires_in": ID_TOKEN_EXPIRE_SECONDS,
        "id_token": id_token,
    }
