"""Shared fakes for the OIDC stub tests."""
import json
from typing import Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from oidc.audit import AuditEmitter
from oidc.errors import StoreUnavailable
from oidc.signer import SigningService
from oidc.stores import InMemoryNonceStore

FIXED_NOW = 1_700_000_000


class RecordingEmitter(AuditEmitter):
    """Records every delivery attempt; optionally fails after recording."""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.sent: list[tuple[dict, Optional[str]]] = []

    async def _send(self, message: str, destination: Optional[str]) -> Optional[str]:
        self.sent.append((json.loads(message), destination))
        if self.fail:
            raise RuntimeError("queue unavailable")
        return f"message-{len(self.sent)}"


class FailingNonceStore(InMemoryNonceStore):
    def __init__(self, error: Exception = None):
        super().__init__()
        self.error = error or StoreUnavailable("table unavailable")
        self.attempts = 0

    async def put(self, code, nonce, user_id, remove_at):
        self.attempts += 1
        raise self.error


class FakeSigningService(SigningService):
    def __init__(self, signature: Optional[bytes] = b"fake-signature-bytes"):
        self.signature = signature
        self.calls: list[tuple[bytes, str, str]] = []

    async def sign(self, message, key_id, algorithm="ECDSA_SHA_256"):
        self.calls.append((message, key_id, algorithm))
        return self.signature


@pytest.fixture
def store():
    return InMemoryNonceStore()


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def signing_service():
    return FakeSigningService()


@pytest.fixture
def ec_key_pair():
    """(private PEM, public PEM) for a fresh P-256 key."""
    key = ec.generate_private_key(ec.SECP256R1())
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem
