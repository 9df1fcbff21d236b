"""OIDC Stub - stand-in identity provider for relying party testing.

Serves:
- Scenario picker (/scenarios)
- Authorization code issuance (/authorize)
- Signed id_token issuance (/token)

Clients for the nonce store, audit queue and signing service are built
once here and passed into the OIDC components.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from supabase import create_client, Client

from config import Config, load_config

# Load environment: .env (local override) or .env.public (bundled defaults)
_env_file = Path(".env")
if _env_file.exists():
    load_dotenv(_env_file)
else:
    _public_env = Path(__file__).parent / ".env.public"
    if _public_env.exists():
        load_dotenv(_public_env)

from logging_config import flush_logs, setup_logging
from oidc.audit import AuditEmitter, LoggingAuditEmitter, QueueAuditEmitter
from oidc.endpoints import build_router
from oidc.issuer import CodeIssuer
from oidc.signer import LocalKeySigningService, RemoteSigningService, SigningService, TokenSigner
from oidc.stores import InMemoryNonceStore, NonceStore, SupabaseNonceStore

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def build_supabase_client(config: Config):
    if not config.has_supabase():
        return None
    return create_client(config.supabase_url, config.supabase_key)


def build_nonce_store(config: Config, supabase: Client = None) -> NonceStore:
    if supabase:
        logger.info(f"[STARTUP] Nonce store: Supabase table {config.nonce_table}")
        return SupabaseNonceStore(supabase, table=config.nonce_table)
    logger.warning("[STARTUP] Nonce store: in-memory (Supabase not configured)")
    return InMemoryNonceStore()


def build_audit_emitter(config: Config) -> AuditEmitter:
    if config.audit_queue_url:
        logger.info("[STARTUP] Audit events: queue")
        return QueueAuditEmitter(timeout=config.http_timeout)
    logger.warning("[STARTUP] Audit events: log only (AUDIT_QUEUE_URL not set)")
    return LoggingAuditEmitter()


def build_signing_service(config: Config):
    if config.signer_url:
        logger.info(f"[STARTUP] Signing service: {config.signer_url}")
        return RemoteSigningService(config.signer_url, timeout=config.http_timeout)
    if config.signing_key_file:
        logger.warning(f"[STARTUP] Signing service: local key {config.signing_key_file} (development only)")
        return LocalKeySigningService(Path(config.signing_key_file).read_bytes())
    logger.warning("[STARTUP] No signing service configured, /token will fail")
    return None


def create_app(
    config: Config = None,
    nonce_store: NonceStore = None,
    audit_emitter: AuditEmitter = None,
    signing_service: SigningService = None,
    supabase: Client = None,
) -> FastAPI:
    """Build the application. Arguments override what config would build."""
    config = config or load_config()
    if nonce_store is None:
        nonce_store = build_nonce_store(config, supabase or build_supabase_client(config))
    audit_emitter = audit_emitter or build_audit_emitter(config)
    signing_service = signing_service or build_signing_service(config)

    code_issuer = CodeIssuer(
        nonce_store,
        audit_emitter,
        audit_destination=config.audit_queue_url,
        audit_client_id=config.audit_client_id,
    )
    token_signer = TokenSigner(signing_service) if signing_service else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Let in-flight audit deliveries finish before shutdown
        await audit_emitter.drain()
        flush_logs()

    app = FastAPI(
        title="OIDC Stub",
        description="Stand-in OpenID Connect provider for relying party testing",
        version=VERSION,
        lifespan=lifespan,
    )
    app.include_router(build_router(config, code_issuer, token_signer))

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "oidc-stub", "version": VERSION}

    return app


_config = load_config()
_supabase = build_supabase_client(_config)
setup_logging(environment=_config.environment, supabase_client=_supabase)
logger.info(f"[STARTUP] Environment: {_config.environment}")

app = create_app(_config, supabase=_supabase)


def run():
    import uvicorn
    logger.info(f"Starting OIDC stub on {_config.host}:{_config.port}")
    uvicorn.run(app, host=_config.host, port=_config.port)


if __name__ == "__main__":
    run()
