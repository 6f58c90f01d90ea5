"""
Credential service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from auth.jwt import TokenIssuer, TokenVerifier
from auth.middleware import AuthGuard
from auth.notifier import Notifier, build_notifier
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from auth.store import CredentialStore, InMemoryCredentialStore
from config.settings import Settings, config
from database.store import SqlCredentialStore

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    # No-op once the root logger already has handlers.
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )


def build_store(settings: Settings) -> CredentialStore:
    if settings.credential_store == "database":
        return SqlCredentialStore.from_url(settings.database_url)
    if settings.credential_store != "memory":
        raise RuntimeError(
            f"Unknown credential store '{settings.credential_store}' "
            "(expected 'memory' or 'database')"
        )
    return InMemoryCredentialStore()


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CredentialStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    settings = settings or config
    configure_logging(settings.debug)

    issuer = TokenIssuer(settings.signing_secret)
    # Refuse to start without a usable signing secret.
    issuer.check()

    verifier = TokenVerifier(settings.signing_secret)
    store = store or build_store(settings)
    service = AuthService(
        store,
        PasswordHasher(settings.hash_work_factor),
        issuer,
        verifier,
        token_ttl=timedelta(seconds=settings.token_ttl_seconds),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(store, SqlCredentialStore):
            await store.setup()
        logger.info(
            "Credential service ready (store=%s, token_ttl=%ss, work_factor=%d)",
            type(store).__name__,
            settings.token_ttl_seconds,
            settings.hash_work_factor,
        )
        yield
        if isinstance(store, SqlCredentialStore):
            await store.close()

    app = FastAPI(
        title="Credential Service",
        version="1.0.0",
        description="User registration, login and bearer-token authentication.",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    app.state.settings = settings
    app.state.auth_service = service
    app.state.auth_guard = AuthGuard(verifier, settings.auth_header)
    app.state.notifier = notifier or build_notifier(settings)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
