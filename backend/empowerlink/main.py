from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Callable, Optional

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from empowerlink.api.routes import admin, auth, health, verifications
from empowerlink.core.config import Settings, get_settings
from empowerlink.core.errors import EmpowerLinkError, GatewayError
from empowerlink.core.logging import configure_logging, get_logger
from empowerlink.db.session import Database
from empowerlink.gateways.identity import IdentityGateway
from empowerlink.gateways.persistence import SqlVerificationStore
from empowerlink.services.storage import StorageService
from empowerlink.services.users import UserAdministration
from empowerlink.services.verification import VerificationWorkflow

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    storage: Optional[StorageService] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    database = database or Database(settings.database_url)
    storage = storage or StorageService.from_settings(settings)
    identity = IdentityGateway(
        database,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
    )

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.database = database
    app.state.storage = storage
    app.state.identity = identity
    app.state.workflow = VerificationWorkflow(
        SqlVerificationStore(database),
        enforce_terminal_states=settings.enforce_terminal_states,
    )
    app.state.user_admin = UserAdministration(database, identity)

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    @app.exception_handler(EmpowerLinkError)
    async def handle_domain_error(request: Request, exc: EmpowerLinkError) -> JSONResponse:
        if isinstance(exc, GatewayError):
            logger.warning("gateway_error", path=request.url.path, error=exc.message, cause=repr(exc.__cause__))
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.middleware("http")
    async def add_request_id(request: Request, call_next: Callable[[Request], Response]) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.on_event("startup")
    async def startup_event() -> None:
        storage.ensure_bucket()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        database.dispose()

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(verifications.router)
    app.include_router(admin.router)
    return app
