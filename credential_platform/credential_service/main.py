"""
Credential Service - email/password registration and login
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .db import build_engine, init_db
from .errors import PersistenceError
from .gateway import PersistenceGateway
from .routes import dev_monitor, users
from .services import CredentialService
from .utils.log_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the engine, create the schema and wire the services"""
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    init_db(engine, reset=settings.RESET_DB_ON_STARTUP)

    gateway = PersistenceGateway(engine)
    app.state.gateway = gateway
    app.state.credential_service = CredentialService(gateway, salt_size=settings.SALT_SIZE)
    logger.info("Credential service started")
    try:
        yield
    finally:
        engine.dispose()


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable"}
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Submitted values are not echoed back, they can hold passwords
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(errors)}
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Credential Service",
        description="Salted-hash email/password registration and login",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(users.router)
    app.include_router(dev_monitor.router)

    @app.get("/health", status_code=status.HTTP_200_OK)
    def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


configure_logging(default_settings)

app = create_app()
