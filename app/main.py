# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from app.api.v1.router import build_card_router, build_charge_router
from app.core.config import Settings, settings as default_settings
from app.core.errors import InternalError, InvalidRequest, ServiceError
from app.core.logging import setup_logging
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.domain.services.charge_orchestrator import ChargeOrchestrator
from app.infra.clients.card_client import CardGateway, CardServiceClient
from app.infra.db.models.card import Card
from app.infra.db.models.charge import Charge
from app.infra.db.session import Database
from app.schemas.common import describe_validation_errors

logger = logging.getLogger(__name__)


def _service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _validation_error_handler(request: Request, exc: RequestValidationError):
    err = InvalidRequest(describe_validation_errors(exc.errors()))
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    err = InternalError("An unexpected error occurred")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


def _base_app(service: str, app_settings: Settings, database: Database) -> FastAPI:
    setup_logging(app_settings)

    app = FastAPI(
        title=f"{app_settings.PROJECT_NAME} - {service}",
        version=app_settings.PROJECT_VERSION,
    )
    app.state.settings = app_settings
    app.state.db = database

    # Rate limiting
    limiter.enabled = app_settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Errores -> {code, message}
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.on_event("startup")
    async def on_startup() -> None:
        await database.init_models()
        logger.info(f"🚀 {app.title} iniciado")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await database.dispose()
        logger.info(f"🛑 {app.title} detenido")

    @app.get("/")
    async def root():
        return {"service": app.title, "version": app_settings.PROJECT_VERSION, "status": "ok"}

    return app


def create_card_app(
    app_settings: Settings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Card service: dueño de la tabla ``cards``."""
    app_settings = app_settings or default_settings
    database = database or Database(
        app_settings.CARD_DATABASE_URL,
        tables=[Card.__table__],
        echo=app_settings.ENVIRONMENT == "development",
    )

    app = _base_app("Card Service", app_settings, database)
    app.include_router(build_card_router())
    return app


def create_charge_app(
    app_settings: Settings | None = None,
    database: Database | None = None,
    card_gateway: CardGateway | None = None,
) -> FastAPI:
    """Charge service: dueño de la tabla ``charges`` y del orquestador."""
    app_settings = app_settings or default_settings
    database = database or Database(
        app_settings.CHARGE_DATABASE_URL,
        tables=[Charge.__table__],
        echo=app_settings.ENVIRONMENT == "development",
    )
    card_gateway = card_gateway or CardServiceClient(
        app_settings.CARD_SERVICE_URL,
        timeout=(app_settings.CARD_SERVICE_CONNECT_TIMEOUT, app_settings.CARD_SERVICE_TIMEOUT),
    )

    app = _base_app("Charge Service", app_settings, database)
    app.state.orchestrator = ChargeOrchestrator(
        database.sessionmaker,
        card_gateway,
        guard_card_status=app_settings.CARD_STATUS_GUARD,
    )
    app.include_router(build_charge_router())

    @app.on_event("shutdown")
    async def close_card_gateway() -> None:
        close = getattr(card_gateway, "close", None)
        if close is not None:
            close()

    return app
