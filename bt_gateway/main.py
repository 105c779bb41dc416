import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from bt_gateway.braintree_service import create_gateway
from bt_gateway.config import BASE_DIR, Settings
from bt_gateway.errors import GatewayFacadeError
from bt_gateway.routes import payments_router, router

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    app.state.gateway = create_gateway(settings)
    logger.info("Braintree gateway configured for %s environment", settings.environment)
    for route in app.routes:
        methods = getattr(route, "methods", None)
        if methods and route.path.startswith("/api"):
            logger.info("  %s %s", ",".join(sorted(methods)), route.path)
    try:
        yield
    finally:
        app.state.gateway = None


async def facade_error_handler(request: Request, exc: GatewayFacadeError):
    return JSONResponse(status_code=exc.kind.status_code, content=exc.to_dict())


def _error_attribute(loc):
    # ("body", "amount", "decimal") -> "amount"
    if not loc:
        return None
    return str(loc[1] if len(loc) > 1 else loc[0])


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "attribute": _error_attribute(error.get("loc")),
            "code": error.get("type"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return await facade_error_handler(
        request, GatewayFacadeError.invalid("Invalid request body", errors)
    )


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = FastAPI(title="Braintree Gateway Facade", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayFacadeError, facade_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(router)
    if settings.payment_routes:
        app.include_router(payments_router)

    # Browser front end; mounted last so /api routes take precedence
    static_dir = Path(settings.static_dir)
    if not static_dir.is_absolute():
        static_dir = BASE_DIR / static_dir
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


def run():
    settings = Settings.from_env()
    uvicorn.run(
        "bt_gateway.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
