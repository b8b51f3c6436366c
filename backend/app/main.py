import logging.config

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.metrics import router as metrics_router
from app.api.routes import router as api_router
from app.api.ws import router as ws_router
from app.config import get_settings
from app.core.errors import register_exception_handlers
from parley.realtime import RealtimeRelay, RoomPresenceRegistry


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "root": {
        "handlers": ["default"],
        "level": "INFO",
    },
    "loggers": {
        "parley.realtime": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        }
    },
}


logging.config.dictConfig(LOGGING_CONFIG)

settings = get_settings()


def create_app() -> FastAPI:
    application = FastAPI(title=settings.app_name, debug=settings.debug)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_origin_regex=settings.cors_allow_origin_regex,
    )
    register_exception_handlers(application)

    # Presence lives in this process only; every start begins with no rooms.
    application.state.room_registry = RoomPresenceRegistry()
    application.state.relay = RealtimeRelay(
        application.state.room_registry,
        scoped_disconnect=settings.realtime_scoped_disconnect,
    )

    @application.get("/health", tags=["system"])
    def health_check() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "environment": settings.environment}

    application.include_router(api_router, prefix="/api")
    application.include_router(ws_router)
    application.include_router(metrics_router)
    return application


app = create_app()
