"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from fundscope.infrastructure.config import get_settings
from fundscope.infrastructure.logging_config import configure_logging

from .dependencies import Services, build_services
from .routes import router


def create_app(services: Services | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="fundscope")
    app.state.services = services or build_services(settings)
    app.include_router(router)
    return app
