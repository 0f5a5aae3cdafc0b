"""
FastAPI application entry point.

Wires the routers to a ServiceContext. The context is either built from
settings in the lifespan (production) or passed in ready-made (tests, the
CLI's in-process runs).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eswriter import __version__
from eswriter.api.routers import answers, health, profile
from eswriter.config import Settings, get_settings
from eswriter.context import ServiceContext, open_context


def create_app(
    context: ServiceContext | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    Args:
        context: Prebuilt service context. If omitted, one is opened from
            ``settings`` at startup and closed at shutdown.
        settings: Settings to build the context from (default: environment)
    """

    if context is None:
        settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if context is not None:
            yield
            return
        async with open_context(settings) as opened:
            app.state.context = opened
            yield

    app = FastAPI(
        title="ES Writer API",
        description="Answers application form questions from a stored user profile",
        version=__version__,
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    allow_origins = settings.cors_allow_origins if settings is not None else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["POST", "GET", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(answers.router, tags=["answers"])
    app.include_router(profile.router, prefix="/profile", tags=["profile"])
    app.include_router(health.router, prefix="/health", tags=["health"])

    return app
