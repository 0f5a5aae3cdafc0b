"""Service context — the collaborators one process shares across requests.

Built once at startup and handed to whatever needs it; nothing here is a
module-level global.

Usage:
    async with open_context(get_settings()) as context:
        answers = await context.orchestrator.answer(questions, profile, deadline)
"""

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from eswriter.auth import StaticTokenResolver, TokenResolver, UserInfoTokenResolver
from eswriter.clients import create_completion_client
from eswriter.config import Settings
from eswriter.pipeline import AnswerOrchestrator
from eswriter.profiles import ProfileStore, SQLiteProfileStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """Dependencies of the request handlers."""

    token_resolver: TokenResolver
    profile_store: ProfileStore
    orchestrator: AnswerOrchestrator
    request_deadline: float = 30.0
    provider: str = "custom"


@asynccontextmanager
async def open_context(settings: Settings) -> AsyncIterator[ServiceContext]:
    """Build the service context from settings and close its clients on exit."""
    async with AsyncExitStack() as stack:
        client = await stack.enter_async_context(create_completion_client(settings))

        if settings.auth_mode == "static":
            resolver: TokenResolver = StaticTokenResolver(settings.static_tokens)
        else:
            resolver = await stack.enter_async_context(
                UserInfoTokenResolver(settings.userinfo_url)
            )

        context = ServiceContext(
            token_resolver=resolver,
            profile_store=SQLiteProfileStore(settings.profile_db_path),
            orchestrator=AnswerOrchestrator(
                client,
                max_concurrency=settings.max_concurrency,
                cancel_grace=settings.cancel_grace,
                language=settings.prompt_language,
            ),
            request_deadline=settings.request_deadline,
            provider=settings.completion_provider,
        )
        logger.info(
            "Service context ready (provider=%s, model=%s, max_concurrency=%d, deadline=%.0fs)",
            settings.completion_provider, client.model,
            settings.max_concurrency, settings.request_deadline,
        )
        yield context
