"""FastAPI dependencies shared by the routers."""

import asyncio
import logging

from fastapi import Depends, HTTPException, Request, status

from eswriter.auth import AuthError
from eswriter.context import ServiceContext

logger = logging.getLogger(__name__)


def get_context(request: Request) -> ServiceContext:
    """The service context stored on the application at startup."""
    return request.app.state.context


async def get_subject(
    request: Request,
    context: ServiceContext = Depends(get_context),
) -> str:
    """Resolve the caller's subject ID or reject with 401."""
    try:
        return await context.token_resolver.get_subject(request)
    except AuthError as e:
        logger.info("Unauthorized request to %s: %s", request.url.path, e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Failed to resolve user from token: {e}",
        ) from e


async def read_profile(context: ServiceContext, subject_id: str):
    """Fetch a profile without blocking the event loop."""
    return await asyncio.to_thread(context.profile_store.get, subject_id)
