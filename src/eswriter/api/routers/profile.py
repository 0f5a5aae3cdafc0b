"""
Profile endpoints backing the extension's profile form.

The answering pipeline only reads profiles; these routes are how they get
written.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError

from eswriter.api.dependencies import get_context, get_subject, read_profile
from eswriter.api.schemas import ProfileBody
from eswriter.context import ServiceContext
from eswriter.profiles import ProfileLookupError, ProfileNotFoundError, ProfileWriteError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProfileBody)
async def show_profile(
    subject_id: str = Depends(get_subject),
    context: ServiceContext = Depends(get_context),
):
    """Return the caller's stored profile."""
    try:
        profile = await read_profile(context, subject_id)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ProfileLookupError as e:
        logger.error("Profile lookup failed for %s: %s", subject_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load user profile: {e}",
        ) from e
    return ProfileBody.from_profile(profile)


@router.put("", response_model=ProfileBody)
async def update_profile(
    request: Request,
    subject_id: str = Depends(get_subject),
    context: ServiceContext = Depends(get_context),
):
    """Create or replace the caller's profile."""
    try:
        body = ProfileBody.model_validate_json(await request.body())
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bad request") from e

    try:
        await asyncio.to_thread(context.profile_store.put, subject_id, body.to_profile())
    except ProfileWriteError as e:
        logger.error("Profile write failed for %s: %s", subject_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to store user profile: {e}",
        ) from e
    return body
