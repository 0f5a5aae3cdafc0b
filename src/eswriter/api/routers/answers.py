"""
Answer generation endpoint.

POST /getAnswers takes a form snapshot, extracts its questions and answers
each one from the caller's profile. Checks run in this order, each one
short-circuiting before any completion call:

1. identity (401)
2. profile lookup (500)
3. request body (400)
4. at least one question (400)

After that the response is always 200; questions whose completion failed
or timed out carry an empty answer.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from eswriter.api.dependencies import get_context, get_subject, read_profile
from eswriter.api.schemas import AnswerItem, AnswerRequest
from eswriter.context import ServiceContext
from eswriter.extraction import clean_html, extract_questions
from eswriter.models import Deadline
from eswriter.profiles import ProfileLookupError

logger = logging.getLogger(__name__)

router = APIRouter()

_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@router.options("/getAnswers")
async def answers_preflight() -> Response:
    """Answer CORS preflight before any auth check."""
    return Response(status_code=status.HTTP_200_OK, headers=_PREFLIGHT_HEADERS)


@router.post("/getAnswers", response_model=list[AnswerItem])
async def get_answers(
    request: Request,
    include_status: bool = False,
    subject_id: str = Depends(get_subject),
    context: ServiceContext = Depends(get_context),
):
    """
    Answer every question found in the submitted form markup.

    Returns one ``{"question", "answer"}`` object per extracted question, in
    document order. With ``include_status=true`` each item also carries the
    task's terminal status, which tells a failed call apart from an empty
    answer.
    """
    try:
        profile = await read_profile(context, subject_id)
    except ProfileLookupError as e:
        logger.error("Profile lookup failed for %s: %s", subject_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load user profile: {e}",
        ) from e

    body = await request.body()
    try:
        payload = AnswerRequest.model_validate_json(body)
    except ValidationError as e:
        logger.info("Error decoding request body: %d validation errors", e.error_count())
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bad request") from e

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Cleaned HTML: %s", clean_html(payload.html))

    questions = extract_questions(payload.html)
    if not questions:
        logger.info("No questions found in the HTML content")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No questions found")

    deadline = Deadline.after(context.request_deadline)
    answers = await context.orchestrator.answer(questions, profile, deadline)

    return JSONResponse([a.to_dict(include_status=include_status) for a in answers])
