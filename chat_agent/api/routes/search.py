"""
Transcript search endpoint.

POST /api/question scans every ``.txt`` file in the chats directory for
lines containing the question (case-insensitive).
"""

import logging
from typing import Union

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..schemas import ErrorResponse, QuestionRequest, QuestionResponse
from ...config import config
from ...tools.chat_search import MISSING_DIR_NOTE, find_matches, resolve_chats_dir

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/question",
    response_model=QuestionResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Question is missing or blank"},
        500: {"model": ErrorResponse, "description": "Transcripts could not be read"},
    },
    summary="Search chat transcripts",
)
def ask_question(request: QuestionRequest) -> Union[QuestionResponse, JSONResponse]:
    """Return every transcript line that contains the question."""
    question = request.question
    if not question or not question.strip():
        return JSONResponse(status_code=400, content={"error": "Question is required"})

    chats_dir = resolve_chats_dir(config.tools.chats_dir)
    if not chats_dir.is_dir():
        logger.info(f"Chats directory {chats_dir} not found")
        return QuestionResponse(matches=[], note=MISSING_DIR_NOTE)

    try:
        matches = find_matches(question, chats_dir)
    except OSError as e:
        logger.exception(f"Search in {chats_dir} failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Search error"})

    logger.debug(f"Question '{question[:100]}' matched {len(matches)} lines")
    return QuestionResponse(matches=matches)
