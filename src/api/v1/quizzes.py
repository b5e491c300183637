# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Quiz API endpoints.

This module provides endpoints for quizzes:
- POST /generate - Generate a quiz from an uploaded file
- GET / - List quizzes
- GET /completed - Ids of quizzes the user has attempted
- GET /{quiz_id} - Get a quiz
- PATCH /{quiz_id} - Edit a quiz
- DELETE /{quiz_id} - Delete a quiz
- POST /{quiz_id}/attempts - Submit answers
- GET /{quiz_id}/attempts - Attempt history
- GET /{quiz_id}/progress - Progress summary across attempts
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from src.api.dependencies import (
    get_attempt_service,
    get_quiz_service,
    get_tracker_registry,
    require_auth,
)
from src.api.middleware.auth import CurrentUser
from src.domains.analytics.progress import build_quiz_progress
from src.domains.generation import GenerationError
from src.domains.library import FileContentUnavailableError, FileNotFoundInLibraryError
from src.domains.quizzes import (
    AttemptSaveError,
    AuthenticationRequiredError,
    QuizAttemptService,
    QuizGenerationEmptyError,
    QuizNotFoundError,
    QuizService,
    QuizValidationError,
)
from src.domains.quizzes.schemas import (
    AttemptSubmitRequest,
    QuizAttemptResponse,
    QuizGenerateRequest,
    QuizResponse,
    QuizUpdateRequest,
)
from src.domains.study_sessions import SessionTrackerRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

CLIENT_ID_HEADER = "X-Client-Session"


@router.post(
    "/generate",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a quiz",
)
async def generate_quiz(
    request: QuizGenerateRequest,
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
) -> QuizResponse:
    try:
        quiz = await quizzes.generate_quiz(current_user.id, request)
    except FileNotFoundInLibraryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except FileContentUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except (GenerationError, QuizGenerationEmptyError) as e:
        logger.error("Quiz generation failed for user %s: %s", current_user.id, str(e))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return QuizResponse.model_validate(quiz)


@router.get("", response_model=list[QuizResponse], summary="List quizzes")
async def list_quizzes(
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
) -> list[QuizResponse]:
    return [QuizResponse.model_validate(quiz) for quiz in await quizzes.list_quizzes(current_user.id)]


@router.get("/completed", response_model=list[str], summary="Attempted quiz ids")
async def completed_quiz_ids(
    current_user: CurrentUser = Depends(require_auth),
    attempts: QuizAttemptService = Depends(get_attempt_service),
) -> list[str]:
    return sorted(await attempts.get_completed_quiz_ids(current_user.id))


@router.get("/{quiz_id}", response_model=QuizResponse, summary="Get a quiz")
async def get_quiz(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
) -> QuizResponse:
    try:
        return QuizResponse.model_validate(await quizzes.get_quiz(current_user.id, quiz_id))
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.patch("/{quiz_id}", response_model=QuizResponse, summary="Edit a quiz")
async def update_quiz(
    quiz_id: str,
    request: QuizUpdateRequest,
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
) -> QuizResponse:
    try:
        quiz = await quizzes.update_quiz(current_user.id, quiz_id, request)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except QuizValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return QuizResponse.model_validate(quiz)


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a quiz")
async def delete_quiz(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
) -> Response:
    try:
        await quizzes.delete_quiz(current_user.id, quiz_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{quiz_id}/attempts",
    status_code=status.HTTP_201_CREATED,
    summary="Submit answers",
)
async def submit_attempt(
    quiz_id: str,
    request: AttemptSubmitRequest,
    current_user: CurrentUser = Depends(require_auth),
    attempts: QuizAttemptService = Depends(get_attempt_service),
    registry: SessionTrackerRegistry = Depends(get_tracker_registry),
    client_id: str | None = Header(default=None, alias=CLIENT_ID_HEADER),
) -> dict:
    """Grade and store a submission.

    When the request names its client session, an open quiz session on
    that client is ended with the score.
    """
    timer = registry.peek(current_user.id, client_id) if client_id else None
    try:
        submission = await attempts.submit_attempt(
            current_user.id,
            quiz_id,
            request.answers,
            started_at=request.started_at,
            timer=timer,
        )
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except AttemptSaveError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e
    if client_id:
        registry.discard_idle(current_user.id, client_id)
    return submission.to_dict()


@router.get(
    "/{quiz_id}/attempts",
    response_model=list[QuizAttemptResponse],
    summary="Attempt history",
)
async def list_attempts(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    attempts: QuizAttemptService = Depends(get_attempt_service),
) -> list[QuizAttemptResponse]:
    rows = await attempts.get_attempts(current_user.id, quiz_id)
    return [QuizAttemptResponse.model_validate(row) for row in rows]


@router.get("/{quiz_id}/progress", summary="Progress across attempts")
async def quiz_progress(
    quiz_id: str,
    current_user: CurrentUser = Depends(require_auth),
    quizzes: QuizService = Depends(get_quiz_service),
    attempts: QuizAttemptService = Depends(get_attempt_service),
) -> dict:
    try:
        quiz = await quizzes.get_quiz(current_user.id, quiz_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    rows = await attempts.get_attempts(current_user.id, quiz_id)
    return build_quiz_progress(quiz, rows).to_dict()
