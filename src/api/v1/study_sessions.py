# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study session tracking endpoints.

This module provides endpoints for activity timers:
- POST /start - Start tracking an activity (ends any open one)
- POST /end - End the open activity
- POST /flush - End the open activity on page unload
- GET /active - State of a client's timer
- GET / - Session history
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import (
    get_study_session_service,
    get_tracker_registry,
    require_auth,
)
from src.api.middleware.auth import CurrentUser
from src.domains.study_sessions import (
    InvalidActivityTypeError,
    SessionTrackerRegistry,
    StudySessionService,
)
from src.domains.study_sessions.schemas import (
    ActiveSessionResponse,
    SessionEndRequest,
    SessionFlushRequest,
    SessionStartRequest,
    StudySessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/start", response_model=ActiveSessionResponse, summary="Start an activity")
async def start_session(
    request: SessionStartRequest,
    current_user: CurrentUser = Depends(require_auth),
    registry: SessionTrackerRegistry = Depends(get_tracker_registry),
) -> ActiveSessionResponse:
    timer = registry.get(current_user.id, request.client_id)
    try:
        open_session = await timer.start(
            request.activity_type,
            resource_id=request.resource_id,
            resource_name=request.resource_name,
            file_id=request.file_id,
            metadata=request.metadata,
        )
    except InvalidActivityTypeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return ActiveSessionResponse(
        active=True,
        session_id=open_session.session_id,
        activity_type=open_session.activity_type,
        started_at=open_session.started_at,
        resource_id=open_session.resource_id,
    )


@router.post("/end", response_model=StudySessionResponse | None, summary="End the open activity")
async def end_session(
    request: SessionEndRequest,
    current_user: CurrentUser = Depends(require_auth),
    registry: SessionTrackerRegistry = Depends(get_tracker_registry),
) -> StudySessionResponse | None:
    session = await registry.flush(current_user.id, request.client_id, metadata=request.metadata)
    return StudySessionResponse.model_validate(session) if session else None


@router.post("/flush", status_code=status.HTTP_204_NO_CONTENT, summary="Flush on page unload")
async def flush_session(
    request: SessionFlushRequest,
    current_user: CurrentUser = Depends(require_auth),
    registry: SessionTrackerRegistry = Depends(get_tracker_registry),
) -> None:
    await registry.flush(current_user.id, request.client_id)


@router.get("/active", response_model=ActiveSessionResponse, summary="Timer state")
async def active_session(
    client_id: str = Query(..., description="Client session identifier."),
    current_user: CurrentUser = Depends(require_auth),
    registry: SessionTrackerRegistry = Depends(get_tracker_registry),
) -> ActiveSessionResponse:
    timer = registry.peek(current_user.id, client_id)
    if timer is None or timer.current is None:
        return ActiveSessionResponse(active=False)
    current = timer.current
    return ActiveSessionResponse(
        active=True,
        session_id=current.session_id,
        activity_type=current.activity_type,
        started_at=current.started_at,
        resource_id=current.resource_id,
    )


@router.get("", response_model=list[StudySessionResponse], summary="Session history")
async def session_history(
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_auth),
    sessions: StudySessionService = Depends(get_study_session_service),
) -> list[StudySessionResponse]:
    rows = await sessions.get_session_history(current_user.id, limit=limit)
    return [StudySessionResponse.model_validate(row) for row in rows]
