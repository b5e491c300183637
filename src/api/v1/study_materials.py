# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study material API endpoints.

This module provides endpoints for generated study material:
- POST /generate - Generate a summary, flashcards or notes from a file
- GET / - List material
- GET /{material_id} - Get material
- PATCH /{material_id} - Rename material
- DELETE /{material_id} - Delete material
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError

from src.api.dependencies import (
    get_study_material_service,
    get_study_session_service,
    require_auth,
)
from src.api.middleware.auth import CurrentUser
from src.domains.library import FileNotFoundInLibraryError
from src.domains.study_materials import (
    InsufficientContentError,
    StudyMaterialNotFoundError,
    StudyMaterialService,
    StudyMaterialValidationError,
)
from src.domains.study_materials.schemas import (
    StudyMaterialGenerateRequest,
    StudyMaterialRenameRequest,
    StudyMaterialResponse,
)
from src.domains.study_sessions import StudySessionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=StudyMaterialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate study material",
)
async def generate_study_material(
    request: StudyMaterialGenerateRequest,
    current_user: CurrentUser = Depends(require_auth),
    materials: StudyMaterialService = Depends(get_study_material_service),
    sessions: StudySessionService = Depends(get_study_session_service),
) -> StudyMaterialResponse:
    """Generate material. Falls back to placeholder content if generation fails."""
    try:
        generated = await materials.generate_study_material(current_user.id, request)
    except FileNotFoundInLibraryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InsufficientContentError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    material = generated.material
    try:
        await sessions.record_activity(
            current_user.id,
            "generate",
            resource_id=material.id,
            resource_name=material.title,
            metadata={"material_type": material.material_type},
        )
    except SQLAlchemyError as e:
        logger.warning("Could not record generation activity: %s", str(e))

    response = StudyMaterialResponse.model_validate(material)
    response.is_placeholder = generated.is_placeholder
    return response


@router.get("", response_model=list[StudyMaterialResponse], summary="List study material")
async def list_study_materials(
    current_user: CurrentUser = Depends(require_auth),
    materials: StudyMaterialService = Depends(get_study_material_service),
) -> list[StudyMaterialResponse]:
    rows = await materials.list_materials(current_user.id)
    return [StudyMaterialResponse.model_validate(row) for row in rows]


@router.get("/{material_id}", response_model=StudyMaterialResponse, summary="Get study material")
async def get_study_material(
    material_id: str,
    current_user: CurrentUser = Depends(require_auth),
    materials: StudyMaterialService = Depends(get_study_material_service),
) -> StudyMaterialResponse:
    try:
        material = await materials.get_material(current_user.id, material_id)
    except StudyMaterialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return StudyMaterialResponse.model_validate(material)


@router.patch("/{material_id}", response_model=StudyMaterialResponse, summary="Rename study material")
async def rename_study_material(
    material_id: str,
    request: StudyMaterialRenameRequest,
    current_user: CurrentUser = Depends(require_auth),
    materials: StudyMaterialService = Depends(get_study_material_service),
) -> StudyMaterialResponse:
    try:
        material = await materials.rename_material(current_user.id, material_id, request.title)
    except StudyMaterialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StudyMaterialValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return StudyMaterialResponse.model_validate(material)


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete study material")
async def delete_study_material(
    material_id: str,
    current_user: CurrentUser = Depends(require_auth),
    materials: StudyMaterialService = Depends(get_study_material_service),
) -> Response:
    try:
        await materials.delete_material(current_user.id, material_id)
    except StudyMaterialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
