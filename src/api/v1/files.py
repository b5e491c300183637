# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""File library API endpoints.

This module provides endpoints for uploaded documents:
- POST / - Upload a document
- GET / - List documents
- GET /{file_id} - Get a document
- GET /{file_id}/download-url - Create a signed download URL
- GET /download - Download through a signed URL (no bearer token)
- DELETE /{file_id} - Delete a document and its stored object
"""

import logging
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError

from src.api.dependencies import (
    get_file_service,
    get_storage,
    get_study_session_service,
    require_auth,
)
from src.api.middleware.auth import CurrentUser
from src.domains.library import FileNotFoundInLibraryError, FileService, FileValidationError
from src.domains.library.schemas import DownloadURLResponse, FileResponse
from src.domains.study_sessions import StudySessionService
from src.infrastructure.database.models import StoredFile
from src.infrastructure.storage import ObjectNotFoundError, ObjectStorage, SignedURLError, StorageError

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(file: StoredFile) -> FileResponse:
    return FileResponse(
        id=file.id,
        original_name=file.original_name,
        mime_type=file.mime_type,
        file_size=file.file_size,
        subject=file.subject,
        status=file.status,
        page_count=file.page_count,
        has_text=bool(file.content_text),
        uploaded_at=file.uploaded_at,
    )


@router.post(
    "",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
)
async def upload_file(
    upload: UploadFile = File(..., description="PDF, DOCX, DOC or TXT document."),
    current_user: CurrentUser = Depends(require_auth),
    files: FileService = Depends(get_file_service),
    sessions: StudySessionService = Depends(get_study_session_service),
) -> FileResponse:
    data = await upload.read()
    mime_type = upload.content_type or "application/octet-stream"
    try:
        file = await files.upload_file(
            current_user.id,
            upload.filename or "document",
            mime_type,
            data,
        )
    except FileValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    except StorageError as e:
        logger.error("Upload failed for user %s: %s", current_user.id, str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to store the file. Please try again.",
        ) from e

    try:
        await sessions.record_activity(
            current_user.id,
            "upload",
            resource_id=file.id,
            resource_name=file.original_name,
            metadata={"file_type": PurePath(file.original_name).suffix.lstrip(".")},
        )
    except SQLAlchemyError as e:
        logger.warning("Could not record upload activity: %s", str(e))

    return _to_response(file)


@router.get("", response_model=list[FileResponse], summary="List documents")
async def list_files(
    current_user: CurrentUser = Depends(require_auth),
    files: FileService = Depends(get_file_service),
) -> list[FileResponse]:
    return [_to_response(file) for file in await files.list_files(current_user.id)]


@router.get("/download", summary="Download through a signed URL")
async def download_file(
    token: str = Query(..., description="Signed URL token."),
    storage: ObjectStorage = Depends(get_storage),
) -> Response:
    try:
        object_path = storage.verify_signed_token(token)
        data = await storage.download(object_path)
    except SignedURLError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from e
    except ObjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from e

    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{PurePath(object_path).name}"'},
    )


@router.get("/{file_id}", response_model=FileResponse, summary="Get a document")
async def get_file(
    file_id: str,
    current_user: CurrentUser = Depends(require_auth),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    try:
        return _to_response(await files.get_file(current_user.id, file_id))
    except FileNotFoundInLibraryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get(
    "/{file_id}/download-url",
    response_model=DownloadURLResponse,
    summary="Create a signed download URL",
)
async def create_download_url(
    file_id: str,
    expires_in: int = Query(60, ge=10, le=3600, description="Lifetime in seconds."),
    current_user: CurrentUser = Depends(require_auth),
    files: FileService = Depends(get_file_service),
) -> DownloadURLResponse:
    try:
        url = await files.create_download_url(current_user.id, file_id, expires_in)
    except FileNotFoundInLibraryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return DownloadURLResponse(url=url, expires_in=expires_in)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a document")
async def delete_file(
    file_id: str,
    current_user: CurrentUser = Depends(require_auth),
    files: FileService = Depends(get_file_service),
) -> Response:
    try:
        await files.delete_file(current_user.id, file_id)
    except FileNotFoundInLibraryError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StorageError as e:
        logger.error("Failed to delete stored object for %s: %s", file_id, str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete the file. Please try again.",
        ) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
