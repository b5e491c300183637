# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""File library service.

This module provides the FileService that handles:
- Upload validation, storage and text extraction
- Subject detection for uploaded documents
- Listing, signed download URLs and deletion

Example:
    >>> service = FileService(db, storage)
    >>> file = await service.upload_file(user_id, "notes.pdf", "application/pdf", data)
    >>> url = await service.create_download_url(user_id, file.id)
"""

import logging
from pathlib import PurePath

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import StorageSettings
from src.domains.library.extraction import TextExtractionError, extract_text
from src.domains.library.subjects import detect_subject
from src.domains.library.validation import SUPPORTED_FILE_TYPES, validate_upload
from src.infrastructure.database.models import StoredFile
from src.infrastructure.database.models.base import new_uuid
from src.infrastructure.storage import ObjectNotFoundError, ObjectStorage

logger = logging.getLogger(__name__)


class FileServiceError(Exception):
    """Base exception for file service errors."""

    pass


class FileNotFoundInLibraryError(FileServiceError):
    """Raised when a file does not exist or belongs to another user."""

    pass


class FileContentUnavailableError(FileServiceError):
    """Raised when no text can be obtained for a file."""

    pass


class FileService:
    """Service for the user's document library.

    Attributes:
        _db: Async database session.
        _storage: Object storage bucket.
        _settings: Upload limits.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: ObjectStorage,
        settings: StorageSettings | None = None,
    ) -> None:
        self._db = db
        self._storage = storage
        self._settings = settings or StorageSettings()

    async def upload_file(
        self,
        user_id: str,
        filename: str,
        mime_type: str,
        data: bytes,
    ) -> StoredFile:
        """Validate, store and index an uploaded document.

        Args:
            user_id: Owner of the file.
            filename: Original file name.
            mime_type: Declared MIME type.
            data: File bytes.

        Returns:
            The created StoredFile row.

        Raises:
            FileValidationError: If the type or size is not accepted.
            StorageError: If the object cannot be written.
        """
        validate_upload(
            mime_type,
            len(data),
            max_bytes=self._settings.max_upload_bytes,
            allowed_types=self._settings.allowed_mime_types,
        )

        extension = SUPPORTED_FILE_TYPES.get(mime_type) or PurePath(filename).suffix
        storage_path = f"{user_id}/{new_uuid()}{extension}"
        await self._storage.upload(storage_path, data, mime_type)

        try:
            extracted = extract_text(data, mime_type)
            status = "processed" if extracted.text else "uploaded"
        except TextExtractionError as e:
            logger.warning("Text extraction failed for %s: %s", filename, str(e))
            extracted = None
            status = "failed"

        content_text = extracted.text if extracted else None
        file = StoredFile(
            user_id=user_id,
            storage_path=storage_path,
            original_name=PurePath(filename).name,
            mime_type=mime_type,
            file_size=len(data),
            content_text=content_text,
            page_count=extracted.page_count if extracted else None,
            subject=detect_subject(content_text, filename),
            status=status,
        )
        self._db.add(file)
        await self._db.commit()
        await self._db.refresh(file)

        logger.info(
            "File uploaded: %s (user=%s, size=%d, subject=%s, status=%s)",
            file.id,
            user_id,
            file.file_size,
            file.subject,
            status,
        )
        return file

    async def list_files(self, user_id: str) -> list[StoredFile]:
        """Files of the user, newest first."""
        stmt = (
            select(StoredFile)
            .where(StoredFile.user_id == user_id)
            .order_by(desc(StoredFile.uploaded_at))
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_file(self, user_id: str, file_id: str) -> StoredFile:
        """Get one of the user's files.

        Raises:
            FileNotFoundInLibraryError: If missing or owned by someone else.
        """
        stmt = select(StoredFile).where(StoredFile.id == file_id, StoredFile.user_id == user_id)
        result = await self._db.execute(stmt)
        file = result.scalar_one_or_none()
        if file is None:
            raise FileNotFoundInLibraryError(f"File {file_id} not found")
        return file

    async def get_file_content(self, user_id: str, file_id: str) -> tuple[StoredFile, str]:
        """Text of a file, extracted again from storage if it was not stored.

        Raises:
            FileNotFoundInLibraryError: If the file does not exist.
            FileContentUnavailableError: If no text can be obtained.
        """
        file = await self.get_file(user_id, file_id)
        if file.content_text:
            return file, file.content_text

        try:
            data = await self._storage.download(file.storage_path)
            extracted = extract_text(data, file.mime_type)
        except (ObjectNotFoundError, TextExtractionError) as e:
            raise FileContentUnavailableError(f"Could not read content of {file.original_name}") from e

        if not extracted.text:
            raise FileContentUnavailableError(f"No text content found in {file.original_name}")

        file.content_text = extracted.text
        file.page_count = extracted.page_count or file.page_count
        file.status = "processed"
        await self._db.commit()
        return file, extracted.text

    async def create_download_url(self, user_id: str, file_id: str, expires_in: int | None = None) -> str:
        """Short-lived signed URL for downloading a file."""
        file = await self.get_file(user_id, file_id)
        return self._storage.create_signed_url(file.storage_path, expires_in)

    async def delete_file(self, user_id: str, file_id: str) -> None:
        """Remove the storage object, then the row.

        Raises:
            FileNotFoundInLibraryError: If the file does not exist.
            StorageError: If the object cannot be removed. The row is kept.
        """
        file = await self.get_file(user_id, file_id)
        await self._storage.delete(file.storage_path)
        await self._db.delete(file)
        await self._db.commit()
        logger.info("File deleted: %s (user=%s)", file_id, user_id)
