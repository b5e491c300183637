# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study material service.

This module provides the StudyMaterialService that handles:
- Generating summaries, flashcards and notes from a file
- Falling back to placeholder content when generation fails
- Listing, renaming and deleting stored material

Content problems (no text, text too short) are reported to the caller;
only generation failures fall back to placeholder content.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.generation import ContentGenerator, GenerationError
from src.domains.library.service import FileContentUnavailableError, FileService
from src.domains.study_materials.placeholders import placeholder_content, type_label
from src.domains.study_materials.schemas import StudyMaterialGenerateRequest
from src.infrastructure.database.models import StudyMaterial

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100


class StudyMaterialError(Exception):
    """Base exception for study material errors."""

    pass


class StudyMaterialNotFoundError(StudyMaterialError):
    """Raised when the material does not exist for the user."""

    pass


class InsufficientContentError(StudyMaterialError):
    """Raised when the source file has too little text."""

    pass


class StudyMaterialValidationError(StudyMaterialError):
    """Raised for invalid edits."""

    pass


@dataclass
class GeneratedMaterial:
    """A stored material and whether it holds placeholder content."""

    material: StudyMaterial
    is_placeholder: bool


class StudyMaterialService:
    """Service for generated study material.

    Attributes:
        _db: Async database session.
        _files: File library used to read source text.
        _generator: Content generator.
    """

    def __init__(
        self,
        db: AsyncSession,
        files: FileService | None = None,
        generator: ContentGenerator | None = None,
    ) -> None:
        self._db = db
        self._files = files
        self._generator = generator

    async def generate_study_material(
        self,
        user_id: str,
        request: StudyMaterialGenerateRequest,
    ) -> GeneratedMaterial:
        """Generate and store study material for one of the user's files.

        Raises:
            FileNotFoundInLibraryError: If the file does not exist.
            InsufficientContentError: If the file has no or too little text.
        """
        if self._files is None or self._generator is None:
            raise StudyMaterialError("Study material generation is not configured")

        file = await self._files.get_file(user_id, request.file_id)
        content = await self._read_content(user_id, request.file_id)

        is_placeholder = False
        try:
            generated = await self._generator.generate_study_material(
                content, request.material_type, request.focus_areas
            )
        except GenerationError as e:
            logger.warning(
                "Generation failed for %s, storing placeholder %s: %s",
                file.id,
                request.material_type,
                str(e),
            )
            generated = placeholder_content(request.material_type, file.original_name)
            is_placeholder = True

        material = StudyMaterial(
            user_id=user_id,
            file_id=file.id,
            title=f"{type_label(request.material_type)}: {file.original_name}",
            material_type=request.material_type,
            content=generated,
        )
        self._db.add(material)
        await self._db.commit()
        await self._db.refresh(material)

        logger.info(
            "Study material created: %s (user=%s, type=%s, placeholder=%s)",
            material.id,
            user_id,
            request.material_type,
            is_placeholder,
        )
        return GeneratedMaterial(material=material, is_placeholder=is_placeholder)

    async def _read_content(self, user_id: str, file_id: str) -> str:
        try:
            _, content = await self._files.get_file_content(user_id, file_id)
        except FileContentUnavailableError as e:
            raise InsufficientContentError(
                "No content found in the file. Please ensure the PDF contains "
                "extractable text or re-upload the file."
            ) from e

        if len(content.strip()) < MIN_CONTENT_LENGTH:
            raise InsufficientContentError(
                "File content is too short for meaningful study material generation. "
                "Please upload a document with more content."
            )
        return content

    async def list_materials(self, user_id: str) -> list[StudyMaterial]:
        stmt = (
            select(StudyMaterial)
            .where(StudyMaterial.user_id == user_id)
            .order_by(desc(StudyMaterial.created_at))
        )
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def get_material(self, user_id: str, material_id: str) -> StudyMaterial:
        stmt = select(StudyMaterial).where(
            StudyMaterial.id == material_id, StudyMaterial.user_id == user_id
        )
        material = (await self._db.execute(stmt)).scalar_one_or_none()
        if material is None:
            raise StudyMaterialNotFoundError(f"Study material {material_id} not found")
        return material

    async def rename_material(self, user_id: str, material_id: str, title: str) -> StudyMaterial:
        """Change the title.

        Raises:
            StudyMaterialValidationError: If the title is blank.
            StudyMaterialNotFoundError: If the material does not exist.
        """
        if not title.strip():
            raise StudyMaterialValidationError("Title cannot be empty")
        material = await self.get_material(user_id, material_id)
        material.title = title.strip()
        await self._db.commit()
        await self._db.refresh(material)
        return material

    async def delete_material(self, user_id: str, material_id: str) -> None:
        material = await self.get_material(user_id, material_id)
        await self._db.delete(material)
        await self._db.commit()
        logger.info("Study material deleted: %s (user=%s)", material_id, user_id)
