# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Uploaded documents and the study materials generated from them."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, String, Text

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, new_uuid
from src.utils.datetime import utc_now


class StoredFile(Base):
    """An uploaded document.

    The row owns its storage object: deleting the file removes the object
    from the bucket before the row goes.
    """

    __tablename__ = "files"
    __table_args__ = (Index("ix_files_user_uploaded", "user_id", "uploaded_at"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    storage_path = Column(String(512), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(128), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    content_text = Column(Text, nullable=True)
    page_count = Column(Integer, nullable=True)
    subject = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="uploaded")
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class StudyMaterial(Base, TimestampMixin):
    """A generated summary, flashcard set or note list.

    Kept in the "reviewers" table for compatibility with existing data.
    """

    __tablename__ = "reviewers"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    file_id = Column(String(36), ForeignKey("files.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    material_type = Column(String(20), nullable=False)
    content = Column(JSONType, nullable=False)
