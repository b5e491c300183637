# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Text extraction from uploaded documents.

PDF pages are read with pypdf, DOCX paragraphs with python-docx and plain
text is decoded as UTF-8. Legacy .doc files are stored without text.
"""

import io
import logging
import re
import zipfile
from dataclasses import dataclass

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

MIN_TEXT_LENGTH = 50

_WHITESPACE = re.compile(r"[ \t\r\f\v]+")


class TextExtractionError(Exception):
    """Raised when a document cannot be read."""

    pass


@dataclass
class ExtractedText:
    """Text content of a document."""

    text: str | None
    page_count: int | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.text) and len(self.text) >= MIN_TEXT_LENGTH


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _extract_pdf(data: bytes) -> ExtractedText:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = []
        for number, page in enumerate(reader.pages, start=1):
            page_text = _normalize(page.extract_text() or "")
            if page_text:
                pages.append(page_text)
            else:
                logger.debug("No text on PDF page %d", number)
        return ExtractedText(text="\n\n".join(pages) or None, page_count=len(reader.pages))
    except PdfReadError as e:
        raise TextExtractionError(f"Failed to read PDF: {e}") from e


def _extract_docx(data: bytes) -> ExtractedText:
    try:
        document = Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise TextExtractionError(f"Failed to read DOCX: {e}") from e
    paragraphs = [_normalize(p.text) for p in document.paragraphs]
    return ExtractedText(text="\n".join(p for p in paragraphs if p) or None)


def extract_text(data: bytes, mime_type: str) -> ExtractedText:
    """Extract text from a document.

    Args:
        data: Document bytes.
        mime_type: MIME type of the document.

    Returns:
        ExtractedText, with text None when nothing could be read.

    Raises:
        TextExtractionError: If the document is corrupt.
    """
    if mime_type == PDF_MIME:
        return _extract_pdf(data)
    if mime_type == DOCX_MIME:
        return _extract_docx(data)
    if mime_type == TEXT_MIME:
        text = data.decode("utf-8", errors="replace").strip()
        return ExtractedText(text=text or None)

    logger.info("No text extraction for %s documents", mime_type)
    return ExtractedText(text=None)
