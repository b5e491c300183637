# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Object storage for uploaded documents.

Objects live under ``<root_path>/<bucket>/<object path>``. Downloads are
handed out as short-lived signed URLs: the URL carries a JWS token naming
the object and an expiry, verified again when the URL is used.

Blocking filesystem calls run in a worker thread so the event loop never
stalls on large uploads.

Example:
    storage = ObjectStorage(settings.storage, settings.auth)
    await storage.upload("user-1/123_notes.pdf", data, "application/pdf")
    url = storage.create_signed_url("user-1/123_notes.pdf")
"""

import asyncio
import logging
from datetime import timedelta
from pathlib import Path, PurePosixPath
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from src.core.config.settings import AuthSettings, StorageSettings
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SIGNED_URL_PREFIX = "/api/v1/files/download"
_TOKEN_PURPOSE = "storage-download"


class StorageError(Exception):
    """Base exception for object storage operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying exception, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ObjectNotFoundError(StorageError):
    """Raised when an object does not exist in the bucket."""

    pass


class SignedURLError(StorageError):
    """Raised when a signed URL token is invalid or expired."""

    pass


class ObjectStorage:
    """Filesystem-backed storage bucket with signed download URLs."""

    def __init__(self, settings: StorageSettings, auth: AuthSettings) -> None:
        self._settings = settings
        self._secret = auth.secret_key.get_secret_value()
        self._algorithm = auth.algorithm
        self._root = Path(settings.root_path) / settings.bucket

    @property
    def bucket(self) -> str:
        return self._settings.bucket

    def _resolve(self, object_path: str) -> Path:
        """Map an object path to a file inside the bucket.

        Raises:
            StorageError: If the path escapes the bucket.
        """
        relative = PurePosixPath(object_path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise StorageError(f"Invalid object path: {object_path}")
        return self._root.joinpath(*relative.parts)

    async def upload(self, object_path: str, data: bytes, content_type: str) -> str:
        """Write an object, replacing any previous content.

        Args:
            object_path: Path of the object inside the bucket.
            data: Object bytes.
            content_type: MIME type, recorded in the log only.

        Returns:
            The object path.

        Raises:
            StorageError: If the write fails.
        """
        target = self._resolve(object_path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise StorageError(f"Failed to upload {object_path}", e) from e

        logger.info(
            "Stored object %s (%s, %d bytes) in bucket %s",
            object_path,
            content_type,
            len(data),
            self.bucket,
        )
        return object_path

    async def download(self, object_path: str) -> bytes:
        """Read an object.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageError: If the read fails.
        """
        target = self._resolve(object_path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"Object not found: {object_path}", e) from e
        except OSError as e:
            raise StorageError(f"Failed to download {object_path}", e) from e

    async def delete(self, object_path: str) -> bool:
        """Remove an object.

        Returns:
            True if an object was removed, False if it did not exist.

        Raises:
            StorageError: If removal fails.
        """
        target = self._resolve(object_path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            logger.warning("Object %s already absent from bucket %s", object_path, self.bucket)
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {object_path}", e) from e

        logger.info("Deleted object %s from bucket %s", object_path, self.bucket)
        return True

    async def exists(self, object_path: str) -> bool:
        return await asyncio.to_thread(self._resolve(object_path).is_file)

    def create_signed_url(self, object_path: str, expires_in: int | None = None) -> str:
        """Create a short-lived download URL for an object.

        Args:
            object_path: Path of the object inside the bucket.
            expires_in: Lifetime in seconds (defaults to settings).

        Returns:
            Relative URL carrying a signed token.
        """
        self._resolve(object_path)
        lifetime = expires_in if expires_in is not None else self._settings.signed_url_expire_seconds
        now = utc_now()
        token = jwt.encode(
            {
                "purpose": _TOKEN_PURPOSE,
                "bucket": self.bucket,
                "path": object_path,
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(seconds=lifetime)).timestamp()),
            },
            self._secret,
            algorithm=self._algorithm,
        )
        return f"{SIGNED_URL_PREFIX}?token={token}"

    def verify_signed_token(self, token: str) -> str:
        """Validate a signed URL token and return the object path.

        Raises:
            SignedURLError: If the token is expired, tampered with or for
                another bucket.
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise SignedURLError("Signed URL has expired", e) from e
        except JWTError as e:
            raise SignedURLError("Invalid signed URL", e) from e

        if claims.get("purpose") != _TOKEN_PURPOSE or claims.get("bucket") != self.bucket:
            raise SignedURLError("Invalid signed URL")
        return claims["path"]
