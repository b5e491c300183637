# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Object storage infrastructure."""

from src.infrastructure.storage.bucket import (
    ObjectNotFoundError,
    ObjectStorage,
    SignedURLError,
    StorageError,
)

__all__ = [
    "ObjectStorage",
    "StorageError",
    "ObjectNotFoundError",
    "SignedURLError",
]
