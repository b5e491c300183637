# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: JWT authentication middleware.
    RequestContextMiddleware: Request id and logging context.
    CurrentUser: Authenticated user attached to the request.
"""

from src.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user
from src.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RequestContextMiddleware",
    "get_current_user",
]
