# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Study preference endpoints.

- GET / - Current preferences (created with defaults on first read)
- PATCH / - Update preferences
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_preference_service, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.preferences import PreferenceService
from src.domains.preferences.schemas import PreferenceResponse, PreferenceUpdateRequest

router = APIRouter()


@router.get("", response_model=PreferenceResponse, summary="Get preferences")
async def get_preferences(
    current_user: CurrentUser = Depends(require_auth),
    preferences: PreferenceService = Depends(get_preference_service),
) -> PreferenceResponse:
    preference = await preferences.get_or_create(current_user.id)
    return PreferenceResponse.model_validate(preference)


@router.patch("", response_model=PreferenceResponse, summary="Update preferences")
async def update_preferences(
    request: PreferenceUpdateRequest,
    current_user: CurrentUser = Depends(require_auth),
    preferences: PreferenceService = Depends(get_preference_service),
) -> PreferenceResponse:
    preference = await preferences.update(current_user.id, request)
    return PreferenceResponse.model_validate(preference)
