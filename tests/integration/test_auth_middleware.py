# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for authentication and request context middleware.

Tests the middleware components in isolation from the database.
"""

from datetime import timedelta

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from src.api.dependencies import require_auth
from src.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user
from src.api.middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware
from src.domains.auth.jwt import JWTManager


@pytest.fixture
def app(jwt_manager: JWTManager) -> FastAPI:
    application = FastAPI()
    application.add_middleware(AuthMiddleware, jwt_manager=jwt_manager)
    application.add_middleware(RequestContextMiddleware)

    @application.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @application.get("/whoami")
    async def whoami(request: Request) -> dict:
        user = get_current_user(request)
        return {"user_id": user.id if user else None, "email": user.email if user else None}

    @application.get("/private")
    async def private(user: CurrentUser = Depends(require_auth)) -> dict:
        return {"user_id": user.id}

    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_public_path_bypasses_auth(self, client: TestClient) -> None:
        """Test that public paths don't require authentication."""
        response = client.get("/health", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 200

    def test_valid_token_sets_user(self, client: TestClient, issue_token) -> None:
        """Test that a valid Bearer token populates request.state.user."""
        token = issue_token("user-42", email="learner@example.com")

        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"user_id": "user-42", "email": "learner@example.com"}

    def test_missing_token_leaves_user_empty(self, client: TestClient) -> None:
        assert client.get("/whoami").json()["user_id"] is None

    @pytest.mark.parametrize(
        "header",
        ["Bearer not-a-jwt", "Basic dXNlcjpwYXNz", "Bearer", "token abc def"],
    )
    def test_unusable_header(self, client: TestClient, header: str) -> None:
        assert client.get("/whoami", headers={"Authorization": header}).json()["user_id"] is None

    def test_expired_token(self, client: TestClient, issue_token) -> None:
        token = issue_token("user-42", expires_in=timedelta(minutes=-1))

        response = client.get("/private", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_protected_route(self, client: TestClient, issue_token) -> None:
        token = issue_token("user-42")

        response = client.get("/private", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "user-42"}


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware."""

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})

        assert response.headers[REQUEST_ID_HEADER] == "req-123"

    def test_request_id_is_generated(self, client: TestClient) -> None:
        response = client.get("/health")

        assert len(response.headers[REQUEST_ID_HEADER]) == 32
