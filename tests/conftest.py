# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (mocked sessions, pure functions)
- Integration tests (in-memory SQLite through aiosqlite)
"""

import secrets
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import timedelta
from typing import Any

import pytest
import pytest_asyncio
from jose import jwt
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.config.settings import AuthSettings, clear_settings_cache
from src.domains.auth.jwt import JWTManager
from src.infrastructure.database.connection import build_sessionmaker
from src.infrastructure.database.models import Base
from src.utils.datetime import utc_now

TEST_SECRET = "test-secret-key-for-testing-only"


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Give every test fresh settings built from a predictable environment."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("AUTH_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("ANALYTICS_TIMEZONE", "UTC")
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Auth settings signed with the test secret."""
    return AuthSettings(secret_key=SecretStr(TEST_SECRET), algorithm="HS256", audience="authenticated")


@pytest.fixture
def jwt_manager(auth_settings: AuthSettings) -> JWTManager:
    return JWTManager(auth_settings)


def mint_token(
    settings: AuthSettings,
    user_id: str,
    email: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Sign a token shaped like the ones the hosted auth provider issues."""
    now = utc_now()
    payload = {
        "sub": user_id,
        "email": email,
        "role": "authenticated",
        "exp": int((now + expires_in).timestamp()),
        "iat": int(now.timestamp()),
        "session_id": secrets.token_urlsafe(16),
    }
    if settings.audience:
        payload["aud"] = settings.audience
    return jwt.encode(payload, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


@pytest.fixture
def issue_token(auth_settings: AuthSettings) -> Callable[..., str]:
    """Token factory. Pass settings= to sign with another configuration."""

    def issue(
        user_id: str,
        email: str | None = None,
        expires_in: timedelta = timedelta(hours=1),
        settings: AuthSettings | None = None,
    ) -> str:
        return mint_token(settings or auth_settings, user_id, email=email, expires_in=expires_in)

    return issue


@pytest.fixture
def auth_headers(issue_token: Callable[..., str], sample_user_id: str) -> dict[str, str]:
    """Bearer header for the sample user."""
    token = issue_token(sample_user_id, email="learner@example.com")
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with every table created.

    StaticPool keeps a single connection so all sessions see the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a local SQLite database)"
    )
    config.addinivalue_line("markers", "slow: mark test as slow running")


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample learner ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_questions() -> list[dict[str, Any]]:
    """Five questions covering the three tracked question types."""
    return [
        {
            "id": "q1",
            "question_text": "What is the powerhouse of the cell?",
            "question_type": "multiple_choice",
            "options": ["Nucleus", "Mitochondria", "Ribosome", "Golgi apparatus"],
            "correct_answer": "Mitochondria",
        },
        {
            "id": "q2",
            "question_text": "Which organelle makes proteins?",
            "question_type": "multiple_choice",
            "options": ["Nucleus", "Mitochondria", "Ribosome", "Vacuole"],
            "correct_answer": "Ribosome",
        },
        {
            "id": "q3",
            "question_text": "Plant cells have a cell wall.",
            "question_type": "true_false",
            "options": ["True", "False"],
            "correct_answer": "True",
        },
        {
            "id": "q4",
            "question_text": "Animal cells have chloroplasts.",
            "question_type": "true_false",
            "options": ["True", "False"],
            "correct_answer": "False",
        },
        {
            "id": "q5",
            "question_text": "Name the process plants use to make food.",
            "question_type": "identification",
            "options": None,
            "correct_answer": "Photosynthesis",
        },
    ]

