# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alembic environment for the StudyPilot schema.

One schema holds every table: files, reviewers, quizzes, quiz_attempts,
the question-type performance tables, study_sessions, learning_streaks and
user_preferences. The URL is built from the DB_* variables unless
DATABASE_URL overrides it (for example a sqlite+aiosqlite URL locally).

Usage:
    alembic upgrade head
    DATABASE_URL=sqlite+aiosqlite:///./dev.db alembic upgrade head
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from src.core.config.settings import get_settings
from src.infrastructure.database.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    return os.environ.get("DATABASE_URL") or get_settings().database.url


def _configure(url: str, **options) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **options,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    url = database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_on(connection: Connection) -> None:
    _configure(str(connection.engine.url), connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply migrations through an async engine."""
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = database_url()
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
