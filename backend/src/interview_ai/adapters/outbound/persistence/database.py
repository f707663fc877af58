"""SQLAlchemy async database engine and session factory."""

from __future__ import annotations

import ssl
from typing import Any

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from interview_ai.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    url = settings.database_url

    if settings.uses_sqlite:
        # Concurrent writers wait on the file lock instead of failing fast
        return create_async_engine(
            url,
            echo=settings.app_debug,
            connect_args={"timeout": 30},
        )

    connect_args: dict[str, Any] = {}

    # asyncpg doesn't like 'sslmode' in the query string, it wants 'ssl' in connect_args
    if "sslmode=" in url:
        parsed_url = make_url(url)
        query = dict(parsed_url.query)
        ssl_mode = query.pop("sslmode", "require")
        url = parsed_url.set(query=query).render_as_string(hide_password=False)

        if ssl_mode in ("require", "verify-full", "verify-ca"):
            ctx = ssl.create_default_context()
            if ssl_mode == "require":
                ctx.check_hostname = False
                ctx.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ctx

    return create_async_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.app_debug,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
