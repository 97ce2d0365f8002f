# app/db/engine.py

from functools import lru_cache
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.config import Settings, get_settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement off
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Build an async engine from settings.

    Callers own the returned engine and should `await engine.dispose()` when
    done with it.
    """
    settings = settings or get_settings()
    url = settings.database_url
    kwargs = {"echo": settings.db_echo, "pool_pre_ping": True}

    if url.startswith("postgresql"):
        connect_args = {
            "timeout": settings.db_connect_timeout,
            "server_settings": {"application_name": "invoice-dashboard"},
        }
        if settings.is_production:
            connect_args["ssl"] = "require"
        kwargs.update(
            pool_size=settings.db_pool_size,
            pool_recycle=settings.db_pool_recycle,
            connect_args=connect_args,
        )
    elif url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": settings.db_connect_timeout}

    engine = create_async_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Process-wide engine used by the API's dependencies."""
    return create_engine()
