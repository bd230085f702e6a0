# app/database.py
from typing import Any

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Relational store connection pool
#
# - pool_size / max_overflow : bounded pool shared by all requests;
#                              each request checks out one connection
# - pool_pre_ping=True       : validate connections before using them
# - sslmode=require          : only appended when DB_SSL_REQUIRE is set
#
# SQLite (local dev / tests) uses a single shared connection instead,
# since it does not accept pool sizing arguments.
# ---------------------------------------------------------


def _build_url(url: str) -> str:
    if settings.DB_SSL_REQUIRE and "sslmode=" not in url:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}sslmode=require"
    return url


def _engine_kwargs(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


db_url = _build_url(settings.DATABASE_URL)

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    **_engine_kwargs(db_url),
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    The session (and its pooled connection) belongs to a single request
    and is closed on every exit path, including errors.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
