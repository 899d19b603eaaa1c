from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from recipe_service.core.errors import ConstraintError

BUSY_TIMEOUT_MS = 5000
# Execution option read by the "begin" hook: DEFERRED for reads, IMMEDIATE for write units.
BEGIN_MODE_OPTION = "sqlite_begin_mode"


def _enable_sqlite_pragmas(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        # The driver's implicit BEGIN breaks SAVEPOINT nesting; "begin" below emits it instead.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    engine = create_async_engine(database_url, echo=echo)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_pragmas(engine)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def write_transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything written inside the block, or nothing.

    A read transaction left open by earlier lookups is ended first and the block
    runs under ``BEGIN IMMEDIATE``: SQLite refuses to upgrade a stale WAL snapshot
    to a writer, so the write lock has to be taken before the first read of the
    unit. Concurrent writers wait up to ``BUSY_TIMEOUT_MS`` for each other.

    Integrity failures surface as ``ConstraintError``; any other exception is
    re-raised after the rollback.
    """
    if session.in_transaction():
        await session.commit()
    await session.connection(execution_options={BEGIN_MODE_OPTION: "IMMEDIATE"})
    try:
        yield session
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConstraintError(str(exc.orig)) from exc
    except BaseException:
        await session.rollback()
        raise


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request, taken from the factory created at startup."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
