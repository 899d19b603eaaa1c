from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from recipe_service.core.errors import SchemaError
from recipe_service.db import base

logger = logging.getLogger(__name__)


async def _check_foreign_keys(conn: AsyncConnection) -> None:
    if conn.dialect.name != "sqlite":
        return
    enabled = await conn.scalar(text("PRAGMA foreign_keys"))
    if not enabled:
        raise SchemaError("Foreign key enforcement is disabled on this connection")


async def initialize_schema(engine: AsyncEngine) -> None:
    """Create missing tables and indexes; safe to run on every startup."""
    import recipe_service.models  # noqa: F401 registers models on Base.metadata before create_all.

    try:
        async with engine.begin() as conn:
            await _check_foreign_keys(conn)
            # create_all checks existence first, tables are created in FK dependency order.
            await conn.run_sync(base.Base.metadata.create_all)
    except SQLAlchemyError as exc:
        logger.error("Database initialization failed: %s", exc)
        raise SchemaError(str(exc)) from exc
    logger.info("Database initialized")
