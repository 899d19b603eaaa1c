from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import is_unique_violation
from recipe_service.db.base import new_id
from recipe_service.db.session import write_transaction
from recipe_service.models import Ingredient

logger = logging.getLogger(__name__)


async def find_ingredient_id(session: AsyncSession, name: str) -> str | None:
    result = await session.execute(select(Ingredient.id).where(Ingredient.name == name))
    return result.scalar_one_or_none()


async def get_or_create_ingredient(session: AsyncSession, name: str) -> str:
    """Return the catalog id for ``name``, inserting it inside the caller's transaction.

    Callers run this inside ``write_transaction`` so the lookup already holds the
    write lock. The insert still runs in a SAVEPOINT: if the unique constraint on
    ``ingredients.name`` fires anyway, only the insert is rolled back and the
    existing row is returned. Any other integrity failure propagates.
    """
    existing = await find_ingredient_id(session, name)
    if existing is not None:
        return existing

    ingredient = Ingredient(id=new_id(), name=name)
    try:
        async with session.begin_nested():
            session.add(ingredient)
    except IntegrityError as exc:
        if not is_unique_violation(exc, "ingredients.name"):
            raise
        existing = await find_ingredient_id(session, name)
        if existing is None:
            raise
        logger.debug("Ingredient %r was created concurrently, reusing %s", name, existing)
        return existing

    logger.debug("Added ingredient %r to catalog as %s", name, ingredient.id)
    return ingredient.id


async def resolve_ingredient(session: AsyncSession, name: str) -> str:
    """Standalone resolution committed as its own unit of work."""
    async with write_transaction(session):
        ingredient_id = await get_or_create_ingredient(session, name)
    return ingredient_id
