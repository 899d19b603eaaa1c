from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import NotFoundError
from recipe_service.db.base import new_id
from recipe_service.db.session import write_transaction
from recipe_service.models import Cuisine
from recipe_service.schemas import CuisineCreate, CuisineUpdate

logger = logging.getLogger(__name__)


class CuisineService:
    """Plain CRUD over cuisines. Names are unique; a cuisine still used by a recipe cannot be deleted."""

    async def create_cuisine(self, session: AsyncSession, payload: CuisineCreate) -> str:
        cuisine_id = new_id()
        async with write_transaction(session):
            session.add(Cuisine(id=cuisine_id, name=payload.name, description=payload.description or None))
            await session.flush()
        logger.info("Created cuisine %s (%s)", cuisine_id, payload.name)
        return cuisine_id

    async def list_cuisines(self, session: AsyncSession) -> list[Cuisine]:
        result = await session.execute(select(Cuisine).order_by(Cuisine.name))
        return list(result.scalars().all())

    async def get_cuisine_by_id(self, session: AsyncSession, cuisine_id: str) -> Cuisine | None:
        return await session.get(Cuisine, cuisine_id, populate_existing=True)

    async def get_cuisine_by_name(self, session: AsyncSession, name: str) -> Cuisine | None:
        result = await session.execute(select(Cuisine).where(Cuisine.name == name))
        return result.scalar_one_or_none()

    async def update_cuisine(self, session: AsyncSession, cuisine_id: str, payload: CuisineUpdate) -> None:
        values = payload.model_dump(exclude_none=True)
        async with write_transaction(session):
            if await self.get_cuisine_by_id(session, cuisine_id) is None:
                raise NotFoundError("Cuisine", cuisine_id)
            if values:
                await session.execute(update(Cuisine).where(Cuisine.id == cuisine_id).values(**values))

    async def delete_cuisine(self, session: AsyncSession, cuisine_id: str) -> None:
        async with write_transaction(session):
            result = await session.execute(delete(Cuisine).where(Cuisine.id == cuisine_id))
            if result.rowcount == 0:
                raise NotFoundError("Cuisine", cuisine_id)
        logger.info("Deleted cuisine %s", cuisine_id)


cuisine_service = CuisineService()
