from __future__ import annotations

import logging
from typing import Iterable

from fastapi import status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import ApiError, NotFoundError
from recipe_service.db.base import new_id, utcnow
from recipe_service.db.session import write_transaction
from recipe_service.models import Recipe, RecipeCuisine, RecipeIngredient, RecipeStep
from recipe_service.schemas import IngredientInput, RecipeCreate, RecipeUpdate, StepInput
from recipe_service.services.ingredient_catalog import get_or_create_ingredient

logger = logging.getLogger(__name__)


class RecipeService:
    """Writes the recipe aggregate: the recipe row plus its cuisines, ingredients and steps.

    Every public method is one transaction. Sub-collections are never diffed: an
    update that carries ``steps`` (or ``ingredients``, ``cuisines``) deletes the
    stored rows and inserts the supplied ones.
    """

    async def load_recipe(self, session: AsyncSession, recipe_id: str) -> Recipe:
        recipe = await session.get(Recipe, recipe_id, populate_existing=True)
        if recipe is None:
            raise NotFoundError("Recipe", recipe_id)
        return recipe

    def ensure_can_manage(self, recipe: Recipe, user_id: str) -> None:
        """Only the author may edit or archive a recipe."""
        if recipe.author_id == user_id:
            return
        raise ApiError(status.HTTP_403_FORBIDDEN, "Recipe can only be changed by its author", "FORBIDDEN")

    async def _add_cuisines(self, session: AsyncSession, recipe_id: str, cuisine_ids: Iterable[str]) -> None:
        session.add_all(
            RecipeCuisine(id=new_id(), recipe_id=recipe_id, cuisine_id=cuisine_id) for cuisine_id in cuisine_ids
        )
        await session.flush()

    async def _add_ingredients(
        self, session: AsyncSession, recipe_id: str, ingredients: Iterable[IngredientInput]
    ) -> None:
        for item in ingredients:
            ingredient_id = await get_or_create_ingredient(session, item.name)
            session.add(
                RecipeIngredient(
                    id=new_id(),
                    recipe_id=recipe_id,
                    ingredient_id=ingredient_id,
                    quantity=item.quantity,
                    unit=item.unit,
                )
            )
            # Flush per row so a duplicate fails here rather than at commit.
            await session.flush()

    async def _add_steps(self, session: AsyncSession, recipe_id: str, steps: Iterable[StepInput]) -> None:
        session.add_all(
            RecipeStep(id=new_id(), recipe_id=recipe_id, step_number=step.step_number, instruction=step.instruction)
            for step in steps
        )
        await session.flush()

    async def create_recipe(self, session: AsyncSession, payload: RecipeCreate, author_id: str) -> str:
        recipe_id = new_id()
        async with write_transaction(session):
            session.add(
                Recipe(
                    id=recipe_id,
                    name=payload.name,
                    description=payload.description,
                    author_id=author_id,
                    created_by=author_id,
                    updated_by=author_id,
                )
            )
            await session.flush()
            await self._add_cuisines(session, recipe_id, payload.cuisines)
            await self._add_ingredients(session, recipe_id, payload.ingredients)
            await self._add_steps(session, recipe_id, payload.steps)
        logger.info("Created recipe %s by %s", recipe_id, author_id)
        return recipe_id

    async def update_recipe(
        self, session: AsyncSession, recipe_id: str, payload: RecipeUpdate, editor_id: str
    ) -> None:
        async with write_transaction(session):
            recipe = await self.load_recipe(session, recipe_id)
            if payload.name is not None:
                recipe.name = payload.name
            if payload.description:
                recipe.description = payload.description
            recipe.updated_by = editor_id
            recipe.updated_at = utcnow()
            await session.flush()

            if payload.cuisines is not None:
                await session.execute(delete(RecipeCuisine).where(RecipeCuisine.recipe_id == recipe_id))
                await self._add_cuisines(session, recipe_id, payload.cuisines)
            if payload.steps is not None:
                await session.execute(delete(RecipeStep).where(RecipeStep.recipe_id == recipe_id))
                await self._add_steps(session, recipe_id, payload.steps)
            if payload.ingredients is not None:
                await session.execute(delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id))
                await self._add_ingredients(session, recipe_id, payload.ingredients)
        logger.info("Updated recipe %s by %s", recipe_id, editor_id)

    async def archive_recipe(self, session: AsyncSession, recipe_id: str) -> None:
        """Hard-delete the recipe; the database cascades to steps and associations."""
        async with write_transaction(session):
            result = await session.execute(delete(Recipe).where(Recipe.id == recipe_id))
            if result.rowcount == 0:
                raise NotFoundError("Recipe", recipe_id)
        logger.info("Archived recipe %s", recipe_id)


recipe_service = RecipeService()
