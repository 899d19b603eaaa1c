"""Populate a development database with a demo user, cuisines and recipes.

Run with ``python -m recipe_service.seed``. Rows that already exist are reused,
so running it twice does not duplicate anything.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.config import settings
from recipe_service.core.log import configure_logging
from recipe_service.db.bootstrap import initialize_schema
from recipe_service.db.session import build_engine, build_sessionmaker
from recipe_service.models import Recipe
from recipe_service.schemas import CuisineCreate, IngredientInput, RecipeCreate, StepInput
from recipe_service.services.cuisines import cuisine_service
from recipe_service.services.recipes import recipe_service
from recipe_service.services.users import user_service

logger = logging.getLogger(__name__)

DEMO_USER = {"name": "Chef Demo", "email": "chef@demo.com", "password": "demo1234"}

DEMO_CUISINES = [
    CuisineCreate(name="Italian", description="Pasta, risotto and everything in between"),
    CuisineCreate(name="Mexican", description="Tortillas, salsas and slow-cooked meats"),
]

DEMO_RECIPES = [
    (
        "Italian",
        RecipeCreate(
            name="Spaghetti Carbonara",
            description="Roman pasta with eggs, cheese and guanciale.",
            ingredients=[
                IngredientInput(name="Spaghetti", quantity=400, unit="grams"),
                IngredientInput(name="Guanciale", quantity=150, unit="grams"),
                IngredientInput(name="Eggs", quantity=4, unit="pieces"),
                IngredientInput(name="Pecorino Romano", quantity=80, unit="grams"),
            ],
            steps=[
                StepInput(step_number=1, instruction="Boil the spaghetti in salted water."),
                StepInput(step_number=2, instruction="Crisp the guanciale in a dry pan."),
                StepInput(step_number=3, instruction="Whisk eggs with grated pecorino."),
                StepInput(step_number=4, instruction="Toss pasta off the heat with the egg mixture and guanciale."),
            ],
        ),
    ),
    (
        "Italian",
        RecipeCreate(
            name="Margherita Pizza",
            description="Thin crust pizza with tomato, mozzarella and basil.",
            ingredients=[
                IngredientInput(name="Pizza dough", quantity=250, unit="grams"),
                IngredientInput(name="Tomato sauce", quantity=100, unit="ml"),
                IngredientInput(name="Mozzarella", quantity=125, unit="grams"),
                IngredientInput(name="Basil", quantity=6, unit="leaves"),
            ],
            steps=[
                StepInput(step_number=1, instruction="Stretch the dough into a thin round."),
                StepInput(step_number=2, instruction="Spread sauce and add torn mozzarella."),
                StepInput(step_number=3, instruction="Bake at the highest oven setting, finish with basil."),
            ],
        ),
    ),
    (
        "Mexican",
        RecipeCreate(
            name="Chicken Tacos",
            description="Soft corn tortillas with spiced chicken and salsa.",
            ingredients=[
                IngredientInput(name="Chicken thighs", quantity=500, unit="grams"),
                IngredientInput(name="Corn tortillas", quantity=8, unit="pieces"),
                IngredientInput(name="Lime", quantity=1, unit="pieces"),
                IngredientInput(name="Salsa", quantity=150, unit="grams"),
            ],
            steps=[
                StepInput(step_number=1, instruction="Season and grill the chicken."),
                StepInput(step_number=2, instruction="Slice thinly and squeeze lime over."),
                StepInput(step_number=3, instruction="Serve in warm tortillas with salsa."),
            ],
        ),
    ),
]


async def _ensure_user(session: AsyncSession) -> str:
    user = await user_service.get_user_by_email(session, DEMO_USER["email"])
    if user is not None:
        return user.id
    return await user_service.create_user(session, DEMO_USER["name"], DEMO_USER["email"], DEMO_USER["password"])


async def _ensure_cuisines(session: AsyncSession) -> dict[str, str]:
    ids: dict[str, str] = {}
    for payload in DEMO_CUISINES:
        cuisine = await cuisine_service.get_cuisine_by_name(session, payload.name)
        ids[payload.name] = cuisine.id if cuisine else await cuisine_service.create_cuisine(session, payload)
    return ids


async def seed() -> None:
    engine = build_engine(settings.database_url)
    try:
        await initialize_schema(engine)
        session_factory = build_sessionmaker(engine)
        async with session_factory() as session:
            author_id = await _ensure_user(session)
            cuisine_ids = await _ensure_cuisines(session)
            for cuisine_name, payload in DEMO_RECIPES:
                exists = await session.scalar(
                    select(Recipe.id).where(Recipe.name == payload.name, Recipe.author_id == author_id)
                )
                if exists:
                    logger.info("Recipe %r already present, skipping", payload.name)
                    continue
                payload = payload.model_copy(update={"cuisines": [cuisine_ids[cuisine_name]]})
                await recipe_service.create_recipe(session, payload, author_id)
                logger.info("Seeded recipe %r", payload.name)
    finally:
        await engine.dispose()
    logger.info("Seeding finished. Demo login: %s / %s", DEMO_USER["email"], DEMO_USER["password"])


if __name__ == "__main__":
    configure_logging(settings.log_level)
    asyncio.run(seed())
