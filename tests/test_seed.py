import pytest
from sqlalchemy import func, select

from recipe_service import seed as seed_module
from recipe_service.models import Cuisine, Recipe, User


@pytest.mark.asyncio
async def test_seed_is_repeatable(settings, session, monkeypatch) -> None:
    monkeypatch.setattr(seed_module, "settings", settings)

    await seed_module.seed()
    await seed_module.seed()

    assert await session.scalar(select(func.count()).select_from(User)) == 1
    assert await session.scalar(select(func.count()).select_from(Cuisine)) == 2
    assert await session.scalar(select(func.count()).select_from(Recipe)) == len(seed_module.DEMO_RECIPES)
