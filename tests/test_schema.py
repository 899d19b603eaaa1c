import pytest
from sqlalchemy import inspect, text

from recipe_service.db.bootstrap import initialize_schema

EXPECTED_TABLES = {
    "users",
    "cuisines",
    "ingredients",
    "recipes",
    "recipe_cuisines",
    "recipe_steps",
    "recipe_ingredients",
}

EXPECTED_INDEXES = {
    "recipes": {"idx_recipes_author", "idx_recipes_created_at"},
    "recipe_cuisines": {"idx_recipe_cuisines_recipe", "idx_recipe_cuisines_cuisine"},
    "recipe_steps": {"idx_recipe_steps_recipe"},
    "recipe_ingredients": {"idx_recipe_ingredients_recipe"},
}


def _describe(sync_conn):
    inspector = inspect(sync_conn)
    tables = set(inspector.get_table_names())
    indexes = {table: {index["name"] for index in inspector.get_indexes(table)} for table in EXPECTED_INDEXES}
    return tables, indexes


@pytest.mark.asyncio
async def test_initialize_creates_tables_and_indexes(engine) -> None:
    async with engine.connect() as conn:
        tables, indexes = await conn.run_sync(_describe)

    assert EXPECTED_TABLES <= tables
    for table, names in EXPECTED_INDEXES.items():
        assert names <= indexes[table]


@pytest.mark.asyncio
async def test_initialize_is_idempotent(engine, session, author_id) -> None:
    await initialize_schema(engine)
    await initialize_schema(engine)

    count = await session.scalar(text("SELECT COUNT(*) FROM users"))
    assert count == 1


@pytest.mark.asyncio
async def test_foreign_keys_enforced_on_every_connection(engine) -> None:
    async with engine.connect() as conn:
        assert await conn.scalar(text("PRAGMA foreign_keys")) == 1
