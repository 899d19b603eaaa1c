import asyncio

import pytest
from sqlalchemy import func, select

from recipe_service.models import Ingredient
from recipe_service.services import ingredient_catalog


async def _count(session, name: str) -> int:
    return await session.scalar(select(func.count()).select_from(Ingredient).where(Ingredient.name == name))


@pytest.mark.asyncio
async def test_resolve_returns_same_id_for_same_name(session) -> None:
    first = await ingredient_catalog.resolve_ingredient(session, "Pasta")
    second = await ingredient_catalog.resolve_ingredient(session, "Pasta")

    assert first == second
    assert await _count(session, "Pasta") == 1


@pytest.mark.asyncio
async def test_names_are_case_sensitive(session) -> None:
    lower = await ingredient_catalog.resolve_ingredient(session, "basil")
    upper = await ingredient_catalog.resolve_ingredient(session, "Basil")

    assert lower != upper


@pytest.mark.asyncio
async def test_concurrent_insert_falls_back_to_existing_row(session_factory, monkeypatch) -> None:
    async with session_factory() as other:
        winner = await ingredient_catalog.resolve_ingredient(other, "Pasta")

    # Simulate losing the race: the first lookup misses the row the other writer just added.
    original = ingredient_catalog.find_ingredient_id
    calls = []

    async def stale_lookup(session, name):
        calls.append(name)
        if len(calls) == 1:
            return None
        return await original(session, name)

    monkeypatch.setattr(ingredient_catalog, "find_ingredient_id", stale_lookup)

    async with session_factory() as session:
        resolved = await ingredient_catalog.resolve_ingredient(session, "Pasta")
        assert resolved == winner
        assert len(calls) == 2
        assert await _count(session, "Pasta") == 1


@pytest.mark.asyncio
async def test_savepoint_rollback_keeps_outer_transaction(session_factory, monkeypatch) -> None:
    async with session_factory() as other:
        await ingredient_catalog.resolve_ingredient(other, "Salt")

    original = ingredient_catalog.find_ingredient_id
    misses = {"Salt"}

    async def stale_lookup(session, name):
        if name in misses:
            misses.discard(name)
            return None
        return await original(session, name)

    monkeypatch.setattr(ingredient_catalog, "find_ingredient_id", stale_lookup)

    async with session_factory() as session:
        pepper = await ingredient_catalog.get_or_create_ingredient(session, "Pepper")
        await ingredient_catalog.get_or_create_ingredient(session, "Salt")
        await session.commit()

        stored = await session.scalar(select(Ingredient.id).where(Ingredient.name == "Pepper"))
        assert stored == pepper


@pytest.mark.asyncio
async def test_lookup_before_concurrent_commit_still_resolves(session_factory) -> None:
    async with session_factory() as loser, session_factory() as winner:
        # The loser's read transaction predates the winner's commit.
        assert await ingredient_catalog.find_ingredient_id(loser, "Pasta") is None

        winner_id = await ingredient_catalog.resolve_ingredient(winner, "Pasta")
        loser_id = await ingredient_catalog.resolve_ingredient(loser, "Pasta")

        assert loser_id == winner_id
        assert await _count(loser, "Pasta") == 1


@pytest.mark.asyncio
async def test_parallel_resolves_share_one_row(session_factory) -> None:
    async with session_factory() as first, session_factory() as second:
        assert await ingredient_catalog.find_ingredient_id(first, "Flour") is None
        assert await ingredient_catalog.find_ingredient_id(second, "Flour") is None

        ids = await asyncio.gather(
            ingredient_catalog.resolve_ingredient(first, "Flour"),
            ingredient_catalog.resolve_ingredient(second, "Flour"),
        )

        assert ids[0] == ids[1]
        assert await _count(first, "Flour") == 1
