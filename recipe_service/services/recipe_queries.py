from __future__ import annotations

from itertools import groupby

from sqlalchemy import Select, String, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from recipe_service.models import Cuisine, Ingredient, Recipe, RecipeCuisine, RecipeIngredient, User
from recipe_service.schemas import (
    MAX_PAGE_SIZE,
    CuisineGroup,
    CuisineOut,
    GroupedRecipeItem,
    RecipeAggregate,
    RecipeFilter,
    RecipeIngredientOut,
    RecipePage,
    RecipeRow,
    StepOut,
)

# Unit separator: cannot appear in a cuisine name typed by a user.
_NAME_SEPARATOR = "\x1f"


def _lower(column):
    return func.lower(column, type_=String)


SORT_COLUMNS = {
    "name": Recipe.name,
    "created_at": Recipe.created_at,
    "updated_at": Recipe.updated_at,
    "author": User.name,
}


class RecipeQueryService:
    """Read side of the recipe aggregate: listing, search, detail and cuisine grouping."""

    def build_conditions(self, recipe_filter: RecipeFilter) -> list:
        conditions = []
        if recipe_filter.author_id:
            conditions.append(Recipe.author_id == recipe_filter.author_id)
        if recipe_filter.cuisines:
            conditions.append(
                Recipe.id.in_(
                    select(RecipeCuisine.recipe_id).where(RecipeCuisine.cuisine_id.in_(recipe_filter.cuisines))
                )
            )
        if recipe_filter.search:
            term = recipe_filter.search.lower()
            ingredient_match = (
                select(RecipeIngredient.recipe_id)
                .join(Ingredient, Ingredient.id == RecipeIngredient.ingredient_id)
                .where(_lower(Ingredient.name).contains(term, autoescape=True))
            )
            conditions.append(
                or_(
                    _lower(Recipe.name).contains(term, autoescape=True),
                    _lower(Recipe.description).contains(term, autoescape=True),
                    Recipe.id.in_(ingredient_match),
                )
            )
        return conditions

    def _rows_query(self, recipe_filter: RecipeFilter, conditions: list) -> Select:
        sort_column = SORT_COLUMNS[recipe_filter.sort_by]
        ordering = sort_column.asc() if recipe_filter.sort_order == "asc" else sort_column.desc()
        limit = min(recipe_filter.limit, MAX_PAGE_SIZE)
        return (
            select(
                Recipe,
                User.name.label("author_name"),
                func.group_concat(Cuisine.name, _NAME_SEPARATOR).label("cuisine_names"),
            )
            .outerjoin(User, User.id == Recipe.author_id)
            .outerjoin(RecipeCuisine, RecipeCuisine.recipe_id == Recipe.id)
            .outerjoin(Cuisine, Cuisine.id == RecipeCuisine.cuisine_id)
            .where(*conditions)
            .group_by(Recipe.id)
            .order_by(ordering)
            .limit(limit)
            .offset((recipe_filter.page - 1) * limit)
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def _to_row(recipe: Recipe, author_name: str | None, cuisine_names: str | None) -> RecipeRow:
        return RecipeRow(
            id=recipe.id,
            name=recipe.name,
            description=recipe.description,
            author_id=recipe.author_id,
            author_name=author_name,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
            created_by=recipe.created_by,
            updated_by=recipe.updated_by,
            cuisine_names=sorted(cuisine_names.split(_NAME_SEPARATOR)) if cuisine_names else [],
        )

    async def list_recipes(self, session: AsyncSession, recipe_filter: RecipeFilter | None = None) -> RecipePage:
        recipe_filter = recipe_filter or RecipeFilter()
        conditions = self.build_conditions(recipe_filter)

        total = await session.scalar(select(func.count(func.distinct(Recipe.id))).where(*conditions))
        result = await session.execute(self._rows_query(recipe_filter, conditions))
        rows = [self._to_row(recipe, author_name, names) for recipe, author_name, names in result.all()]
        return RecipePage(recipes=rows, total=total or 0)

    async def list_recipes_by_cuisine(
        self, session: AsyncSession, cuisine_id: str, recipe_filter: RecipeFilter | None = None
    ) -> list[RecipeRow]:
        recipe_filter = recipe_filter or RecipeFilter()
        forced = recipe_filter.model_copy(update={"cuisines": [cuisine_id]})
        page = await self.list_recipes(session, forced)
        return page.recipes

    async def get_recipe_by_id(self, session: AsyncSession, recipe_id: str) -> RecipeAggregate | None:
        query = (
            select(Recipe)
            .options(
                selectinload(Recipe.author),
                selectinload(Recipe.cuisines),
                selectinload(Recipe.steps),
                selectinload(Recipe.ingredients).selectinload(RecipeIngredient.ingredient),
            )
            .where(Recipe.id == recipe_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(query)
        recipe = result.scalar_one_or_none()
        if recipe is None:
            return None
        return RecipeAggregate(
            id=recipe.id,
            name=recipe.name,
            description=recipe.description,
            author_id=recipe.author_id,
            author_name=recipe.author.name if recipe.author else None,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
            created_by=recipe.created_by,
            updated_by=recipe.updated_by,
            cuisines=[CuisineOut.model_validate(cuisine) for cuisine in recipe.cuisines],
            steps=[StepOut.model_validate(step) for step in recipe.steps],
            ingredients=[
                RecipeIngredientOut(
                    id=item.id,
                    ingredient_id=item.ingredient_id,
                    ingredient_name=item.ingredient.name,
                    quantity=item.quantity,
                    unit=item.unit,
                )
                for item in recipe.ingredients
            ],
        )

    async def list_recipes_grouped_by_cuisine(self, session: AsyncSession) -> list[CuisineGroup]:
        """Cuisines that have at least one recipe, each with its recipes flattened."""
        query = (
            select(Cuisine.id, Cuisine.name, Recipe.id, Recipe.name, Recipe.description)
            .join(RecipeCuisine, RecipeCuisine.cuisine_id == Cuisine.id)
            .join(Recipe, Recipe.id == RecipeCuisine.recipe_id)
            .order_by(Cuisine.name.asc(), Cuisine.id, Recipe.name.asc())
        )
        result = await session.execute(query)
        groups: list[CuisineGroup] = []
        for (cuisine_id, cuisine_name), rows in groupby(result.all(), key=lambda row: (row[0], row[1])):
            recipes = [
                GroupedRecipeItem(id=recipe_id, name=name, description=description)
                for _, _, recipe_id, name, description in rows
            ]
            groups.append(
                CuisineGroup(
                    cuisine_id=cuisine_id,
                    cuisine_name=cuisine_name,
                    recipe_count=len(recipes),
                    recipes=recipes,
                )
            )
        return groups


recipe_query_service = RecipeQueryService()
