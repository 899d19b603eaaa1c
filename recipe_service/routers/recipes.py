from __future__ import annotations

from fastapi import APIRouter, Depends, File, Path, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import NotFoundError
from recipe_service.db.session import get_session
from recipe_service.dependencies.users import get_current_user_required
from recipe_service.models import User
from recipe_service.schemas import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RecipeCreate,
    RecipeFilter,
    RecipeUpdate,
    SortKey,
    SortOrder,
)
from recipe_service.services.photos import PhotoStorage
from recipe_service.services.recipe_queries import recipe_query_service
from recipe_service.services.recipes import recipe_service

router = APIRouter(prefix="/api/v1/recipes", tags=["Recipes"])


def recipe_filter_params(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortKey = Query("created_at", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    cuisines: list[str] = Query([]),
    author_id: str | None = Query(None),
    search: str | None = Query(None),
) -> RecipeFilter:
    return RecipeFilter(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        cuisines=cuisines,
        author_id=author_id,
        search=search or None,
    )


def get_photo_storage(request: Request) -> PhotoStorage:
    return request.app.state.photo_storage


@router.get("", name="recipes_list")
async def list_recipes(
    recipe_filter: RecipeFilter = Depends(recipe_filter_params),
    session: AsyncSession = Depends(get_session),
):
    """List recipes with filtering, sorting and pagination."""
    page = await recipe_query_service.list_recipes(session, recipe_filter)
    return {
        "success": True,
        "data": page.recipes,
        "pagination": {"page": recipe_filter.page, "limit": recipe_filter.limit, "total": page.total},
    }


@router.get("/grouped-by-cuisine", name="recipes_grouped_by_cuisine")
async def grouped_by_cuisine(session: AsyncSession = Depends(get_session)):
    """Recipes grouped by cuisine for the homepage; empty cuisines are left out."""
    groups = await recipe_query_service.list_recipes_grouped_by_cuisine(session)
    return {"success": True, "data": groups}


@router.get("/by-cuisine/{cuisine_id}", name="recipes_by_cuisine")
async def recipes_by_cuisine(
    cuisine_id: str,
    recipe_filter: RecipeFilter = Depends(recipe_filter_params),
    session: AsyncSession = Depends(get_session),
):
    recipes = await recipe_query_service.list_recipes_by_cuisine(session, cuisine_id, recipe_filter)
    return {"success": True, "data": recipes}


@router.get("/{recipe_id}", name="recipe_detail")
async def recipe_detail(recipe_id: str, session: AsyncSession = Depends(get_session)):
    """Single recipe with cuisines, ordered steps and ingredients."""
    recipe = await recipe_query_service.get_recipe_by_id(session, recipe_id)
    if recipe is None:
        raise NotFoundError("Recipe", recipe_id)
    return {"success": True, "data": recipe}


@router.post("", status_code=status.HTTP_201_CREATED, name="create_recipe")
async def create_recipe(
    payload: RecipeCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    recipe_id = await recipe_service.create_recipe(session, payload, current_user.id)
    return {"success": True, "data": {"id": recipe_id}}


@router.put("/{recipe_id}", name="update_recipe")
async def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    """Partial update; supplied cuisines, steps or ingredients replace the stored lists."""
    recipe = await recipe_service.load_recipe(session, recipe_id)
    recipe_service.ensure_can_manage(recipe, current_user.id)
    await recipe_service.update_recipe(session, recipe_id, payload, current_user.id)
    return {"success": True, "data": {"message": "Recipe updated successfully"}}


@router.delete("/{recipe_id}", name="archive_recipe")
async def archive_recipe(
    recipe_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    recipe = await recipe_service.load_recipe(session, recipe_id)
    recipe_service.ensure_can_manage(recipe, current_user.id)
    await recipe_service.archive_recipe(session, recipe_id)
    return {"success": True, "data": {"message": "Recipe archived successfully"}}


@router.post("/{recipe_id}/photos/hero", name="upload_hero_photo")
async def upload_hero_photo(
    recipe_id: str,
    photo: UploadFile | None = File(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    recipe = await recipe_service.load_recipe(session, recipe_id)
    recipe_service.ensure_can_manage(recipe, current_user.id)
    info = await storage.save_hero(recipe_id, photo)
    return {"success": True, "data": info}


@router.post("/{recipe_id}/photos/steps/{step_number}", name="upload_step_photo")
async def upload_step_photo(
    recipe_id: str,
    step_number: int = Path(..., ge=1),
    photo: UploadFile | None = File(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    recipe = await recipe_service.load_recipe(session, recipe_id)
    recipe_service.ensure_can_manage(recipe, current_user.id)
    info = await storage.save_step(recipe_id, step_number, photo)
    return {"success": True, "data": info}
