from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipe_service.core.errors import NotFoundError
from recipe_service.db.session import get_session
from recipe_service.dependencies.users import get_current_user_required
from recipe_service.models import User
from recipe_service.schemas import CuisineCreate, CuisineOut, CuisineUpdate
from recipe_service.services.cuisines import cuisine_service

router = APIRouter(prefix="/api/v1/cuisines", tags=["Cuisines"])


@router.get("", name="cuisines_list")
async def list_cuisines(session: AsyncSession = Depends(get_session)):
    """All cuisines ordered by name, including ones without recipes."""
    cuisines = await cuisine_service.list_cuisines(session)
    return {"success": True, "data": [CuisineOut.model_validate(cuisine) for cuisine in cuisines]}


@router.get("/{cuisine_id}", name="cuisine_detail")
async def cuisine_detail(cuisine_id: str, session: AsyncSession = Depends(get_session)):
    cuisine = await cuisine_service.get_cuisine_by_id(session, cuisine_id)
    if cuisine is None:
        raise NotFoundError("Cuisine", cuisine_id)
    return {"success": True, "data": CuisineOut.model_validate(cuisine)}


@router.post("", status_code=status.HTTP_201_CREATED, name="create_cuisine")
async def create_cuisine(
    payload: CuisineCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    cuisine_id = await cuisine_service.create_cuisine(session, payload)
    return {"success": True, "data": {"id": cuisine_id}}


@router.put("/{cuisine_id}", name="update_cuisine")
async def update_cuisine(
    cuisine_id: str,
    payload: CuisineUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    await cuisine_service.update_cuisine(session, cuisine_id, payload)
    return {"success": True, "data": {"message": "Cuisine updated successfully"}}


@router.delete("/{cuisine_id}", name="delete_cuisine")
async def delete_cuisine(
    cuisine_id: str,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user_required),
):
    """Delete a cuisine; one still attached to a recipe is rejected with 409."""
    await cuisine_service.delete_cuisine(session, cuisine_id)
    return {"success": True, "data": {"message": "Cuisine deleted successfully"}}
