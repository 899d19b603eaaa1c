from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from recipe_service.routers.recipes import get_photo_storage
from recipe_service.services.photos import CACHE_CONTROL, PhotoStorage

router = APIRouter(prefix="/api/v1/files", tags=["Files"])


@router.get("/{recipe_id}/{filename}", name="serve_file")
async def serve_file(recipe_id: str, filename: str, storage: PhotoStorage = Depends(get_photo_storage)):
    """Serve an uploaded photo with a long-lived cache header."""
    path, media_type = storage.resolve(recipe_id, filename)
    return FileResponse(str(path), media_type=media_type, headers={"Cache-Control": CACHE_CONTROL})
