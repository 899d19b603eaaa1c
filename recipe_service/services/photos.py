from __future__ import annotations

import logging
from pathlib import Path

from fastapi import UploadFile, status

from recipe_service.core.errors import ApiError
from recipe_service.schemas import FileUploadInfo

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
CACHE_CONTROL = "public, max-age=31536000"


class PhotoStorage:
    """Stores recipe photos as ``<upload_dir>/<recipe_id>/<filename>``."""

    def __init__(self, upload_dir: Path, max_file_size: int):
        self.upload_dir = upload_dir
        self.max_file_size = max_file_size

    def _safe_part(self, value: str) -> str:
        if not value or value in {".", ".."} or Path(value).name != value or "\\" in value:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid file path", "INVALID_PATH")
        return value

    async def _read_validated(self, upload: UploadFile | None) -> bytes:
        if upload is None or not upload.filename:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No photo file provided", "NO_FILE")
        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "Invalid file type. Only JPEG, PNG, and WebP are allowed.",
                "INVALID_FILE_TYPE",
            )
        data = await upload.read(self.max_file_size + 1)
        if len(data) > self.max_file_size:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                f"File too large. Maximum size is {self.max_file_size // (1024 * 1024)}MB.",
                "FILE_TOO_LARGE",
            )
        return data

    def _write(self, recipe_id: str, filename: str, data: bytes) -> Path:
        recipe_dir = self.upload_dir / self._safe_part(recipe_id)
        recipe_dir.mkdir(parents=True, exist_ok=True)
        destination = recipe_dir / filename
        destination.write_bytes(data)
        logger.info("Stored photo %s (%d bytes)", destination, len(data))
        return destination

    async def save_hero(self, recipe_id: str, upload: UploadFile | None) -> FileUploadInfo:
        data = await self._read_validated(upload)
        filename = "hero.jpg"
        destination = self._write(recipe_id, filename, data)
        return FileUploadInfo(recipe_id=recipe_id, type="hero", filename=filename, path=str(destination))

    async def save_step(self, recipe_id: str, step_number: int, upload: UploadFile | None) -> FileUploadInfo:
        data = await self._read_validated(upload)
        filename = f"step-{step_number}.jpg"
        destination = self._write(recipe_id, filename, data)
        return FileUploadInfo(
            recipe_id=recipe_id,
            type="step",
            step_number=step_number,
            filename=filename,
            path=str(destination),
        )

    def resolve(self, recipe_id: str, filename: str) -> tuple[Path, str]:
        """Return the stored path and its MIME type, or raise 404."""
        path = self.upload_dir / self._safe_part(recipe_id) / self._safe_part(filename)
        if not path.is_file():
            raise ApiError(status.HTTP_404_NOT_FOUND, "File not found", "NOT_FOUND")
        return path, MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")
