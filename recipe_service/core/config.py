import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent


class Settings:
    """Application configuration."""

    def __init__(self) -> None:
        def _int_env(name: str, default: int) -> int:
            raw = os.getenv(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                return default

        def _list_env(name: str, default: str = "") -> tuple[str, ...]:
            raw = os.getenv(name, default)
            values = [item.strip() for item in raw.split(",")]
            return tuple(item for item in values if item)

        self.environment = os.getenv("ENVIRONMENT", "development")
        self.database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./recipes.db")
        self.jwt_secret = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
        self.jwt_secret_configured = "JWT_SECRET" in os.environ
        self.access_token_ttl_seconds = _int_env("ACCESS_TOKEN_TTL_SECONDS", 60 * 60)
        self.refresh_token_ttl_seconds = _int_env("REFRESH_TOKEN_TTL_SECONDS", 60 * 60 * 24 * 7)
        self.upload_dir = Path(os.getenv("UPLOAD_DIR", "./files"))
        self.max_file_size = _int_env("MAX_FILE_SIZE", 5 * 1024 * 1024)
        # Multipart bodies carry boundaries and headers on top of the photo itself.
        self.max_multipart_body_bytes = _int_env(
            "MAX_MULTIPART_BODY_BYTES", self.max_file_size + 1024 * 1024
        )
        self.cors_origins = _list_env("CORS_ORIGINS", "http://localhost:3000")
        self.rate_limit_max_requests = _int_env("RATE_LIMIT_MAX_REQUESTS", 100)
        self.rate_limit_window_seconds = _int_env("RATE_LIMIT_WINDOW_SECONDS", 15 * 60)
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _int_env("PORT", 3000)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Fail fast on settings that must be explicit outside development."""
        if self.is_production and not self.jwt_secret_configured:
            raise RuntimeError("Missing required environment variable: JWT_SECRET")


settings = Settings()
