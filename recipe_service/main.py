from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from recipe_service.core.config import Settings, settings as default_settings
from recipe_service.core.errors import ApiError, AuthError, ConstraintError, NotFoundError
from recipe_service.core.log import configure_logging
from recipe_service.core.middleware import MultipartBodyLimitMiddleware, build_limiter, rate_limit_exceeded
from recipe_service.core.tokens import TokenService
from recipe_service.db.bootstrap import initialize_schema
from recipe_service.db.session import build_engine, build_sessionmaker
from recipe_service.routers import auth, cuisines, files, recipes
from recipe_service.services.photos import PhotoStorage

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _error_response(status_code: int, message: str, code: str | None = None, **extra) -> JSONResponse:
    content = {"success": False, "error": message}
    if code:
        content["code"] = code
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return _error_response(exc.status_code, exc.message, exc.code, details=exc.details)

    @application.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc), "NOT_FOUND")

    @application.exception_handler(ConstraintError)
    async def _constraint(request: Request, exc: ConstraintError):
        logger.warning("Rejected write on %s: %s", request.url.path, exc)
        return _error_response(status.HTTP_409_CONFLICT, "Data integrity violation", "CONSTRAINT_VIOLATION")

    @application.exception_handler(AuthError)
    async def _auth(request: Request, exc: AuthError):
        return _error_response(status.HTTP_401_UNAUTHORIZED, str(exc), "UNAUTHORIZED")

    @application.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError):
        details = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
        return _error_response(
            status.HTTP_400_BAD_REQUEST, "Invalid request data", "VALIDATION_ERROR", details=details
        )

    @application.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or default_settings
    config.validate()
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        engine = build_engine(config.database_url)
        # Requests must not be served against a half-created schema.
        await initialize_schema(engine)
        application.state.engine = engine
        application.state.session_factory = build_sessionmaker(engine)
        logger.info("Recipe API ready (%s)", config.environment)
        try:
            yield
        finally:
            await engine.dispose()

    application = FastAPI(
        title="Recipe API",
        version=API_VERSION,
        description="Recipe management API: recipes, cuisines, ingredients, steps and photos.",
        docs_url="/docs",
        lifespan=lifespan,
    )
    application.state.settings = config
    application.state.token_service = TokenService(config)
    application.state.photo_storage = PhotoStorage(config.upload_dir, config.max_file_size)
    application.state.limiter = build_limiter(config)

    application.add_middleware(MultipartBodyLimitMiddleware, config=config)
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(application)
    application.add_exception_handler(RateLimitExceeded, rate_limit_exceeded)

    application.include_router(auth.router)
    application.include_router(recipes.router)
    application.include_router(cuisines.router)
    application.include_router(files.router)

    @application.get("/", tags=["General"])
    async def index():
        return {
            "message": "Recipe API is running",
            "version": API_VERSION,
            "documentation": "/docs",
            "endpoints": {
                "auth": "/auth",
                "recipes": "/api/v1/recipes",
                "cuisines": "/api/v1/cuisines",
                "files": "/api/v1/files",
            },
        }

    @application.get("/health", tags=["General"])
    async def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": config.environment,
        }

    return application


app = create_app()
