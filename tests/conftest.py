import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from recipe_service.core.config import Settings
from recipe_service.db.bootstrap import initialize_schema
from recipe_service.db.session import build_engine, build_sessionmaker
from recipe_service.main import create_app
from recipe_service.schemas import CuisineCreate
from recipe_service.services.cuisines import cuisine_service
from recipe_service.services.users import user_service


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'recipes.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    engine = build_engine(database_url)
    await initialize_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def author_id(session):
    return await user_service.create_user(session, "Chef Test", "chef@test.com", "secret123")


@pytest_asyncio.fixture
async def italian_id(session):
    return await cuisine_service.create_cuisine(session, CuisineCreate(name="Italian"))


@pytest.fixture
def settings(monkeypatch, tmp_path, database_url):
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "files"))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "1000")
    monkeypatch.setenv("MAX_FILE_SIZE", str(1024))
    return Settings()


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client
