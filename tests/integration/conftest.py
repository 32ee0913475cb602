import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers the tables on SQLModel.metadata
from config import ApplicationConfig
from src.adapter.services.erp_gateway import SimulatedErpGateway
from src.depends import get_session


class IntegrationConfig(ApplicationConfig):
    CREATE_TABLES_ON_STARTUP = False
    ENABLE_LOGGING_MIDDLEWARE = False


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a fresh SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'billing_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Session factory for tests that need several independent sessions"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with database session override"""
    from src.api.app import create_app

    app = create_app(
        IntegrationConfig,
        erp_gateway=SimulatedErpGateway(success_rate=1.0, latency_seconds=0),
    )

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
