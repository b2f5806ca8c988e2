import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from httpx import AsyncClient
from httpx._transports.asgi import ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.core.exceptions import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.api.db.database import get_db

# Import all models to ensure they are registered with SQLAlchemy before creating tables
from app.api.modules.v1.waitlist.models.waitlist_model import WaitlistEntry  # noqa: F401
from app.api.modules.v1.waitlist.dependencies import get_waitlist_hooks, get_waitlist_options
from app.api.modules.v1.waitlist.routes.waitlist_route import router as waitlist_router
from app.api.modules.v1.waitlist.schemas.waitlist_options import WaitlistOptions
from app.api.modules.v1.waitlist.service.waitlist_hooks import WaitlistHooks
from app.api.modules.v1.waitlist.service.waitlist_repository import WaitlistRepository
from app.api.modules.v1.waitlist.service.waitlist_service import WaitlistService
from app.api.utils.jwt import create_access_token

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class RecordingHooks(WaitlistHooks):
    """Hooks that remember every call, keyed by hook name."""

    def __init__(self):
        self.calls = []

    async def on_join(self, entry):
        self.calls.append(("join", entry))

    async def on_approve(self, entry):
        self.calls.append(("approve", entry))

    async def on_reject(self, entry):
        self.calls.append(("reject", entry))

    async def on_complete(self, entry):
        self.calls.append(("complete", entry))


@pytest_asyncio.fixture
async def test_session():
    """In-memory SQLite session with fresh tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def recording_hooks():
    return RecordingHooks()


@pytest.fixture
def make_service(test_session, recording_hooks):
    """Build a WaitlistService over the test session with the given options."""

    def _make(**options):
        return WaitlistService(
            WaitlistRepository(test_session),
            options=WaitlistOptions(**options),
            hooks=recording_hooks,
        )

    return _make


@pytest.fixture
def waitlist_options():
    """Options served to the test app. Tests needing others override the fixture."""
    return WaitlistOptions()


@pytest.fixture
def app(test_session, waitlist_options, recording_hooks):
    """FastAPI app with test DB, options and hooks dependency overrides."""
    app = FastAPI()

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(waitlist_router, prefix="/api/v1")

    async def override_get_db():
        yield test_session
        await test_session.flush()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_waitlist_options] = lambda: waitlist_options
    app.dependency_overrides[get_waitlist_hooks] = lambda: recording_hooks

    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def admin_headers():
    token = create_access_token(user_id="admin-user", role="admin")
    return {"Authorization": f"Bearer {token}"}
