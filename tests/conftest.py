import os

# Settings are read at import time, so the environment is prepared first
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskboard.constants.constants import Category, Priority, TaskStatus
from taskboard.core.database import aget_db
from taskboard.core.security import build_token_codec
from taskboard.core.session import RequestContext
from taskboard.main import app
from taskboard.models.base import Base
from taskboard.models.task import Task  # noqa: F401 registers the table
from taskboard.repositories.user_repository import UserRepository
from taskboard.schemas.taskSchema import TaskResponse
from taskboard.schemas.userSchema import Identity


@pytest.fixture
def codec():
    return build_token_codec()


@pytest.fixture
def token_for(codec):
    def _token_for(user) -> str:
        return codec.issue(Identity(id=user.id, email=user.email))
    return _token_for


@pytest.fixture
def ctx_for(codec, token_for):
    def _ctx_for(user) -> RequestContext:
        return RequestContext(credential=token_for(user), codec=codec)
    return _ctx_for


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def alice(db_session):
    return await UserRepository(db_session).create(email="alice@example.com", name="Alice")


@pytest_asyncio.fixture
async def bob(db_session):
    return await UserRepository(db_session).create(email="bob@example.com")


@pytest_asyncio.fixture
async def client(engine):
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    async def override_db():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[aget_db] = override_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, token_for):
    """Puts the auth cookie of `user` on the shared test client."""
    def _login(user):
        client.cookies.set("auth_token", token_for(user))
    return _login


def make_task(
    title="Task",
    completed=False,
    priority=Priority.MEDIUM,
    category=Category.PERSONAL,
    due_date=None,
    created_at=datetime(2025, 1, 1),
    task_id=None,
) -> TaskResponse:
    return TaskResponse(
        id=task_id or title,
        title=title,
        priority=priority,
        category=category,
        status=TaskStatus.COMPLETED if completed else TaskStatus.TODO,
        completed=completed,
        due_date=due_date,
        user_id="u1",
        created_at=created_at,
        updated_at=created_at,
    )
