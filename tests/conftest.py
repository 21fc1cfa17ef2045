"""
Shared fixtures: isolated in-memory database, API client and user factories
"""

import os

# Settings are read at import time
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"
os.environ["SMTP_HOST"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["GEMINI_API_KEY"] = ""

import uuid
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pathway_tracker.core.database import Base, get_db
from pathway_tracker.core.rbac import Role, role_key
from pathway_tracker.core.security import create_access_token, get_password_hash
from pathway_tracker.main import app
from pathway_tracker.models import Member, PathwayType, Task, TaskPriority, User

DEFAULT_PASSWORD = "Password123!"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Persist a user with the given role"""
    async def _make(role=Role.VOLUNTEER, email=None, password=DEFAULT_PASSWORD, is_active=True) -> User:
        role_name = role_key(role)
        async with session_factory() as session:
            user = User(
                email=email or f"{role_name.lower()}-{uuid.uuid4().hex[:8]}@example.com",
                hashed_password=get_password_hash(password),
                first_name="Test",
                last_name=role_name.title(),
                role=role_name,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
def make_member(session_factory):
    """Persist a member assigned to ``owner``"""
    async def _make(owner: User, **overrides) -> Member:
        values = {
            "first_name": "Grace",
            "last_name": "Hopper",
            "email": f"member-{uuid.uuid4().hex[:8]}@example.com",
            "phone": "+15550100",
            "pathway": PathwayType.NEWCOMER,
            "current_stage_id": "stage-1",
            "assigned_to_id": owner.id,
        }
        values.update(overrides)
        async with session_factory() as session:
            member = Member(**values)
            session.add(member)
            await session.commit()
            await session.refresh(member)
            return member

    return _make


@pytest.fixture
def make_task(session_factory):
    """Persist a task on ``member`` assigned to ``assignee``"""
    async def _make(member: Member, assignee: User, **overrides) -> Task:
        values = {
            "description": "Call to welcome",
            "due_date": date(2030, 1, 1),
            "priority": TaskPriority.MEDIUM,
            "member_id": member.id,
            "assigned_to_id": assignee.id,
        }
        values.update(overrides)
        async with session_factory() as session:
            task = Task(**values)
            session.add(task)
            await session.commit()
            await session.refresh(task)
            return task

    return _make


def auth_headers(user: User) -> dict:
    token = create_access_token(str(user.id), user.email, user.role)
    return {"Authorization": f"Bearer {token}"}
