import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fortivus.core.db import Base, get_db, get_session_factory, make_engine
from fortivus.core.security import create_access_token, hash_password
from fortivus.main import app
from fortivus.models import (  # noqa: F401  registers tables on Base.metadata
    exercise,
    exercise_set,
    notification,
    personal_plan,
    personal_record,
    session_exercise,
    template_exercise,
    workout_session,
    workout_template,
)
from fortivus.models.exercise import Exercise, normalize_name
from fortivus.models.user import User


@pytest.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make(email="lifter@example.com", password="password123", is_admin=False, display_name=None):
        user = User(
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
            is_admin=is_admin,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
async def user(make_user):
    return await make_user()


@pytest.fixture
def make_exercise(db):
    async def _make(name, muscle_group="chest", equipment="barbell"):
        ex = Exercise(
            name=name,
            name_normalized=normalize_name(name),
            muscle_group=muscle_group,
            equipment=equipment,
            is_custom=False,
        )
        db.add(ex)
        await db.commit()
        return ex

    return _make


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
