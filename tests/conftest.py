"""Shared fixtures: a throwaway SQLite database per test"""
import os
import tempfile

# Settings are read when casetrack is first imported; point the app at SQLite
# and skip alembic before that happens.
_TEST_DIR = tempfile.mkdtemp(prefix="casetrack-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'app.db')}"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from casetrack.db.models import AdminToken  # noqa: E402
from casetrack.db.session import Base, create_engine_for_url, create_session_factory, get_db  # noqa: E402
from casetrack.main import app  # noqa: E402

ADMIN_TOKEN = "test-admin-token"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh database file with the full schema"""
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'casetrack.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    """Session for driving services directly"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client against the app, with requests using the test database"""
    async def override_get_db():
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_token(session_factory):
    """An active admin token stored in the test database"""
    async with session_factory() as session:
        session.add(AdminToken(token=ADMIN_TOKEN, description="test suite"))
        await session.commit()
    return ADMIN_TOKEN
