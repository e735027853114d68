import pytest
from httpx import ASGITransport, AsyncClient

from collaboration.domain.entities import DocumentEvent
from identity.application.services import issue_token
from main import app
from shared.dependencies import get_db, get_event_publisher
from shared.infrastructure.database import Base, create_db_engine, create_session_factory

import comments.infrastructure.models  # noqa: F401
import documents.infrastructure.models  # noqa: F401
import history.infrastructure.models  # noqa: F401


class RecordingPublisher:
    def __init__(self):
        self.events: list[DocumentEvent] = []

    async def publish(self, event: DocumentEvent) -> None:
        self.events.append(event)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture(autouse=True)
async def override_dependencies(session_factory, publisher):
    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    yield
    app.dependency_overrides.clear()


def auth_headers_for(user_id: str) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


@pytest.fixture
def headers_for():
    return auth_headers_for


@pytest.fixture
def alice_headers() -> dict:
    return auth_headers_for("alice")


@pytest.fixture
def bob_headers() -> dict:
    return auth_headers_for("bob")


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
