import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reviewbot.db.models import Base
from reviewbot.profiles.store import ProfileStore


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeReply:
    author_name = "alice"
    author_icon = "https://example.com/alice.png"

    def __init__(self) -> None:
        self.texts: list[str] = []
        self.attachments: list[dict] = []
        self.failures: list[BaseException] = []

    async def write(self, text: str) -> None:
        self.texts.append(text)

    async def write_literal(self, text: str) -> None:
        self.texts.append(text)

    async def post_attachment(self, attachment: dict) -> None:
        self.attachments.append(attachment)

    async def fail(self, exc: BaseException) -> None:
        self.failures.append(exc)


class FakeArqPool:
    def __init__(self) -> None:
        self.jobs: list[tuple] = []

    async def enqueue_job(self, function: str, *args):
        self.jobs.append((function, *args))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reply() -> FakeReply:
    return FakeReply()


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def profile_store(session_factory) -> ProfileStore:
    return ProfileStore(session_factory)


@pytest.fixture
def fake_arq_pool() -> FakeArqPool:
    return FakeArqPool()
