import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test-key")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test-secret")
os.environ.setdefault("AWS_ENDPOINT_URL", "http://storage.test")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wonderlens import storage
from wonderlens.db import get_db
from wonderlens.inference import llm
from wonderlens.main import app
from wonderlens.models import Base


class DummyS3:
    def __init__(self, put_error=None):
        self.put_error = put_error
        self.put_calls = []
        self.objects = {}

    def put_object(self, **kwargs):
        if self.put_error:
            raise self.put_error
        self.put_calls.append(kwargs)
        self.objects[kwargs["Key"]] = kwargs["Body"]
        return {}


class FakeCompletions:
    def __init__(self):
        self.reply = "{}"
        self.error = None
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=20, total_tokens=30),
        )


class FakeOpenAI:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def dummy_s3(monkeypatch):
    s3 = DummyS3()
    monkeypatch.setattr(storage, "s3", s3)
    return s3


@pytest.fixture
def fake_openai(monkeypatch):
    fake = FakeOpenAI()
    monkeypatch.setattr(llm, "get_client", lambda: fake)
    return fake.completions


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
