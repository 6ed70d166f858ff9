"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
import pytest_asyncio
from pathlib import Path
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import health_wallet.models  # noqa: F401
from health_wallet.auth import UserPrincipal
from health_wallet.database import Base, build_engine
from health_wallet.models.user import Role
from health_wallet.services.blob_store import LocalBlobStore
from health_wallet.services.ingestion_service import IngestionService
from health_wallet.services.report_service import ReportService
from health_wallet.services.text_source import TextSource
from health_wallet.services.user_service import user_service


class FakeTextSource(TextSource):
    """Text source returning canned text, or raising a canned error."""

    provider = "fake"

    def __init__(self, text: str = "", error: Exception = None, timeout_seconds: float = 5.0):
        super().__init__(timeout_seconds)
        self.text = text
        self.error = error
        self.calls: list[Path] = []

    def _recognize(self, path: Path) -> str:
        self.calls.append(path)
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def sample_report_text():
    """OCR output of a typical clinic report"""
    return """
    CITY CLINIC - OUTPATIENT SUMMARY

    Patient: Jane Roe
    Date: 2024-03-02

    BP: 130/85
    Sugar=110
    Notes: follow up in 3 months
    """


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture
def text_source(sample_report_text):
    return FakeTextSource(sample_report_text)


@pytest.fixture
def ingestion(text_source, blob_store):
    return IngestionService(text_source=text_source, blob_store=blob_store)


@pytest.fixture
def report_service(blob_store):
    return ReportService(blob_store)


async def _register(db, name, email, role):
    user = await user_service.register(db, name, email, "secret123", role)
    return UserPrincipal.from_user(user)


@pytest_asyncio.fixture
async def patient(db):
    return await _register(db, "Alice Patient", "alice@example.com", Role.PATIENT)


@pytest_asyncio.fixture
async def other_patient(db):
    return await _register(db, "Bob Patient", "bob@example.com", Role.PATIENT)


@pytest_asyncio.fixture
async def viewer(db):
    return await _register(db, "Dr. Carol", "carol@example.com", Role.VIEWER)
