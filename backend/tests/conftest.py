"""
Test fixtures shared across all tests.

Architecture:
- DATABASE_URL and UPLOAD_DIR point at a throwaway directory. They must be
  set before anything imports lessonplans, because settings and the engine
  are created at import time.
- SQLite (aiosqlite) with NullPool, so no connection outlives the event
  loop that opened it.
- Seed data is committed via the app's own AsyncSessionLocal.
- The HTTP test client uses the real FastAPI app with its own sessions.
- Each test gets seed data with unique UUIDs to avoid collisions.
"""

import os
import tempfile
import uuid
from io import BytesIO
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="lessonplans-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")

import docx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from lessonplans.database import AsyncSessionLocal, Base, engine  # noqa: E402
from lessonplans.main import app  # noqa: E402
from lessonplans.models import Document  # noqa: E402
from lessonplans.services.layout import LessonPlanMetadata  # noqa: E402
from lessonplans.services.pdf_generator import StandardizedPDFGenerator  # noqa: E402
from lessonplans.services.storage import get_storage_service, original_key  # noqa: E402


@pytest_asyncio.fixture(scope="session")
async def setup_db():
    """Create all tables once before the test session."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def client(setup_db):
    """Async HTTP test client against the real FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def upload_root() -> Path:
    return get_storage_service().base_path


# --- Sample files ---

@pytest.fixture(scope="session")
def pdf_bytes() -> bytes:
    """A small real PDF with a text layer (our own generator's output)."""
    metadata = LessonPlanMetadata(title="Plano original", subject="Ciências")
    return StandardizedPDFGenerator().generate(metadata)


@pytest.fixture(scope="session")
def docx_bytes() -> bytes:
    document = docx.Document()
    document.core_properties.title = "Plano de Aula DOCX"
    document.add_paragraph("Objetivo: reconhecer frações equivalentes.")
    document.add_paragraph("Atividade: jogo de cartas com frações.")
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


# --- Seed data fixtures ---

@pytest_asyncio.fixture
async def test_document(setup_db, pdf_bytes):
    """An uploaded PDF document with no lesson-plan data yet."""
    storage = get_storage_service()
    key = original_key("plano.pdf")
    path = storage.get_file_path(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf_bytes)

    document = Document(
        id=uuid.uuid4(),
        title="Frações equivalentes",
        description="Introdução a frações para o 5º ano.",
        original_file_name="plano.pdf",
        original_file_path=key,
        original_file_type="pdf",
    )
    async with AsyncSessionLocal() as session:
        session.add(document)
        await session.commit()
        await session.refresh(document)
    return document
