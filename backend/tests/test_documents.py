"""
Integration tests for the Documents API.

Tests upload, list, get, edit, standardize, text extraction, downloads
and delete against the real app and a throwaway SQLite database.
"""

import uuid
from datetime import date
from io import BytesIO

import pytest
from httpx import AsyncClient
from pypdf import PdfReader

from lessonplans.config import settings
from lessonplans.services.pdf_generator import StandardizedPDFGenerator

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

LESSON_PLAN = {
    "subject": "Matemática",
    "target_audience": "5º ano",
    "duration": "50 minutos",
    "objectives": ["Entender X", "Aplicar Y", "Revisar Z", "Extra A"],
    "activities": [],
    "resources": "Quadro e material dourado",
    "evaluation": "Lista de exercícios",
}


async def upload(client: AsyncClient, content: bytes, filename="plano.pdf",
                 mime=PDF_MIME, title="Aula 1", description=None):
    data = {"title": title}
    if description is not None:
        data["description"] = description
    return await client.post(
        "/api/v1/documents/upload",
        data=data,
        files={"file": (filename, content, mime)},
    )


# --- Upload ---

@pytest.mark.asyncio
async def test_upload_pdf(client: AsyncClient, pdf_bytes, upload_root):
    """POST /api/v1/documents/upload stores the file and creates a record."""
    response = await upload(client, pdf_bytes, description="  Primeira aula  ")

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Aula 1"
    assert data["description"] == "Primeira aula"
    assert data["original_file_name"] == "plano.pdf"
    assert data["original_file_type"] == "pdf"
    assert data["is_standardized"] is False
    assert data["has_lesson_plan_data"] is False
    assert data["lesson_plan_data"] is None

    stored = list((upload_root / "original").glob("plano-*.pdf"))
    assert any(p.read_bytes() == pdf_bytes for p in stored)


@pytest.mark.asyncio
async def test_upload_docx(client: AsyncClient, docx_bytes):
    response = await upload(client, docx_bytes, filename="plano.docx", mime=DOCX_MIME)

    assert response.status_code == 201
    assert response.json()["original_file_type"] == "docx"


@pytest.mark.asyncio
async def test_upload_rejects_wrong_type(client: AsyncClient):
    """Non PDF/DOCX files are rejected."""
    response = await upload(client, b"hello world", filename="notes.txt", mime="text/plain")

    assert response.status_code == 400
    assert "Only PDF and DOCX" in response.json()["detail"]


@pytest.mark.asyncio
async def test_upload_rejects_extension_mismatch(client: AsyncClient, pdf_bytes):
    response = await upload(client, pdf_bytes, filename="plano.docx", mime=PDF_MIME)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_requires_title(client: AsyncClient, pdf_bytes):
    response = await upload(client, pdf_bytes, title="   ")

    assert response.status_code == 400
    assert response.json()["detail"] == "Title is required"


@pytest.mark.asyncio
async def test_upload_too_large(client: AsyncClient, pdf_bytes, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 100)

    response = await upload(client, pdf_bytes)

    assert response.status_code == 413
    assert "File too large" in response.json()["detail"]


# --- List / get / edit ---

@pytest.mark.asyncio
async def test_list_documents(client: AsyncClient, test_document):
    response = await client.get("/api/v1/documents?page=1&page_size=100")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] >= 1
    assert data["page"] == 1
    assert data["page_size"] == 100
    assert str(test_document.id) in [d["id"] for d in data["documents"]]


@pytest.mark.asyncio
async def test_list_documents_caps_page_size(client: AsyncClient, test_document):
    response = await client.get("/api/v1/documents?page_size=500")

    data = response.json()
    assert data["page_size"] == 100
    assert len(data["documents"]) <= 100


@pytest.mark.asyncio
async def test_get_document(client: AsyncClient, test_document):
    response = await client.get(f"/api/v1/documents/{test_document.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(test_document.id)
    assert data["title"] == "Frações equivalentes"


@pytest.mark.asyncio
async def test_get_document_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/documents/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Document not found"


@pytest.mark.asyncio
async def test_update_document(client: AsyncClient, test_document):
    response = await client.patch(
        f"/api/v1/documents/{test_document.id}",
        json={"title": "Frações (revisado)", "description": ""},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Frações (revisado)"
    assert data["description"] is None


@pytest.mark.asyncio
async def test_update_document_keeps_description_when_omitted(client: AsyncClient, test_document):
    response = await client.patch(
        f"/api/v1/documents/{test_document.id}", json={"title": "Novo título"},
    )

    assert response.json()["description"] == test_document.description


@pytest.mark.asyncio
async def test_update_document_rejects_blank_title(client: AsyncClient, test_document):
    response = await client.patch(
        f"/api/v1/documents/{test_document.id}", json={"title": "  "},
    )

    assert response.status_code == 422


# --- Standardize ---

@pytest.mark.asyncio
async def test_standardize_document(client: AsyncClient, test_document, upload_root):
    """POST /standardize stores the data and writes the standardized PDF."""
    response = await client.post(
        f"/api/v1/documents/{test_document.id}/standardize",
        json={"lesson_plan_data": LESSON_PLAN},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_standardized"] is True
    assert data["has_lesson_plan_data"] is True
    assert data["standardized_at"] is not None
    assert data["standardized_file_path"] == f"standardized/{test_document.id}-standardized.pdf"
    assert data["lesson_plan_data"]["objectives"] == LESSON_PLAN["objectives"]
    assert data["lesson_plan_data"]["target_audience"] == "5º ano"

    pdf_path = upload_root / data["standardized_file_path"]
    assert pdf_path.read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_standardized_pdf_content(client: AsyncClient, test_document):
    await client.post(
        f"/api/v1/documents/{test_document.id}/standardize",
        json={"lesson_plan_data": LESSON_PLAN},
    )

    response = await client.get(f"/api/v1/documents/{test_document.id}/download/standardized")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "padronizado.pdf" in response.headers["content-disposition"]

    text = PdfReader(BytesIO(response.content)).pages[0].extract_text()
    assert "equivalentes" in text
    assert "1. Entender X" in text
    assert "3. Revisar Z" in text
    assert "Extra A" not in text
    assert "Atividades" not in text
    assert date.today().strftime("%d/%m/%Y") in text


@pytest.mark.asyncio
async def test_standardize_accepts_camel_case(client: AsyncClient, test_document):
    response = await client.post(
        f"/api/v1/documents/{test_document.id}/standardize",
        json={"lessonPlanData": {"targetAudience": "EJA", "objectives": ["A", " "]}},
    )

    assert response.status_code == 200
    plan = response.json()["lesson_plan_data"]
    assert plan["target_audience"] == "EJA"
    assert plan["objectives"] == ["A"]


@pytest.mark.asyncio
async def test_standardize_without_content(client: AsyncClient, test_document):
    """Empty lesson-plan data still produces a PDF (header, title, footer)."""
    response = await client.post(
        f"/api/v1/documents/{test_document.id}/standardize",
        json={"lesson_plan_data": {}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_standardized"] is True
    assert data["has_lesson_plan_data"] is False


@pytest.mark.asyncio
async def test_standardize_requires_lesson_plan_data(client: AsyncClient, test_document):
    response = await client.post(
        f"/api/v1/documents/{test_document.id}/standardize", json={},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_standardize_not_found(client: AsyncClient):
    response = await client.post(
        f"/api/v1/documents/{uuid.uuid4()}/standardize",
        json={"lesson_plan_data": LESSON_PLAN},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_standardize_failure_is_not_committed(client: AsyncClient, test_document, monkeypatch):
    """A generator failure propagates and leaves the document untouched."""
    def broken_generate(self, metadata, output_path=None, generated_at=None):
        raise RuntimeError("font missing")

    monkeypatch.setattr(StandardizedPDFGenerator, "generate", broken_generate)

    with pytest.raises(RuntimeError, match="font missing"):
        await client.post(
            f"/api/v1/documents/{test_document.id}/standardize",
            json={"lesson_plan_data": LESSON_PLAN},
        )

    monkeypatch.undo()
    data = (await client.get(f"/api/v1/documents/{test_document.id}")).json()
    assert data["is_standardized"] is False
    assert data["lesson_plan_data"] is None


# --- Text extraction ---

@pytest.mark.asyncio
async def test_extract_text_from_pdf(client: AsyncClient, test_document):
    response = await client.get(f"/api/v1/documents/{test_document.id}/text")

    assert response.status_code == 200
    data = response.json()
    assert data["file_type"] == "pdf"
    assert "Plano original" in data["text"]


@pytest.mark.asyncio
async def test_extract_text_from_docx(client: AsyncClient, docx_bytes):
    uploaded = await upload(client, docx_bytes, filename="plano.docx", mime=DOCX_MIME)

    response = await client.get(f"/api/v1/documents/{uploaded.json()['id']}/text")

    assert response.status_code == 200
    assert "frações equivalentes" in response.json()["text"]


# --- Downloads ---

@pytest.mark.asyncio
async def test_download_original(client: AsyncClient, test_document, pdf_bytes):
    response = await client.get(f"/api/v1/documents/{test_document.id}/download/original")

    assert response.status_code == 200
    assert response.content == pdf_bytes
    assert "plano.pdf" in response.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_standardized_before_standardizing(client: AsyncClient, test_document):
    response = await client.get(f"/api/v1/documents/{test_document.id}/download/standardized")

    assert response.status_code == 404
    assert response.json()["detail"] == "Standardized document not found"


# --- Delete ---

@pytest.mark.asyncio
async def test_delete_document(client: AsyncClient, test_document, upload_root):
    await client.post(
        f"/api/v1/documents/{test_document.id}/standardize",
        json={"lesson_plan_data": LESSON_PLAN},
    )

    response = await client.delete(f"/api/v1/documents/{test_document.id}")

    assert response.status_code == 200
    assert response.json()["document_id"] == str(test_document.id)
    assert not (upload_root / test_document.original_file_path).exists()
    assert not (upload_root / f"standardized/{test_document.id}-standardized.pdf").exists()

    response = await client.get(f"/api/v1/documents/{test_document.id}")
    assert response.status_code == 404
