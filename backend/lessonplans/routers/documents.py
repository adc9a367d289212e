"""
Document management API endpoints.

These handle the lifecycle of a lesson plan:
1. Upload the original file (PDF or DOCX)
2. List / get / edit documents
3. Attach lesson-plan data and generate the standardized PDF
4. Download the original or the standardized file
5. Delete a document and its files

Design notes:
- Routers are THIN - they parse HTTP requests and call services
- File validation happens here (type, title) because it's an HTTP concern
- PDF generation is delegated to the standardization service
- Database operations use the async session from FastAPI's dependency injection
"""

from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lessonplans.database import get_db
from lessonplans.models import Document
from lessonplans.schemas.documents import (
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdateRequest,
    ExtractedTextResponse,
    StandardizeRequest,
)
from lessonplans.services.file_processor import get_processor
from lessonplans.services.standardization import load_document, standardize_document
from lessonplans.services.storage import get_storage_service, original_key

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])

# Allowed MIME types and their file extensions
ALLOWED_TYPES = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}
MEDIA_TYPES = {ext: mime for mime, ext in ALLOWED_TYPES.items()}


@router.post("/upload", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Upload a lesson-plan file.

    Accepts PDF and DOCX files up to settings.MAX_FILE_SIZE.
    The file is saved to storage and a database record is created.

    Args:
        file: The lesson-plan file (multipart form upload)
        title: Document title shown on the standardized PDF
        description: Optional - short summary of the lesson
    """
    if not title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    # --- Validate file type ---
    # Both the browser-supplied content type and the extension must agree
    extension = Path(file.filename or "").suffix.lower().lstrip(".")
    if file.content_type not in ALLOWED_TYPES or ALLOWED_TYPES[file.content_type] != extension:
        raise HTTPException(
            status_code=400,
            detail="Only PDF and DOCX files are allowed",
        )

    storage = get_storage_service()
    storage_key = original_key(file.filename)
    file_size = await storage.save_file(file, storage_key)

    document = Document(
        id=uuid4(),
        title=title.strip(),
        description=(description or "").strip() or None,
        original_file_name=file.filename,
        original_file_path=storage_key,
        original_file_type=extension,
    )
    db.add(document)
    await db.commit()
    await db.refresh(document)

    print(f"📁 Uploaded {file.filename} ({file_size} bytes) as {storage_key}")
    return DocumentResponse.from_document(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    page: int = 1,
    page_size: int = 20,
    db: AsyncSession = Depends(get_db),
):
    """List documents, newest first.

    Args:
        page: Page number (1-indexed)
        page_size: Results per page (default 20, max 100)
    """
    page = max(page, 1)
    page_size = max(min(page_size, 100), 1)  # Cap at 100
    offset = (page - 1) * page_size

    total_result = await db.execute(select(func.count(Document.id)))
    total = total_result.scalar()

    query = (
        select(Document)
        .order_by(Document.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )
    result = await db.execute(query)
    documents = result.scalars().all()

    return DocumentListResponse(
        documents=[DocumentResponse.from_document(d) for d in documents],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get details about a specific document."""
    document = await load_document(db, document_id)
    return DocumentResponse.from_document(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: UUID,
    request: DocumentUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Edit the title and/or description.

    Doesn't regenerate the standardized PDF; call /standardize again
    to refresh it.
    """
    document = await load_document(db, document_id)

    if request.title is not None:
        document.title = request.title
    if "description" in request.model_fields_set:
        document.description = (request.description or "").strip() or None

    await db.commit()
    await db.refresh(document)
    return DocumentResponse.from_document(document)


@router.post("/{document_id}/standardize", response_model=DocumentResponse)
async def standardize(
    document_id: UUID,
    request: StandardizeRequest,
    db: AsyncSession = Depends(get_db),
):
    """Attach lesson-plan data and generate the standardized PDF.

    Calling this again replaces the lesson-plan data and overwrites the
    previous PDF.
    """
    document = await standardize_document(
        db, document_id, request.lesson_plan_data.model_dump(),
    )
    return DocumentResponse.from_document(document)


@router.get("/{document_id}/text", response_model=ExtractedTextResponse)
async def get_document_text(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Extract plain text from the original upload."""
    document = await load_document(db, document_id)
    processor = get_processor(document.original_file_type)

    storage = get_storage_service()
    extracted = await run_in_threadpool(
        processor.process, storage.get_file_path(document.original_file_path),
    )

    return ExtractedTextResponse(
        document_id=document.id,
        file_type=document.original_file_type,
        text=extracted.text,
        metadata=extracted.metadata,
    )


@router.get("/{document_id}/download/original")
async def download_original(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Download the file exactly as it was uploaded."""
    document = await load_document(db, document_id)

    storage = get_storage_service()
    if not await storage.file_exists(document.original_file_path):
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        storage.get_file_path(document.original_file_path),
        media_type=MEDIA_TYPES.get(document.original_file_type, "application/octet-stream"),
        filename=document.original_file_name,
    )


@router.get("/{document_id}/download/standardized")
async def download_standardized(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Download the standardized PDF."""
    document = await load_document(db, document_id)

    if not document.is_standardized:
        raise HTTPException(status_code=404, detail="Standardized document not found")

    storage = get_storage_service()
    if not await storage.file_exists(document.standardized_file_path):
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        storage.get_file_path(document.standardized_file_path),
        media_type="application/pdf",
        filename=f"{document.title}-padronizado.pdf",
    )


@router.delete("/{document_id}")
async def delete_document(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a document and its stored files."""
    document = await load_document(db, document_id)

    storage = get_storage_service()
    await storage.delete_file(document.original_file_path)
    if document.standardized_file_path:
        await storage.delete_file(document.standardized_file_path)

    await db.delete(document)
    await db.commit()

    return {"message": "Document deleted", "document_id": str(document_id)}
