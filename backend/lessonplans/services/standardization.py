"""
Standardization orchestrator.

Takes a document and the lesson-plan data the user filled in, and:
1. Stores the lesson-plan data on the document
2. Generates the standardized PDF under standardized/<id>-standardized.pdf
3. Marks the document as standardized

PDF generation is CPU-bound ReportLab work, so it runs in the threadpool
instead of blocking the event loop. If it fails, nothing is committed and
the error propagates to the caller: a document is never marked
standardized without a complete file on disk.
"""

from typing import Optional
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lessonplans.errors import NotFoundError
from lessonplans.models import Document
from lessonplans.services.layout import LessonPlanMetadata
from lessonplans.services.pdf_generator import StandardizedPDFGenerator
from lessonplans.services.storage import (
    LocalStorageService,
    get_storage_service,
    standardized_key,
)


async def load_document(db: AsyncSession, document_id: UUID) -> Document:
    """Fetch a document or raise NotFoundError."""
    result = await db.execute(select(Document).where(Document.id == document_id))
    document = result.scalar_one_or_none()
    if not document:
        raise NotFoundError("Document not found")
    return document


async def standardize_document(
    db: AsyncSession,
    document_id: UUID,
    lesson_plan_data: dict,
    generator: Optional[StandardizedPDFGenerator] = None,
    storage: Optional[LocalStorageService] = None,
) -> Document:
    """Save lesson-plan data and (re)generate the standardized PDF.

    Args:
        db: Request-scoped session.
        document_id: Document to standardize.
        lesson_plan_data: Lesson-plan fields (see schemas.LessonPlanData).

    Returns:
        The updated, committed Document.
    """
    generator = generator or StandardizedPDFGenerator()
    storage = storage or get_storage_service()

    document = await load_document(db, document_id)
    document.update_lesson_plan_data(lesson_plan_data)

    key = standardized_key(document.id)
    metadata = LessonPlanMetadata.from_document(document)

    print(f"📄 Generating standardized PDF for: {document.title}")
    try:
        await run_in_threadpool(generator.generate, metadata, storage.get_file_path(key))
    except Exception as e:
        print(f"❌ Standardization failed for document {document.id}: {str(e)}")
        await db.rollback()
        raise

    document.mark_as_standardized(key)
    await db.commit()
    await db.refresh(document)

    if metadata.is_empty():
        print(f"⚠️  Document {document.id} standardized without lesson-plan content")
    print(f"✅ Standardized PDF saved: {key}")
    return document
