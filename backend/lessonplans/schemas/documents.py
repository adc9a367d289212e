"""
Pydantic schemas for the Documents API.

Schemas define the shape of data flowing through the API:
- Request schemas: what the client sends us
- Response schemas: what we send back

These are separate from the SQLAlchemy model on purpose:
Model = database shape. Schemas = API shape.

Request fields also accept the camelCase names the web client uses
(targetAudience, lessonPlanData); responses are always snake_case.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator


# --- Request Schemas ---

class LessonPlanData(BaseModel):
    """Structured lesson-plan fields filled in by the author."""
    subject: Optional[str] = None
    target_audience: Optional[str] = Field(
        None, validation_alias=AliasChoices("target_audience", "targetAudience"),
    )
    duration: Optional[str] = None
    objectives: list[str] = []
    activities: list[str] = []
    resources: Optional[str] = None
    evaluation: Optional[str] = None

    @field_validator("subject", "target_audience", "duration", "resources", "evaluation")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("objectives", "activities", mode="before")
    @classmethod
    def null_to_empty(cls, items):
        return [] if items is None else items

    @field_validator("objectives", "activities")
    @classmethod
    def drop_blank_items(cls, items: list[str]) -> list[str]:
        # Form rows left empty in the UI shouldn't become "1. " lines
        return [item.strip() for item in items if item and item.strip()]


class StandardizeRequest(BaseModel):
    """Body of POST /documents/{id}/standardize."""
    lesson_plan_data: LessonPlanData = Field(
        validation_alias=AliasChoices("lesson_plan_data", "lessonPlanData"),
    )


class DocumentUpdateRequest(BaseModel):
    """Partial update of a document's title and description."""
    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Title cannot be empty")
        return value.strip() if value is not None else None


# --- Response Schemas ---

class DocumentResponse(BaseModel):
    """What we return when a client asks about a document."""
    id: UUID
    title: str
    description: Optional[str] = None
    original_file_name: str
    original_file_type: str
    lesson_plan_data: Optional[LessonPlanData] = None
    standardized_file_path: Optional[str] = None
    standardized_at: Optional[datetime] = None
    is_standardized: bool
    has_lesson_plan_data: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document) -> "DocumentResponse":
        lesson_plan = {
            key: value
            for key, value in document.lesson_plan_data().items()
            if value is not None
        }
        has_any_field = any(lesson_plan.values())
        return cls(
            id=document.id,
            title=document.title,
            description=document.description,
            original_file_name=document.original_file_name,
            original_file_type=document.original_file_type,
            lesson_plan_data=LessonPlanData(**lesson_plan) if has_any_field else None,
            standardized_file_path=document.standardized_file_path,
            standardized_at=document.standardized_at,
            is_standardized=document.is_standardized,
            has_lesson_plan_data=document.has_lesson_plan_data,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentListResponse(BaseModel):
    """Paginated list of documents."""
    documents: list[DocumentResponse]
    total: int
    page: int
    page_size: int


class ExtractedTextResponse(BaseModel):
    """Plain text pulled out of the original upload."""
    document_id: UUID
    file_type: str
    text: str
    metadata: dict
