"""
SQLAlchemy models.

One table for now: documents. A document is an uploaded lesson-plan file
(PDF or DOCX) plus the structured lesson-plan data the author fills in
afterwards. Once standardized, it also points at the generated PDF.

Lesson-plan fields live as plain columns (objectives/activities as JSON
lists) rather than a separate table: they are always read and written
together with the document.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lessonplans.database import Base

LESSON_PLAN_FIELDS = (
    "subject",
    "target_audience",
    "duration",
    "objectives",
    "activities",
    "resources",
    "evaluation",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # --- Original upload ---
    original_file_name: Mapped[str] = mapped_column(String(255))
    original_file_path: Mapped[str] = mapped_column(String(512))  # storage key
    original_file_type: Mapped[str] = mapped_column(String(10))   # "pdf" | "docx"

    # --- Lesson plan data ---
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    target_audience: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    objectives: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    activities: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    resources: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evaluation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # --- Standardized output ---
    standardized_file_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    standardized_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )

    @property
    def is_standardized(self) -> bool:
        return bool(self.standardized_file_path)

    @property
    def has_lesson_plan_data(self) -> bool:
        """True when at least one content field is filled in.

        Subject, audience and duration alone don't count: they describe
        the lesson but aren't lesson-plan content.
        """
        return bool(
            self.objectives or self.activities or self.evaluation or self.resources
        )

    def lesson_plan_data(self) -> dict:
        return {field: getattr(self, field) for field in LESSON_PLAN_FIELDS}

    def update_lesson_plan_data(self, data: dict) -> None:
        """Replace all lesson-plan fields. Missing keys are cleared."""
        for field in LESSON_PLAN_FIELDS:
            value = data.get(field)
            if field in ("objectives", "activities"):
                value = list(value or [])
            setattr(self, field, value)
        self.updated_at = _utcnow()

    def mark_as_standardized(self, file_path: str) -> None:
        if not file_path or not file_path.strip():
            raise ValueError("Standardized file path is required")
        self.standardized_file_path = file_path
        self.standardized_at = _utcnow()
        self.updated_at = self.standardized_at
