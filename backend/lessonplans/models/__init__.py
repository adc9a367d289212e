from lessonplans.models.models import (
    LESSON_PLAN_FIELDS,
    Base,
    Document,
)

__all__ = [
    "Base",
    "Document",
    "LESSON_PLAN_FIELDS",
]
