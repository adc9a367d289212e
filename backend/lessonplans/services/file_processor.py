"""
Text extraction from uploaded lesson-plan files.

Two processors, one per accepted file type:
- PDFProcessor: pypdf, page by page
- DOCXProcessor: python-docx, paragraph by paragraph

Scanned PDFs have no text layer and come back empty; OCR is out of scope.
"""

import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import docx
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from lessonplans.errors import AppError, NotFoundError


@dataclass
class ExtractedData:
    text: str
    metadata: dict = field(default_factory=dict)


class PDFProcessor:
    file_type = "pdf"

    def supports(self, file_type: str) -> bool:
        return file_type.lower() == self.file_type

    def process(self, file_path: Union[str, Path]) -> ExtractedData:
        file_path = Path(file_path)
        if not file_path.exists():
            raise NotFoundError(f"PDF file not found: {file_path.name}")

        try:
            reader = PdfReader(str(file_path))
            pages = [page.extract_text() or "" for page in reader.pages]
            info = reader.metadata
        except PyPdfError as e:
            raise AppError(f"Failed to process PDF file: {e}", status_code=422) from e

        metadata = {"page_count": len(pages)}
        if info:
            metadata.update({
                "title": info.title,
                "author": info.author,
                "subject": info.subject,
            })
        return ExtractedData(text="\n".join(pages).strip(), metadata=metadata)


class DOCXProcessor:
    file_type = "docx"

    def supports(self, file_type: str) -> bool:
        return file_type.lower() == self.file_type

    def process(self, file_path: Union[str, Path]) -> ExtractedData:
        file_path = Path(file_path)
        if not file_path.exists():
            raise NotFoundError(f"DOCX file not found: {file_path.name}")

        try:
            document = docx.Document(str(file_path))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError) as e:
            raise AppError(f"Failed to process DOCX file: {e}", status_code=422) from e

        props = document.core_properties
        text = "\n".join(p.text for p in document.paragraphs)
        return ExtractedData(
            text=text.strip(),
            metadata={
                "title": props.title or None,
                "author": props.author or None,
                "subject": props.subject or None,
                "paragraph_count": len(document.paragraphs),
            },
        )


PROCESSORS = (PDFProcessor(), DOCXProcessor())


def get_processor(file_type: str):
    """Pick the processor for a file type ("pdf" or "docx")."""
    for processor in PROCESSORS:
        if processor.supports(file_type):
            return processor
    raise AppError(f"Unsupported file type: {file_type}", status_code=422)
