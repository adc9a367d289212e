"""
Standardized lesson-plan PDF generator.

Replays the draw commands from services.layout onto a single A4 page and
serializes it. Unlike a Platypus story, nothing here flows or paginates:
every element sits at the coordinates the layout computed.

Uses ReportLab's low-level pdfgen canvas:
- Canvas: one page, drawn with absolute coordinates
- drawString / rect / line: the only primitives we need
- invariant=1: no timestamps or random IDs in the output, so the same
  input always produces the same bytes
"""

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from reportlab.pdfgen import canvas as pdfcanvas

from lessonplans.services.layout import PAGE_SIZE, LessonPlanMetadata, build_layout
from lessonplans.services.storage import write_bytes_atomic

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
AUTHOR = "Sistema de Planos de Aula"


class PageCanvas(Protocol):
    """A drawing surface the layout can be replayed onto."""

    def draw_text(self, x: float, y: float, text: str, *,
                  font_size: float, bold: bool, color) -> None: ...

    def draw_rect(self, x: float, y: float, width: float, height: float, *,
                  color) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, *,
                  thickness: float, color) -> None: ...

    def to_bytes(self) -> bytes: ...


class ReportLabCanvas:
    """PageCanvas backed by a one-page ReportLab canvas."""

    def __init__(self, page_size=PAGE_SIZE, title: str = ""):
        self._buffer = BytesIO()
        self._canvas = pdfcanvas.Canvas(self._buffer, pagesize=page_size, invariant=1)
        self._canvas.setTitle(title)
        self._canvas.setAuthor(AUTHOR)

    def draw_text(self, x, y, text, *, font_size, bold, color):
        self._canvas.setFont(BOLD_FONT if bold else REGULAR_FONT, font_size)
        self._canvas.setFillColorRGB(*color)
        self._canvas.drawString(x, y, text)

    def draw_rect(self, x, y, width, height, *, color):
        self._canvas.setFillColorRGB(*color)
        self._canvas.rect(x, y, width, height, stroke=0, fill=1)

    def draw_line(self, x1, y1, x2, y2, *, thickness, color):
        self._canvas.setStrokeColorRGB(*color)
        self._canvas.setLineWidth(thickness)
        self._canvas.line(x1, y1, x2, y2)

    def to_bytes(self) -> bytes:
        self._canvas.showPage()
        self._canvas.save()
        return self._buffer.getvalue()


class StandardizedPDFGenerator:
    """Generates the one-page standardized lesson plan.

    Usage:
        generator = StandardizedPDFGenerator()
        pdf_bytes = generator.generate(
            LessonPlanMetadata(title="Aula 1", objectives=["Entender X"]),
            output_path="uploads/standardized/<id>-standardized.pdf",
        )

    Each call builds its own canvas, so one generator can be shared.
    Canvas and I/O errors propagate unchanged; output_path is only
    written once the whole PDF is in memory.
    """

    def __init__(
        self,
        canvas_factory: Callable[..., PageCanvas] = ReportLabCanvas,
        page_size=PAGE_SIZE,
    ):
        self.canvas_factory = canvas_factory
        self.page_size = page_size

    def generate(
        self,
        metadata: LessonPlanMetadata,
        output_path: Optional[Union[str, Path]] = None,
        generated_at: Optional[date] = None,
    ) -> bytes:
        commands = build_layout(
            metadata,
            generated_at=generated_at or date.today(),
            page_size=self.page_size,
        )

        page = self.canvas_factory(page_size=self.page_size, title=metadata.title)
        for command in commands:
            command.draw_on(page)
        pdf_bytes = page.to_bytes()

        if output_path is not None:
            write_bytes_atomic(output_path, pdf_bytes)
        return pdf_bytes
