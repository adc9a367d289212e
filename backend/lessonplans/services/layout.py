"""
Standardized lesson-plan page layout.

Turns a lesson plan's metadata into an ordered list of draw commands for
a single A4 page. There is no layout engine underneath: we track a
vertical cursor by hand, wrap text by character count, and check how much
page is left before drawing.

The page never reflows onto a second page. When space runs out:
- body lines below SAFE_FLOOR are silently dropped
- Resources and Evaluation are skipped entirely unless the cursor is
  above MIN_SPACE_FOR_TRAILING_SECTIONS
- the footer always lands at the same fixed coordinates

Everything here is pure: build_layout() returns commands, and the PDF
generator replays them onto a canvas. That keeps the truncation rules
testable without producing a PDF.

Coordinates are PDF points (72 per inch), origin at the bottom-left.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Optional, Sequence, Union

# --- Page geometry ---
PAGE_SIZE = (595.28, 841.89)  # ISO A4 at 72 dpi
MARGIN_X = 50
LIST_INDENT_X = 60
HEADER_TOP_OFFSET = 60
HEADER_HEIGHT = 60

# Body lines are only drawn while the cursor is at or above this line
SAFE_FLOOR = 80
# Resources/Evaluation need the cursor strictly above this to be drawn at all
MIN_SPACE_FOR_TRAILING_SECTIONS = 100

FOOTER_RULE_Y = 60
FOOTER_TEXT_Y = 40

# --- Colors (RGB, 0..1) ---
Color = tuple[float, float, float]

PRIMARY_COLOR: Color = (0.2, 0.4, 0.8)    # Blue - banner, title, labels
TEXT_COLOR: Color = (0.1, 0.1, 0.1)       # Near black - body text
RULE_COLOR: Color = (0.9, 0.9, 0.9)       # Light gray - footer divider
MUTED_COLOR: Color = (0.5, 0.5, 0.5)      # Gray - footer caption
WHITE: Color = (1.0, 1.0, 1.0)

HEADER_TEXT = "PLANO DE AULA PADRONIZADO"
FOOTER_TEMPLATE = "Gerado em: {date} - Sistema de Planos de Aula"


# ------------------------------------------------------------------
# METADATA
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LessonPlanMetadata:
    """Read-only view of what gets printed on the standardized page."""

    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    target_audience: Optional[str] = None
    duration: Optional[str] = None
    objectives: Sequence[str] = field(default_factory=tuple)
    activities: Sequence[str] = field(default_factory=tuple)
    resources: Optional[str] = None
    evaluation: Optional[str] = None

    def __post_init__(self):
        # Freeze the lists so two equal inputs compare (and hash) equal
        object.__setattr__(self, "objectives", tuple(self.objectives or ()))
        object.__setattr__(self, "activities", tuple(self.activities or ()))

    def is_set(self, name: str) -> bool:
        value = getattr(self, name)
        if isinstance(value, str):
            return bool(value.strip())
        return bool(value)

    def is_empty(self) -> bool:
        """No lesson-plan content at all (header, title and footer only)."""
        return not any(
            self.is_set(name)
            for name in ("objectives", "activities", "evaluation", "resources")
        )

    @classmethod
    def from_document(cls, document) -> "LessonPlanMetadata":
        """Build from a persisted Document row."""
        return cls(
            title=document.title,
            description=document.description,
            subject=document.subject,
            target_audience=document.target_audience,
            duration=document.duration,
            objectives=document.objectives or (),
            activities=document.activities or (),
            resources=document.resources,
            evaluation=document.evaluation,
        )


# ------------------------------------------------------------------
# CURSOR AND DRAW COMMANDS
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutCursor:
    """Current vertical write position on the page.

    Immutable: writers return a new cursor instead of mutating this one.
    """

    y_position: float
    page_height: float
    page_width: float

    @classmethod
    def top_of_page(cls, page_size=PAGE_SIZE) -> "LayoutCursor":
        width, height = page_size
        return cls(y_position=height - HEADER_TOP_OFFSET,
                   page_height=height, page_width=width)

    def moved(self, dy: float) -> "LayoutCursor":
        return replace(self, y_position=self.y_position - dy)


@dataclass(frozen=True)
class RenderedLine:
    text: str
    x: float
    y: float
    font_size: float
    bold: bool = False
    color: Color = TEXT_COLOR

    def draw_on(self, canvas) -> None:
        canvas.draw_text(self.x, self.y, self.text,
                         font_size=self.font_size, bold=self.bold, color=self.color)


@dataclass(frozen=True)
class RenderedRect:
    x: float
    y: float
    width: float
    height: float
    color: Color

    def draw_on(self, canvas) -> None:
        canvas.draw_rect(self.x, self.y, self.width, self.height, color=self.color)


@dataclass(frozen=True)
class RenderedRule:
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float
    color: Color

    def draw_on(self, canvas) -> None:
        canvas.draw_line(self.x1, self.y1, self.x2, self.y2,
                         thickness=self.thickness, color=self.color)


DrawCommand = Union[RenderedLine, RenderedRect, RenderedRule]


# ------------------------------------------------------------------
# TEXT WRAPPER
# ------------------------------------------------------------------

def wrap_text(text: str, max_chars_per_line: int) -> list[str]:
    """Greedy word wrap by character count.

    A word longer than the budget is not split; it gets a line of its own
    and overflows.
    """
    if max_chars_per_line < 1:
        raise ValueError("max_chars_per_line must be at least 1")

    lines: list[str] = []
    current = ""
    for word in (text or "").split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= max_chars_per_line:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


# ------------------------------------------------------------------
# SECTION WRITER
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SectionStyle:
    label_size: float
    label_color: Color
    label_advance: float
    chars_per_line: int
    body_x: float = MARGIN_X
    body_size: float = 10
    body_color: Color = TEXT_COLOR
    line_height: float = 15
    section_gap: float = 10
    label_x: float = MARGIN_X


DESCRIPTION_STYLE = SectionStyle(
    label_size=12, label_color=TEXT_COLOR, label_advance=20, chars_per_line=80,
)
FIELD_STYLE = SectionStyle(
    label_size=12, label_color=PRIMARY_COLOR, label_advance=18, chars_per_line=80,
)
LIST_STYLE = SectionStyle(
    label_size=14, label_color=PRIMARY_COLOR, label_advance=20, chars_per_line=75,
    body_x=LIST_INDENT_X,
)


def _label(cursor: LayoutCursor, label: str, style: SectionStyle) -> RenderedLine:
    return RenderedLine(label, style.label_x, cursor.y_position,
                        font_size=style.label_size, bold=True, color=style.label_color)


def _write_lines(cursor: LayoutCursor, lines: Sequence[str], style: SectionStyle):
    commands = []
    for line in lines:
        if cursor.y_position < SAFE_FLOOR:
            break
        commands.append(RenderedLine(line, style.body_x, cursor.y_position,
                                     font_size=style.body_size, color=style.body_color))
        cursor = cursor.moved(style.line_height)
    return cursor, commands


def write_section(
    cursor: LayoutCursor,
    label: str,
    body: str,
    max_lines: int,
    style: SectionStyle = FIELD_STYLE,
) -> tuple[LayoutCursor, list[DrawCommand]]:
    """Draw a label followed by wrapped body text capped at max_lines.

    Returns the cursor below the section (including the section gap) and
    the commands to draw it.
    """
    commands: list[DrawCommand] = [_label(cursor, label, style)]
    cursor = cursor.moved(style.label_advance)

    lines = wrap_text(body, style.chars_per_line)[:max_lines]
    cursor, body_commands = _write_lines(cursor, lines, style)
    commands.extend(body_commands)

    return cursor.moved(style.section_gap), commands


def write_list_section(
    cursor: LayoutCursor,
    label: str,
    items: Sequence[str],
    max_items: int,
    style: SectionStyle = LIST_STYLE,
) -> tuple[LayoutCursor, list[DrawCommand]]:
    """Draw a label followed by numbered items ("1. ...").

    Only the first max_items items are kept; each is wrapped on its own.
    """
    commands: list[DrawCommand] = [_label(cursor, label, style)]
    cursor = cursor.moved(style.label_advance)

    for index, item in enumerate(items[:max_items]):
        lines = wrap_text(f"{index + 1}. {item}", style.chars_per_line)
        cursor, item_commands = _write_lines(cursor, lines, style)
        commands.extend(item_commands)

    return cursor.moved(style.section_gap), commands


# ------------------------------------------------------------------
# LAYOUT ENGINE
# ------------------------------------------------------------------

SINGLE = "single"
LIST = "list"


@dataclass(frozen=True)
class SectionSpec:
    """One row of the section table that drives build_layout()."""

    label: str
    field: str
    kind: str = SINGLE
    capacity: int = 2
    style: SectionStyle = FIELD_STYLE
    # Cursor must be strictly above this for the section to render at all
    min_space: Optional[float] = None


# Drawn in this order, each only when its field is set
SECTIONS = (
    SectionSpec("Descrição:", "description", style=DESCRIPTION_STYLE),
    SectionSpec("Disciplina:", "subject"),
    SectionSpec("Público-Alvo:", "target_audience"),
    SectionSpec("Duração:", "duration"),
    SectionSpec("Objetivos:", "objectives", kind=LIST, capacity=3, style=LIST_STYLE),
    SectionSpec("Atividades:", "activities", kind=LIST, capacity=3, style=LIST_STYLE),
    SectionSpec("Recursos:", "resources", min_space=MIN_SPACE_FOR_TRAILING_SECTIONS),
    SectionSpec("Avaliação:", "evaluation", min_space=MIN_SPACE_FOR_TRAILING_SECTIONS),
)


def _header(cursor: LayoutCursor):
    commands = [
        RenderedRect(0, cursor.y_position - 10, cursor.page_width, HEADER_HEIGHT,
                     color=PRIMARY_COLOR),
        RenderedLine(HEADER_TEXT, MARGIN_X, cursor.y_position + 10,
                     font_size=24, bold=True, color=WHITE),
    ]
    return cursor.moved(80), commands


def _document_title(cursor: LayoutCursor, title: str):
    line = RenderedLine(title, MARGIN_X, cursor.y_position,
                        font_size=18, bold=True, color=PRIMARY_COLOR)
    return cursor.moved(30), [line]


def _footer(cursor: LayoutCursor, generated_at: date) -> list[DrawCommand]:
    # Fixed coordinates: independent of where the cursor ended up
    caption = FOOTER_TEMPLATE.format(date=generated_at.strftime("%d/%m/%Y"))
    return [
        RenderedRule(MARGIN_X, FOOTER_RULE_Y, cursor.page_width - MARGIN_X, FOOTER_RULE_Y,
                     thickness=1, color=RULE_COLOR),
        RenderedLine(caption, MARGIN_X, FOOTER_TEXT_Y, font_size=8, color=MUTED_COLOR),
    ]


def _section(cursor: LayoutCursor, spec: SectionSpec, metadata: LessonPlanMetadata):
    if not metadata.is_set(spec.field):
        return cursor, []
    if spec.min_space is not None and cursor.y_position <= spec.min_space:
        return cursor, []

    value = getattr(metadata, spec.field)
    if spec.kind == LIST:
        return write_list_section(cursor, spec.label, value, spec.capacity, spec.style)
    return write_section(cursor, spec.label, value, spec.capacity, spec.style)


def build_layout(
    metadata: LessonPlanMetadata,
    generated_at: date,
    page_size=PAGE_SIZE,
    sections: Sequence[SectionSpec] = SECTIONS,
) -> list[DrawCommand]:
    """Lay out the standardized page and return its draw commands in order.

    Steps run strictly in sequence: header banner, document title, each
    section from the table, footer.
    """
    cursor = LayoutCursor.top_of_page(page_size)
    commands: list[DrawCommand] = []

    cursor, header = _header(cursor)
    commands.extend(header)

    cursor, title = _document_title(cursor, metadata.title)
    commands.extend(title)

    for spec in sections:
        cursor, section = _section(cursor, spec, metadata)
        commands.extend(section)

    commands.extend(_footer(cursor, generated_at))
    return commands
