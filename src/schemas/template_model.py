"""Pydantic models for the parsed template representation.

These records are produced by the theme, master and layout parsers and
consumed by the mappers. Raw XML nodes (fill, line and effect elements,
text-style sections) are carried as lxml elements so the mappers can
resolve them against the correct color map later.
"""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

SCHEME_COLOR_NAMES = (
    "dk1", "lt1", "dk2", "lt2",
    "accent1", "accent2", "accent3", "accent4", "accent5", "accent6",
    "hlink", "folHlink",
)

ACCENT_SLOTS = ("accent1", "accent2", "accent3", "accent4", "accent5", "accent6")


class ThemeFonts(BaseModel):
    """Major (heading) and minor (body) latin typefaces of a theme."""

    heading: str = ""
    body: str = ""


class FormatScheme(BaseModel):
    """Raw style lists of a theme's a:fmtScheme, kept for reference lookups."""

    fill_style_lst: Any = None
    ln_style_lst: Any = None
    effect_style_lst: Any = None
    bg_fill_style_lst: Any = None


class Theme(BaseModel):
    colors: dict[str, str] = Field(
        default_factory=dict,
        description="Scheme slot name -> 'RRGGBB' (e.g. {'dk1': '000000'})",
    )
    fonts: ThemeFonts = Field(default_factory=ThemeFonts)
    format_scheme: Optional[FormatScheme] = None


class SlideDimensions(BaseModel):
    """Slide size in inches. Defaults to the standard 4:3 size."""

    width: float = 10.0
    height: float = 7.5


# ---------------------------------------------------------------------------
# Colors and geometry
# ---------------------------------------------------------------------------

class ResolvedColor(BaseModel):
    """Terminal output of color resolution.

    ``transparency`` is None when the source carried no alpha modifier;
    that is different from an explicit 0 (fully opaque).
    """

    color: str = Field(description="'RRGGBB' uppercase hex")
    transparency: Optional[int] = Field(
        default=None, description="0-100 percent transparent, None = unspecified",
    )


class Position(BaseModel):
    """Shape bounds in inches."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.x == 0 and self.y == 0 and self.w == 0 and self.h == 0


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

AutoFit = Literal["shrink", "resize", "none"]


class BodyProps(BaseModel):
    """Text frame properties from a:bodyPr."""

    margin: tuple[float, float, float, float] = Field(
        description="(top, right, bottom, left) internal margins in inches",
    )
    valign: Optional[str] = None
    rotation: Optional[float] = None
    vert: Optional[str] = None
    auto_fit: Optional[AutoFit] = None


class RunProps(BaseModel):
    """Character formatting of a run, a field or a default-run-properties element.

    ``bold`` and ``italic`` are three-valued: None means "not stated here,
    inherit", False means "explicitly off".
    """

    font_size: Optional[float] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[str] = None
    strike: Optional[str] = None
    font_face: Optional[str] = None
    color: Optional[str] = None
    highlight: Optional[str] = None
    superscript: bool = False
    subscript: bool = False
    char_spacing: Optional[float] = None


class TextRun(RunProps):
    text: str = ""
    is_field: bool = False
    field_type: Optional[str] = None
    is_break: bool = False


class Bullet(BaseModel):
    type: Literal["char", "number"]
    character_code: Optional[str] = Field(
        default=None, description="Uppercase hex code point of the bullet glyph",
    )
    number_type: Optional[str] = Field(default=None, description="e.g. 'arabicPeriod'")
    font_face: Optional[str] = None
    color: Optional[str] = None
    size_percent: Optional[float] = None


# False = explicitly no bullet, None = unspecified (inherit from list style)
BulletSpec = Union[Bullet, Literal[False], None]


class LevelProps(BaseModel):
    """Paragraph defaults for one list-style level (a:lvlNpPr / a:defPPr)."""

    align: Optional[str] = None
    margin_left: Optional[float] = None
    indent: Optional[float] = None
    line_spacing: Optional[float] = None
    line_spacing_multiple: Optional[float] = None
    para_space_before: Optional[float] = None
    para_space_after: Optional[float] = None
    bullet: BulletSpec = None
    default_run_props: Optional[RunProps] = None


class Paragraph(BaseModel):
    align: str = "left"
    explicit_align: Optional[str] = Field(
        default=None,
        description="Alignment stated on the paragraph itself; None when 'align' is the default",
    )
    level: int = Field(default=1, description="1-based nesting level")
    rtl_mode: bool = False
    margin_left: float = 0.0
    indent: float = 0.0
    line_spacing: Optional[float] = Field(default=None, description="Absolute, in points")
    line_spacing_multiple: Optional[float] = None
    para_space_before: Optional[float] = None
    para_space_after: Optional[float] = None
    bullet: BulletSpec = None
    runs: list[TextRun] = Field(default_factory=list)
    default_run_props: Optional[RunProps] = None


class TextProps(BaseModel):
    body_props: BodyProps
    paragraphs: list[Paragraph] = Field(default_factory=list)
    plain_text: str = ""
    lst_style_props: Optional[dict[int, LevelProps]] = Field(
        default=None, description="List-style level (0-9) -> paragraph defaults",
    )


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

class FillKind(str, Enum):
    SOLID = "solidFill"
    GRADIENT = "gradFill"
    IMAGE = "blipFill"
    PATTERN = "pattFill"
    NONE = "noFill"


class FillRef(BaseModel):
    """Unresolved fill: which kind was found plus its raw element."""

    kind: FillKind
    element: Any = None


class BackgroundKind(str, Enum):
    PROPERTIES = "bgPr"
    THEME_REFERENCE = "bgRef"


class BackgroundRef(BaseModel):
    """Unresolved p:bg content: inline p:bgPr, or a p:bgRef into the format scheme."""

    kind: BackgroundKind
    element: Any = None


class ShapeKind(str, Enum):
    SHAPE = "shape"
    PICTURE = "picture"


class ShapeProps(BaseModel):
    geometry: Optional[str] = None
    fill: Optional[FillRef] = None
    line: Any = None
    effects: Any = None
    av_lst: Optional[dict[str, int]] = None


class ParsedShape(ShapeProps):
    """A decorative (non-placeholder) shape from a master or layout."""

    kind: ShapeKind = ShapeKind.SHAPE
    name: str = ""
    position: Optional[Position] = None
    rotation: Optional[float] = None
    text_props: Optional[TextProps] = None
    image_ref: Optional[str] = None


class ParsedPlaceholder(BaseModel):
    type: Optional[str] = None
    idx: Optional[str] = None
    size: Optional[str] = None
    name: str = ""
    position: Optional[Position] = None
    rotation: Optional[float] = None
    text_props: Optional[TextProps] = None
    shape_props: ShapeProps = Field(default_factory=ShapeProps)
    image_ref: Optional[str] = None


class PlaceholderDefault(BaseModel):
    """Master-level position/text for one placeholder identity."""

    position: Optional[Position] = None
    text_props: Optional[TextProps] = None


class ShapeTreeItem(BaseModel):
    tag: Literal["sp", "pic", "grpSp", "cxnSp", "graphicFrame"]
    element: Any = None


# ---------------------------------------------------------------------------
# Relationships, masters and layouts
# ---------------------------------------------------------------------------

class Relationship(BaseModel):
    type: str = Field(description="Last path segment of the relationship type URL")
    target: str


class TextStyles(BaseModel):
    """Raw p:titleStyle / p:bodyStyle / p:otherStyle sections of a master."""

    title: Any = None
    body: Any = None
    other: Any = None


class ParsedMaster(BaseModel):
    file: Optional[str] = None
    clr_map: dict[str, str] = Field(default_factory=dict)
    background: Optional[BackgroundRef] = None
    shapes: list[ShapeTreeItem] = Field(default_factory=list)
    text_styles: TextStyles = Field(default_factory=TextStyles)
    relationships: dict[str, Relationship] = Field(default_factory=dict)
    placeholder_defaults: dict[str, PlaceholderDefault] = Field(
        default_factory=dict,
        description="Keyed by placeholder type and/or 'idx:<n>'",
    )
    static_shapes: list[ParsedShape] = Field(default_factory=list)


class ParsedLayout(BaseModel):
    file: Optional[str] = None
    master_file: Optional[str] = None
    name: str = ""
    type: Optional[str] = None
    show_master_sp: bool = True
    clr_map_override: Optional[dict[str, str]] = None
    background: Optional[BackgroundRef] = None
    placeholders: list[ParsedPlaceholder] = Field(default_factory=list)
    static_shapes: list[ParsedShape] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    relationships: dict[str, Relationship] = Field(default_factory=dict)
