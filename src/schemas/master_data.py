"""Pydantic models for the resolved slide-master output.

This is the model handed to the generators: every color is a final
'RRGGBB' string, text styling is fully merged, and each layout carries
a flat, de-duplicated object list ready for serialization.
"""

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

from .template_model import ParsedLayout, ResolvedColor, SlideDimensions, ThemeFonts


class ImageFillRef(BaseModel):
    """Image fill marker: the caller resolves ``image_ref`` against relationships."""

    image_ref: str


class LineSpec(BaseModel):
    color: Optional[str] = None
    width: Optional[float] = Field(default=None, description="Line width in points")
    dash_type: Optional[str] = None
    begin_arrow_type: Optional[str] = None
    end_arrow_type: Optional[str] = None


class ShadowSpec(BaseModel):
    type: Literal["outer", "inner"]
    blur: Optional[float] = Field(default=None, description="Blur radius in points")
    offset: Optional[float] = Field(default=None, description="Distance in points")
    angle: Optional[float] = Field(default=None, description="Direction in degrees")
    color: Optional[str] = None
    opacity: Optional[float] = Field(default=None, description="0-1")


class TextOptions(BaseModel):
    """Merged text styling for one text-bearing object."""

    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    margin: Optional[tuple[float, float, float, float]] = None
    valign: Optional[str] = None
    align: Optional[str] = None
    line_spacing: Optional[float] = None
    line_spacing_multiple: Optional[float] = None
    para_space_before: Optional[float] = None
    para_space_after: Optional[float] = None
    font_face: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    fill: Optional[ResolvedColor] = None
    line: Optional[LineSpec] = None
    shadow: Optional[ShadowSpec] = None
    rotate: Optional[float] = None


class RectObject(BaseModel):
    kind: Literal["rect"] = "rect"
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    fill: Optional[ResolvedColor] = None
    line: Optional[LineSpec] = None
    shadow: Optional[ShadowSpec] = None
    rect_radius: Optional[float] = Field(default=None, description="Corner radius in inches")
    rotate: Optional[float] = None


class LineObject(BaseModel):
    kind: Literal["line"] = "line"
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    line: Optional[LineSpec] = None
    rotate: Optional[float] = None


class TextObject(BaseModel):
    kind: Literal["text"] = "text"
    text: str = ""
    options: TextOptions = Field(default_factory=TextOptions)


class ImageObject(BaseModel):
    kind: Literal["image"] = "image"
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    path: str = Field(description="Media-relative path, e.g. './media/image1.png'")
    rotate: Optional[float] = None


class PlaceholderOptions(BaseModel):
    name: str = ""
    type: str = Field(default="body", description="Output role: title, body, pic, chart, tbl, media")
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    font_face: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    align: Optional[str] = None
    valign: Optional[str] = None
    margin: Optional[tuple[float, float, float, float]] = None
    line_spacing: Optional[float] = None
    line_spacing_multiple: Optional[float] = None
    para_space_before: Optional[float] = None
    para_space_after: Optional[float] = None
    fill: Optional[ResolvedColor] = None
    line: Optional[LineSpec] = None
    rotate: Optional[float] = None


class PlaceholderObject(BaseModel):
    kind: Literal["placeholder"] = "placeholder"
    options: PlaceholderOptions


SlideObject = Annotated[
    Union[RectObject, LineObject, TextObject, ImageObject, PlaceholderObject],
    Field(discriminator="kind"),
]


class SlideNumberSpec(BaseModel):
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    font_face: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    align: Optional[str] = None
    margin: Optional[tuple[float, float, float, float]] = None


class BackgroundSpec(BaseModel):
    """Resolved background: a solid color or a media-relative image path."""

    color: Optional[str] = None
    transparency: Optional[int] = None
    path: Optional[str] = None


class LayoutResult(BaseModel):
    """Per-layout output of the extractor."""

    name: str
    title: str = Field(description="UPPER_SNAKE_CASE identifier derived from the name")
    background: Optional[BackgroundSpec] = None
    slide_number: Optional[SlideNumberSpec] = None
    objects: list[SlideObject] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class MediaFile(BaseModel):
    archive_path: str
    filename: str


class ExtractionResult(BaseModel):
    template_name: str
    theme_colors: dict[str, str] = Field(default_factory=dict)
    theme_fonts: ThemeFonts = Field(default_factory=ThemeFonts)
    dimensions: SlideDimensions = Field(default_factory=SlideDimensions)
    layouts: list[LayoutResult] = Field(default_factory=list)
    parsed_layouts: list[ParsedLayout] = Field(
        default_factory=list, exclude=True,
        description="Intermediate layout records (not serialized)",
    )
    warnings: list[str] = Field(default_factory=list)
    media_files: list[MediaFile] = Field(default_factory=list)

    def to_yaml(self, path: str | Path) -> None:
        """Save the resolved masters to a YAML file."""
        path = Path(path)
        data = self.model_dump(mode="json", exclude_none=True)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
