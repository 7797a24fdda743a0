from .template_model import (
    Theme, ThemeFonts, SlideDimensions, ResolvedColor, Position,
    TextProps, ParsedShape, ParsedPlaceholder, ParsedMaster, ParsedLayout,
)
from .master_data import (
    RectObject, LineObject, TextObject, ImageObject, PlaceholderObject,
    SlideNumberSpec, BackgroundSpec, LayoutResult, ExtractionResult,
)
from .config import ExtractionConfig

__all__ = [
    "Theme",
    "ThemeFonts",
    "SlideDimensions",
    "ResolvedColor",
    "Position",
    "TextProps",
    "ParsedShape",
    "ParsedPlaceholder",
    "ParsedMaster",
    "ParsedLayout",
    "RectObject",
    "LineObject",
    "TextObject",
    "ImageObject",
    "PlaceholderObject",
    "SlideNumberSpec",
    "BackgroundSpec",
    "LayoutResult",
    "ExtractionResult",
    "ExtractionConfig",
]
