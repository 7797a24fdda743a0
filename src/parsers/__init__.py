from .archive import ArchiveEntryNotFoundError, TemplateArchive, open_template
from .colors import ColorResolver, create_color_resolver
from .layout import parse_presentation, parse_slide_layout
from .master import parse_slide_master
from .relationships import parse_relationships
from .text import extract_text_props
from .theme import parse_clr_map, parse_theme

__all__ = [
    "ArchiveEntryNotFoundError",
    "TemplateArchive",
    "open_template",
    "ColorResolver",
    "create_color_resolver",
    "parse_presentation",
    "parse_slide_layout",
    "parse_slide_master",
    "parse_relationships",
    "extract_text_props",
    "parse_clr_map",
    "parse_theme",
]
