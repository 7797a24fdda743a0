"""theme.json: theme colors, the extended tint/shade palette, fonts and slide size."""

import logging
from typing import Any

from src.mappers.palette import (
    apply_background_fallback,
    detect_limited_palette,
    extract_background_colors,
    generate_extended_palette,
)
from src.schemas.master_data import LayoutResult
from src.schemas.template_model import SlideDimensions, ThemeFonts

logger = logging.getLogger(__name__)

DEFAULT_FONT = "Calibri"


def generate_theme_json(
    theme_colors: dict[str, str] | None,
    theme_fonts: ThemeFonts | None = None,
    dimensions: SlideDimensions | None = None,
    layouts: list[LayoutResult] | None = None,
) -> dict[str, Any]:
    """Build the theme.json document.

    When the theme's accents are limited (all white/black) and the layouts
    have colored backgrounds, the palette is computed from the background
    colors instead, and ``slideColors`` / ``paletteSource`` say so.
    """
    theme_colors = theme_colors or {}
    check = detect_limited_palette(theme_colors)
    bg_colors = extract_background_colors(layouts) if layouts else []
    uses_fallback = check.is_limited and bool(bg_colors)

    palette_colors = theme_colors
    if uses_fallback:
        palette_colors = apply_background_fallback(theme_colors, bg_colors)
        logger.info(f"Limited theme palette, using {len(bg_colors)} background color(s) for accents")

    result: dict[str, Any] = {
        "colors": dict(theme_colors),
        "palette": generate_extended_palette(palette_colors),
        "fonts": {
            "heading": (theme_fonts.heading if theme_fonts else "") or DEFAULT_FONT,
            "body": (theme_fonts.body if theme_fonts else "") or DEFAULT_FONT,
        },
        "dimensions": {
            "width": (dimensions.width if dimensions else 0) or 10,
            "height": (dimensions.height if dimensions else 0) or 7.5,
        },
    }

    if uses_fallback:
        result["slideColors"] = bg_colors
        result["paletteSource"] = "background-fallback"

    return result
