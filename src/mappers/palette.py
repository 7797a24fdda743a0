"""Limited-palette detection and the background-color fallback.

Some templates ship a theme whose accents are all white (or all black),
while the real brand colors only appear as slide backgrounds. When that
happens the accents are replaced with the background colors, most
frequent first.
"""

import logging
from collections import Counter

from pydantic import BaseModel, Field

from src.parsers.colors import apply_color_modifiers, hex_to_rgb
from src.schemas.master_data import LayoutResult
from src.schemas.template_model import ACCENT_SLOTS, SCHEME_COLOR_NAMES

logger = logging.getLogger(__name__)

NEAR_WHITE = 245
NEAR_BLACK = 10
DARK_THRESHOLD = 128

# PowerPoint color-picker tints/shades
PALETTE_VARIANTS = (
    ("lighter80", {"lumMod": 20000, "lumOff": 80000}),
    ("lighter60", {"lumMod": 40000, "lumOff": 60000}),
    ("lighter40", {"lumMod": 60000, "lumOff": 40000}),
    ("lighter25", {"lumMod": 75000, "lumOff": 25000}),
    ("darker25", {"lumMod": 75000}),
    ("darker50", {"lumMod": 50000}),
)


class PaletteCheck(BaseModel):
    is_limited: bool = False
    usable_accents: list[str] = Field(default_factory=list)


def hex_brightness(hex_color: str) -> float:
    """Luma-weighted brightness on a 0-255 scale."""
    r, g, b = hex_to_rgb(hex_color)
    return r * 0.299 + g * 0.587 + b * 0.114


def is_neutral(hex_color: str) -> bool:
    b = hex_brightness(hex_color)
    return b > NEAR_WHITE or b < NEAR_BLACK


def is_dark_color(hex_color: str) -> bool:
    return hex_brightness(hex_color) < DARK_THRESHOLD


def detect_limited_palette(theme_colors: dict[str, str] | None) -> PaletteCheck:
    """A palette is limited when fewer than 2 distinct non-neutral accents remain."""
    if not theme_colors:
        return PaletteCheck()

    usable: list[str] = []
    for slot in ACCENT_SLOTS:
        hex_color = theme_colors.get(slot)
        if hex_color and not is_neutral(hex_color) and hex_color not in usable:
            usable.append(hex_color)

    return PaletteCheck(is_limited=len(usable) < 2, usable_accents=usable)


def extract_background_colors(layouts: list[LayoutResult] | None) -> list[str]:
    """Non-neutral solid background colors, most frequent first, then darkest first."""
    freq: Counter[str] = Counter()
    for layout in layouts or []:
        color = layout.background.color if layout.background else None
        if not color or is_neutral(color):
            continue
        freq[color] += 1

    return sorted(freq, key=lambda c: (-freq[c], hex_brightness(c)))


def apply_background_fallback(
    theme_colors: dict[str, str],
    background_colors: list[str],
) -> dict[str, str]:
    """Copy of ``theme_colors`` with accents 1..n replaced by the background colors."""
    patched = dict(theme_colors)
    for slot, color in zip(ACCENT_SLOTS, background_colors):
        patched[slot] = color
    return patched


def generate_extended_palette(theme_colors: dict[str, str] | None) -> dict[str, dict[str, str]]:
    """Per scheme slot: the base color plus the picker's tint/shade variants."""
    if not theme_colors:
        return {}

    palette = {}
    for slot in SCHEME_COLOR_NAMES:
        base = theme_colors.get(slot)
        if not base:
            continue
        entry = {"base": base}
        for name, mods in PALETTE_VARIANTS:
            entry[name] = apply_color_modifiers(base, mods)
        palette[slot] = entry
    return palette
