"""Theme parser: scheme colors, fonts and format scheme from ppt/theme/themeN.xml."""

import logging

from pptx.oxml.ns import qn

from src.schemas.template_model import (
    SCHEME_COLOR_NAMES,
    FormatScheme,
    Theme,
    ThemeFonts,
)

logger = logging.getLogger(__name__)


def parse_theme(theme_root) -> Theme:
    """Parse a theme document root (a:theme).

    Raises ValueError when the document is not a theme at all; every
    section below the theme elements is optional.
    """
    if theme_root is None or theme_root.tag != qn("a:theme"):
        raise ValueError("Invalid theme XML: missing a:theme root element")

    elements = theme_root.find(qn("a:themeElements"))
    if elements is None:
        raise ValueError("Invalid theme XML: missing a:themeElements")

    theme = Theme(
        colors=_extract_scheme_colors(elements.find(qn("a:clrScheme"))),
        fonts=_extract_font_scheme(elements.find(qn("a:fontScheme"))),
        format_scheme=_extract_format_scheme(elements.find(qn("a:fmtScheme"))),
    )
    logger.debug(
        f"Parsed theme '{theme_root.get('name', '')}': {len(theme.colors)} colors, "
        f"fonts={theme.fonts.heading}/{theme.fonts.body}"
    )
    return theme


def _extract_scheme_colors(clr_scheme) -> dict[str, str]:
    """Slot name -> hex. Slots hold a:srgbClr@val or a:sysClr@lastClr."""
    colors: dict[str, str] = {}
    if clr_scheme is None:
        return colors

    for name in SCHEME_COLOR_NAMES:
        slot = clr_scheme.find(qn(f"a:{name}"))
        if slot is None:
            continue

        srgb = slot.find(qn("a:srgbClr"))
        if srgb is not None:
            colors[name] = (srgb.get("val") or "000000").upper()
            continue

        sys_clr = slot.find(qn("a:sysClr"))
        if sys_clr is not None:
            # windowText, window, ... -> last rendered value
            colors[name] = (sys_clr.get("lastClr") or "000000").upper()

    return colors


def _latin_typeface(font_el) -> str:
    if font_el is None:
        return ""
    latin = font_el.find(qn("a:latin"))
    if latin is None:
        return ""
    return latin.get("typeface") or ""


def _extract_font_scheme(font_scheme) -> ThemeFonts:
    if font_scheme is None:
        return ThemeFonts()
    return ThemeFonts(
        heading=_latin_typeface(font_scheme.find(qn("a:majorFont"))),
        body=_latin_typeface(font_scheme.find(qn("a:minorFont"))),
    )


def _extract_format_scheme(fmt_scheme) -> FormatScheme | None:
    if fmt_scheme is None:
        return None
    return FormatScheme(
        fill_style_lst=fmt_scheme.find(qn("a:fillStyleLst")),
        ln_style_lst=fmt_scheme.find(qn("a:lnStyleLst")),
        effect_style_lst=fmt_scheme.find(qn("a:effectStyleLst")),
        bg_fill_style_lst=fmt_scheme.find(qn("a:bgFillStyleLst")),
    )


def parse_clr_map(clr_map_el) -> dict[str, str]:
    """p:clrMap (or a:overrideClrMapping) attributes -> {'bg1': 'lt1', 'tx1': 'dk1', ...}."""
    if clr_map_el is None:
        return {}
    return dict(clr_map_el.attrib)
