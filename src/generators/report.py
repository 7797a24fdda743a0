"""Markdown extraction report: theme, layouts, placeholders and warnings."""

import logging
from datetime import date

from src.mappers.slide_number import FOOTER_TYPES
from src.parsers.colors import hex_to_rgb
from src.schemas.master_data import (
    BackgroundSpec,
    ExtractionResult,
    LayoutResult,
    PlaceholderObject,
)
from src.schemas.template_model import SCHEME_COLOR_NAMES, ParsedLayout

logger = logging.getLogger(__name__)

UNSUPPORTED_FEATURES = (
    "Gradient fills (dominant color used as fallback)",
    "Pattern fills (foreground color used as fallback)",
    "Grouped shapes",
    "Animations and transitions",
    "SmartArt / diagrams",
    "3D effects, text warp",
)


def _round4(n: float | None) -> float:
    return round(n or 0, 4)


def color_emoji(hex_color: str | None) -> str:
    """Closest colored-square emoji for a hex color."""
    if not hex_color:
        return ""
    r, g, b = hex_to_rgb(hex_color)
    brightness = (r * 299 + g * 587 + b * 114) / 1000

    if brightness < 50:
        return "⬛"
    if brightness > 220:
        return "⬜"

    top = max(r, g, b)
    if top == r and r > g * 1.3 and r > b * 1.3:
        return "\U0001F7E5"
    if top == g and g > r * 1.3 and g > b * 1.3:
        return "\U0001F7E9"
    if top == b and b > r * 1.3 and b > g * 1.3:
        return "\U0001F7E6"
    if r > 200 and g > 150 and b < 100:
        return "\U0001F7E7"
    if r > 200 and g > 200 and b < 100:
        return "\U0001F7E8"
    if r > 100 and b > 100 and g < 100:
        return "\U0001F7EA"

    return "⬛" if brightness < 128 else "⬜"


def aspect_label(width: float, height: float) -> str:
    if width == 10 and height == 7.5:
        return "Standard 4:3"
    if width in (13.333, 13.3333) and height == 7.5:
        return "Widescreen 16:9"
    if width == 7.5 and height == 10:
        return "Portrait"
    return "Custom"


def describe_background(bg: BackgroundSpec | None) -> str:
    if bg is None:
        return "None"
    if bg.color:
        return f"Solid #{bg.color}"
    if bg.path:
        return f"Image: {bg.path}"
    return "Unknown"


def _style_suffix(font_face, font_size, color) -> list[str]:
    parts = []
    if font_face:
        parts.append(font_face)
    if font_size is not None:
        parts.append(f"{font_size:g}pt")
    if color:
        parts.append(f"#{color}")
    return parts


def _footer_count(parsed: ParsedLayout | None) -> int:
    if parsed is None:
        return 0
    count = 0
    for ph in parsed.placeholders:
        if ph.type in FOOTER_TYPES:
            count += 1
    return count


def _layout_section(index: int, layout: LayoutResult, parsed: ParsedLayout | None) -> list[str]:
    lines = [f"### {index}. {layout.name}", f"- **Background:** {describe_background(layout.background)}"]

    placeholders = [obj for obj in layout.objects if isinstance(obj, PlaceholderObject)]
    if placeholders:
        lines.append("- **Placeholders:**")
        for ph in placeholders:
            o = ph.options
            desc = (
                f"  - {o.name or o.type}: ({_round4(o.x)}\", {_round4(o.y)}\") "
                f"{_round4(o.w)}\" × {_round4(o.h)}\""
            )
            parts = _style_suffix(o.font_face, o.font_size, o.color)
            if parts:
                desc += f" : {' '.join(parts)}"
            lines.append(desc)
    else:
        lines.append("- **Placeholders:** None")

    sn = layout.slide_number
    if sn is not None:
        parts = [f"({_round4(sn.x)}\", {_round4(sn.y)}\")"] + _style_suffix(sn.font_face, sn.font_size, sn.color)
        lines.append(f"- **Slide Number:** {' '.join(parts)}")

    lines.append(f"- **Static Shapes:** {len(parsed.static_shapes) if parsed else 0}")

    footers = _footer_count(parsed)
    if footers:
        lines.append(f"- **Footer Objects:** {footers}")

    if layout.warnings:
        lines.append("- **Warnings:**")
        lines.extend(f"  - {w}" for w in layout.warnings)

    lines.append("")
    return lines


def generate_report(result: ExtractionResult, report_date: date | None = None) -> str:
    """Render an extraction result as a Markdown report."""
    report_date = report_date or date.today()
    width = result.dimensions.width or 10
    height = result.dimensions.height or 7.5

    lines = [
        "# pptx-masters Extraction Report",
        "",
        f"**Template:** {result.template_name}",
        f"**Date:** {report_date.isoformat()}",
        f"**Slide Dimensions:** {width:g}\" × {height:g}\" ({aspect_label(width, height)})",
        "",
        "## Theme",
        "",
        "### Colors",
        "| Slot | Hex | Preview |",
        "|------|-----|---------|",
    ]
    for slot in SCHEME_COLOR_NAMES:
        color = result.theme_colors.get(slot)
        if color is not None:
            lines.append(f"| {slot} | #{color} | {color_emoji(color)} |")
    lines.append("")

    lines += [
        "### Fonts",
        f"- **Heading:** {result.theme_fonts.heading or 'Calibri'}",
        f"- **Body:** {result.theme_fonts.body or 'Calibri'}",
        "",
        "## Layouts",
        "",
    ]

    # parsed_layouts is index-aligned with layouts when both come from extract_masters
    aligned = len(result.parsed_layouts) == len(result.layouts)
    for i, layout in enumerate(result.layouts):
        parsed = result.parsed_layouts[i] if aligned else None
        lines += _layout_section(i + 1, layout, parsed)

    lines += ["## Warnings", ""]
    if result.warnings:
        lines.extend(f"- {w}" for w in result.warnings)
    else:
        lines.append("No warnings.")
    lines.append("")

    lines.append("## What's Not Supported (v1)")
    lines.extend(f"- {item}" for item in UNSUPPORTED_FEATURES)
    lines.append("")

    logger.debug(f"Report: {len(result.layouts)} layout(s), {len(result.warnings)} warning(s)")
    return "\n".join(lines)
