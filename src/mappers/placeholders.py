"""Map parsed layout placeholders to output placeholder definitions."""

import logging

from src.mappers.shapes import map_text_props_to_options, resolve_fill, resolve_line
from src.parsers.colors import ColorResolver
from src.schemas.master_data import PlaceholderObject, PlaceholderOptions
from src.schemas.template_model import ParsedPlaceholder, ResolvedColor

logger = logging.getLogger(__name__)

# OOXML placeholder type -> output role
TYPE_MAP = {
    "title": "title",
    "ctrTitle": "title",
    "subTitle": "body",
    "body": "body",
    "obj": "body",
    "pic": "pic",
    "clipArt": "pic",
    "chart": "chart",
    "dgm": "chart",
    "tbl": "tbl",
    "media": "media",
}

# Handled by the slide-number/footer mapper
SKIP_TYPES = frozenset({"sldNum", "ftr", "dt", "hdr"})

_TEXT_FIELDS = (
    "font_face", "font_size", "color", "bold", "italic", "align", "valign", "margin",
    "line_spacing", "line_spacing_multiple", "para_space_before", "para_space_after",
)


def _has_stated_alignment(placeholder: ParsedPlaceholder) -> bool:
    tp = placeholder.text_props
    if tp is None:
        return False
    if tp.paragraphs and tp.paragraphs[0].explicit_align:
        return True
    lst = tp.lst_style_props or {}
    return any(level in lst and lst[level].align for level in (1, 0))


def map_placeholder(
    placeholder: ParsedPlaceholder | None,
    color_resolver: ColorResolver | None,
) -> tuple[PlaceholderObject | None, list[str]]:
    """Build a PlaceholderObject; (None, []) for footer-type placeholders."""
    if placeholder is None or placeholder.type in SKIP_TYPES:
        return None, []

    warnings: list[str] = []
    role = TYPE_MAP.get(placeholder.type)
    if role is None and placeholder.type is not None:
        warnings.append(f"Unknown placeholder type: {placeholder.type}")

    pos = placeholder.position
    options = PlaceholderOptions(
        name=placeholder.name,
        type=role or "body",
        x=pos.x if pos else 0.0,
        y=pos.y if pos else 0.0,
        w=pos.w if pos else 0.0,
        h=pos.h if pos else 0.0,
    )

    if placeholder.text_props is not None:
        text_opts = map_text_props_to_options(placeholder.text_props)
        for field in _TEXT_FIELDS:
            setattr(options, field, getattr(text_opts, field))

    if placeholder.type == "ctrTitle" and not _has_stated_alignment(placeholder):
        options.align = "center"

    props = placeholder.shape_props
    if props.fill is not None:
        fill, fill_warnings = resolve_fill(props.fill, color_resolver)
        warnings.extend(fill_warnings)
        if isinstance(fill, ResolvedColor):
            options.fill = fill
    options.line = resolve_line(props.line, color_resolver)

    if placeholder.rotation:
        options.rotate = placeholder.rotation

    return PlaceholderObject(options=options), warnings
