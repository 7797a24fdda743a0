"""Slide number, footer, date and header extraction."""

import logging

from src.mappers.shapes import map_text_props_to_options, strip_edit_instructions
from src.schemas.master_data import SlideNumberSpec, TextObject, TextOptions
from src.schemas.template_model import ParsedPlaceholder, ParsedShape, Position

logger = logging.getLogger(__name__)

FOOTER_TYPES = frozenset({"ftr", "dt", "hdr"})
SLIDE_NUMBER_FIELD = "slidenum"

DEFAULT_SLIDE_NUMBER_FONT_SIZE = 8
DEFAULT_HEIGHT_FACTOR = 2.5


def _position_or_zero(pos: Position | None) -> Position:
    return pos if pos is not None else Position()


def normalize_slide_number_height(spec: SlideNumberSpec, height_factor: float = DEFAULT_HEIGHT_FACTOR) -> None:
    """Grow a tightly fitted slide-number box to at least ``height_factor`` x font size.

    Autofit slide-number boxes are often ~0.13" tall and would not line
    up with neighbouring footer text otherwise.
    """
    font_size = spec.font_size or DEFAULT_SLIDE_NUMBER_FONT_SIZE
    min_height = round(font_size * height_factor / 72, 4)
    if spec.h < min_height:
        spec.h = min_height


def _slide_number_spec(
    shape: ParsedPlaceholder | ParsedShape,
    height_factor: float,
    with_margin: bool,
) -> SlideNumberSpec | None:
    pos = _position_or_zero(shape.position)
    if pos.w == 0 and pos.h == 0:
        return None

    spec = SlideNumberSpec(x=pos.x, y=pos.y, w=pos.w, h=pos.h)
    if shape.text_props is not None:
        opts = map_text_props_to_options(shape.text_props)
        spec.font_face = opts.font_face
        spec.font_size = opts.font_size
        spec.color = opts.color
        spec.align = opts.align
        if with_margin:
            spec.margin = opts.margin

    normalize_slide_number_height(spec, height_factor)
    return spec


def footer_text_object(shape: ParsedPlaceholder | ParsedShape) -> TextObject:
    """Footer/date/header (or copyright) text box, always top-anchored."""
    pos = _position_or_zero(shape.position)
    text = strip_edit_instructions(shape.text_props.plain_text if shape.text_props else "")

    options = TextOptions(x=pos.x, y=pos.y, w=pos.w, h=pos.h)
    if shape.text_props is not None:
        opts = map_text_props_to_options(shape.text_props)
        options.font_face = opts.font_face
        options.font_size = opts.font_size
        options.color = opts.color
        options.align = opts.align
        options.margin = opts.margin
    # keeps a common baseline with the slide number
    options.valign = "top"

    return TextObject(text=text, options=options)


def _is_copyright(text: str) -> bool:
    lowered = text.lower()
    return "©" in lowered or "copyright" in lowered


def map_slide_number_and_footers(
    placeholders: list[ParsedPlaceholder] | None,
    height_factor: float = DEFAULT_HEIGHT_FACTOR,
) -> tuple[SlideNumberSpec | None, list[TextObject]]:
    """Split sldNum/ftr/dt/hdr placeholders out of a layout's placeholder list.

    Footers with no text and no usable position are dropped. Untyped
    placeholders holding copyright text are treated as footers.
    """
    slide_number = None
    footers: list[TextObject] = []

    for ph in placeholders or []:
        if ph is None:
            continue

        if ph.type == "sldNum":
            slide_number = _slide_number_spec(ph, height_factor, with_margin=False)
            continue

        plain_text = ph.text_props.plain_text if ph.text_props else ""

        if ph.type in FOOTER_TYPES:
            if not plain_text and (ph.position is None or ph.position.is_degenerate):
                continue
            footers.append(footer_text_object(ph))
            continue

        if ph.type is None and plain_text and _is_copyright(plain_text):
            footers.append(footer_text_object(ph))

    return slide_number, footers


def extract_slide_number_from_shape(
    shape: ParsedShape | None,
    height_factor: float = DEFAULT_HEIGHT_FACTOR,
) -> SlideNumberSpec | None:
    """Slide number from a plain text box whose only content is one slidenum field.

    Any other field, or any other non-whitespace text, disqualifies the
    shape. Line breaks are ignored.
    """
    if shape is None or shape.text_props is None or not shape.text_props.paragraphs:
        return None

    slide_number_fields = 0
    for para in shape.text_props.paragraphs:
        for run in para.runs:
            if run.is_break:
                continue
            if run.is_field:
                if run.field_type != SLIDE_NUMBER_FIELD:
                    return None
                slide_number_fields += 1
            elif run.text.strip():
                return None

    if slide_number_fields != 1:
        return None

    return _slide_number_spec(shape, height_factor, with_margin=True)
