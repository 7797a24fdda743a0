"""Map parsed static shapes onto output objects (rect, line, text, image).

Also home to the fill/line/shadow resolvers and the text-style cascade
shared by the placeholder and slide-number mappers.
"""

import logging
import re

from pptx.oxml.ns import qn

from src.mappers.units import emu_angle_to_degrees, emu_to_points
from src.parsers.colors import ColorResolver
from src.parsers.relationships import media_filename
from src.parsers.xml_utils import num_attr
from src.schemas.master_data import (
    ImageFillRef,
    ImageObject,
    LineObject,
    LineSpec,
    RectObject,
    ShadowSpec,
    TextObject,
    TextOptions,
)
from src.schemas.template_model import (
    FillKind,
    FillRef,
    LevelProps,
    ParsedShape,
    Relationship,
    ResolvedColor,
    RunProps,
    ShapeKind,
    TextProps,
)

logger = logging.getLogger(__name__)

DASH_TYPE_MAP = {
    "solid": "solid",
    "dash": "dash",
    "dashDot": "dashDot",
    "lgDash": "lgDash",
    "lgDashDot": "lgDashDot",
    "lgDashDotDot": "lgDashDotDot",
    "sysDash": "sysDash",
    "sysDot": "sysDot",
    "sysDashDot": "sysDashDot",
    "sysDashDotDot": "sysDashDotDot",
    "dot": "dot",
}

ARROW_TYPE_MAP = {
    "triangle": "triangle",
    "stealth": "stealth",
    "diamond": "diamond",
    "oval": "oval",
    "arrow": "arrow",
}

DEFAULT_RECT_RADIUS = 0.1

# Boilerplate lines corporate masters carry, e.g. "[To edit, click View > Slide Master > ...]"
_EDIT_INSTRUCTION = re.compile(r"^\[To edit[,.]|^\[Click .+Slide Master", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Fill / line / shadow
# ---------------------------------------------------------------------------

def resolve_fill(
    fill: FillRef | None,
    color_resolver: ColorResolver | None,
) -> tuple[ResolvedColor | ImageFillRef | None, list[str]]:
    """Resolve a fill descriptor to a color (or an image marker).

    Gradients degrade to their first stop and patterns to their
    foreground color, each with a warning.
    """
    warnings: list[str] = []
    if fill is None or fill.kind == FillKind.NONE:
        return None, warnings
    if color_resolver is None and fill.kind != FillKind.IMAGE:
        return None, warnings

    el = fill.element

    if fill.kind == FillKind.SOLID:
        return color_resolver.resolve(el), warnings

    if fill.kind == FillKind.GRADIENT:
        first_stop = el.find(f"{qn('a:gsLst')}/{qn('a:gs')}") if el is not None else None
        resolved = color_resolver.resolve(first_stop)
        if resolved is not None:
            warnings.append("Gradient fill not fully supported, using first stop color as fallback")
            return resolved, warnings
        warnings.append("Gradient fill not supported, could not resolve fallback color")
        return None, warnings

    if fill.kind == FillKind.IMAGE:
        blip = el.find(qn("a:blip")) if el is not None else None
        r_id = blip.get(qn("r:embed")) if blip is not None else None
        if r_id:
            return ImageFillRef(image_ref=r_id), warnings
        warnings.append("blipFill without image reference")
        return None, warnings

    if fill.kind == FillKind.PATTERN:
        fg_clr = el.find(qn("a:fgClr")) if el is not None else None
        resolved = color_resolver.resolve(fg_clr)
        if resolved is not None:
            warnings.append("Pattern fill not supported, using foreground color as fallback")
            # pattern transparency is not carried over
            return ResolvedColor(color=resolved.color), warnings
        warnings.append("Pattern fill not supported")
        return None, warnings

    return None, warnings


def resolve_line(line_el, color_resolver: ColorResolver | None) -> LineSpec | None:
    """a:ln -> LineSpec; None when the element states nothing usable."""
    if line_el is None:
        return None

    spec = LineSpec()
    has_props = False

    width = num_attr(line_el, "w")
    if width is not None:
        spec.width = emu_to_points(width)
        has_props = True

    solid_fill = line_el.find(qn("a:solidFill"))
    if solid_fill is not None and color_resolver is not None:
        resolved = color_resolver.resolve(solid_fill)
        if resolved is not None:
            spec.color = resolved.color
            has_props = True

    prst_dash = line_el.find(qn("a:prstDash"))
    if prst_dash is not None:
        dash = prst_dash.get("val")
        spec.dash_type = DASH_TYPE_MAP.get(dash) or dash or "solid"
        has_props = True

    head = line_el.find(qn("a:headEnd"))
    head_type = head.get("type") if head is not None else None
    if head_type and head_type != "none":
        spec.begin_arrow_type = ARROW_TYPE_MAP.get(head_type, head_type)
        has_props = True

    tail = line_el.find(qn("a:tailEnd"))
    tail_type = tail.get("type") if tail is not None else None
    if tail_type and tail_type != "none":
        spec.end_arrow_type = ARROW_TYPE_MAP.get(tail_type, tail_type)
        has_props = True

    return spec if has_props else None


def resolve_shadow(effect_lst, color_resolver: ColorResolver | None) -> ShadowSpec | None:
    """Outer shadow from an a:effectLst, else inner shadow, else None."""
    if effect_lst is None:
        return None

    for tag, kind in (("outerShdw", "outer"), ("innerShdw", "inner")):
        shdw = effect_lst.find(qn(f"a:{tag}"))
        if shdw is not None:
            return _build_shadow(shdw, kind, color_resolver)
    return None


def _build_shadow(shdw, kind: str, color_resolver: ColorResolver | None) -> ShadowSpec:
    shadow = ShadowSpec(type=kind)

    blur = num_attr(shdw, "blurRad")
    if blur is not None:
        shadow.blur = emu_to_points(blur)
    dist = num_attr(shdw, "dist")
    if dist is not None:
        shadow.offset = emu_to_points(dist)
    direction = num_attr(shdw, "dir")
    if direction is not None:
        shadow.angle = emu_angle_to_degrees(direction)

    resolved = color_resolver.resolve(shdw) if color_resolver is not None else None
    if resolved is not None:
        shadow.color = resolved.color
        if resolved.transparency is not None:
            shadow.opacity = (100 - resolved.transparency) / 100

    return shadow


# ---------------------------------------------------------------------------
# Text style cascade
# ---------------------------------------------------------------------------

def _first_set(*values):
    for v in values:
        if v is not None:
            return v
    return None


def representative_level(text_props: TextProps) -> LevelProps | None:
    """List-style level 1, else level 0 (defPPr)."""
    lst = text_props.lst_style_props or {}
    return lst.get(1) or lst.get(0)


def map_text_props_to_options(text_props: TextProps | None) -> TextOptions:
    """Merge body, paragraph, list-style and run styling into TextOptions.

    Only the first paragraph is considered. Priority, highest first:
      alignment: paragraph's own > list style > paragraph default ('left')
      spacing:   paragraph > list style
      run style: paragraph defRPr > list-style defRPr > first run
    Without paragraphs the list style is the only source.
    """
    opts = TextOptions()
    if text_props is None:
        return opts

    body = text_props.body_props
    opts.margin = body.margin
    # OOXML anchors text to the top when bodyPr says nothing
    opts.valign = body.valign or "top"

    lst_level = representative_level(text_props)

    if text_props.paragraphs:
        para = text_props.paragraphs[0]

        if para.explicit_align:
            opts.align = para.explicit_align
        elif lst_level is not None and lst_level.align:
            opts.align = lst_level.align
        else:
            opts.align = para.align

        lst = lst_level or LevelProps()
        opts.line_spacing = _first_set(para.line_spacing, lst.line_spacing)
        opts.line_spacing_multiple = _first_set(para.line_spacing_multiple, lst.line_spacing_multiple)
        opts.para_space_before = _first_set(para.para_space_before, lst.para_space_before)
        opts.para_space_after = _first_set(para.para_space_after, lst.para_space_after)

        para_rpr = para.default_run_props or RunProps()
        lst_rpr = lst.default_run_props or RunProps()
        first_run = para.runs[0] if para.runs else RunProps()

        font_face = _first_set(para_rpr.font_face, lst_rpr.font_face, first_run.font_face)
        font_size = _first_set(para_rpr.font_size, lst_rpr.font_size, first_run.font_size)
        color = _first_set(para_rpr.color, lst_rpr.color, first_run.color)
        bold = _first_set(para_rpr.bold, lst_rpr.bold, first_run.bold)
        italic = _first_set(para_rpr.italic, lst_rpr.italic, first_run.italic)
    elif lst_level is not None:
        opts.align = lst_level.align
        opts.line_spacing = lst_level.line_spacing
        opts.line_spacing_multiple = lst_level.line_spacing_multiple
        opts.para_space_before = lst_level.para_space_before
        opts.para_space_after = lst_level.para_space_after

        rpr = lst_level.default_run_props or RunProps()
        font_face, font_size, color = rpr.font_face, rpr.font_size, rpr.color
        bold, italic = rpr.bold, rpr.italic
    else:
        return opts

    if font_face:
        opts.font_face = font_face
    if font_size is not None:
        opts.font_size = font_size
    if color:
        opts.color = color
    # explicit False is dropped: the output only ever switches these on
    if bold:
        opts.bold = True
    if italic:
        opts.italic = True

    return opts


# ---------------------------------------------------------------------------
# Text content
# ---------------------------------------------------------------------------

def strip_edit_instructions(text: str) -> str:
    """Drop '[To edit, ...]' / '[Click ... Slide Master ...]' lines and trim."""
    if not text:
        return text
    lines = [line for line in text.split("\n") if not _EDIT_INSTRUCTION.search(line)]
    return "\n".join(lines).strip()


def flatten_text_content(text_props: TextProps | None) -> str:
    """Paragraphs joined by newlines, breaks kept as newlines, instructions stripped."""
    if text_props is None:
        return ""
    if not text_props.paragraphs:
        return strip_edit_instructions(text_props.plain_text or "")

    lines = []
    for para in text_props.paragraphs:
        parts = []
        for run in para.runs:
            if run.is_break:
                parts.append("\n")
            elif run.text:
                parts.append(run.text)
        lines.append("".join(parts))

    return strip_edit_instructions("\n".join(lines))


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

def media_path(target: str) -> str:
    """Output-relative path of a media relationship target."""
    return f"./media/{media_filename(target)}"


def _rect_radius(av_lst: dict[str, int] | None, w: float | None, h: float | None) -> float:
    """roundRect corner radius; adj is 0-50000 of the shorter side."""
    if not av_lst or av_lst.get("adj") is None:
        return DEFAULT_RECT_RADIUS
    min_dim = min(w or 1, h or 1)
    return round(av_lst["adj"] / 100000 * min_dim, 2) or DEFAULT_RECT_RADIUS


def map_shape(
    shape: ParsedShape | None,
    color_resolver: ColorResolver | None,
    relationships: dict[str, Relationship] | None = None,
) -> tuple[ImageObject | LineObject | TextObject | RectObject | None, list[str]]:
    """Map one static shape to an output object plus warnings.

    Pictures become images, 'line' geometry becomes a line (zero size is
    fine), shapes with text become text boxes, everything else a rect.
    """
    warnings: list[str] = []
    if shape is None:
        return None, ["Null shape provided"]

    relationships = relationships or {}
    pos = shape.position
    x, y, w, h = (pos.x, pos.y, pos.w, pos.h) if pos is not None else (None, None, None, None)
    rotate = shape.rotation or None

    if shape.kind == ShapeKind.PICTURE and shape.image_ref:
        rel = relationships.get(shape.image_ref)
        if rel is not None:
            return ImageObject(x=x, y=y, w=w, h=h, path=media_path(rel.target), rotate=rotate), warnings
        warnings.append(f"Could not resolve image reference {shape.image_ref}")

    if shape.geometry == "line":
        return LineObject(
            x=x, y=y, w=w, h=h,
            line=resolve_line(shape.line, color_resolver),
            rotate=rotate,
        ), warnings

    fill, fill_warnings = resolve_fill(shape.fill, color_resolver)
    warnings.extend(fill_warnings)
    line = resolve_line(shape.line, color_resolver)
    shadow = resolve_shadow(shape.effects, color_resolver)

    if shape.text_props is not None and shape.text_props.plain_text:
        options = map_text_props_to_options(shape.text_props)
        options.x, options.y, options.w, options.h = x, y, w, h
        if isinstance(fill, ResolvedColor):
            options.fill = fill
        options.line = line
        options.shadow = shadow
        options.rotate = rotate
        return TextObject(text=flatten_text_content(shape.text_props), options=options), warnings

    if isinstance(fill, ImageFillRef):
        rel = relationships.get(fill.image_ref)
        if rel is not None:
            return ImageObject(x=x, y=y, w=w, h=h, path=media_path(rel.target), rotate=rotate), warnings
        warnings.append(f"Could not resolve image reference {fill.image_ref}")
        fill = None

    return RectObject(
        x=x, y=y, w=w, h=h,
        fill=fill,
        line=line,
        shadow=shadow,
        rect_radius=_rect_radius(shape.av_lst, w, h) if shape.geometry == "roundRect" else None,
        rotate=rotate,
    ), warnings
