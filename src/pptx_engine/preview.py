"""Build a preview deck: one slide per extracted layout, drawn from the resolved model.

The preview is a visual check of the extraction, not a template: every
object is drawn as a plain shape on a blank slide.
"""

import io
import logging
from pathlib import Path

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_LINE_DASH_STYLE
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.exc import PythonPptxError
from pptx.util import Inches, Pt

from src.schemas.master_data import (
    ExtractionResult,
    ImageObject,
    LayoutResult,
    LineObject,
    LineSpec,
    PlaceholderObject,
    RectObject,
    TextObject,
)

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6
PLACEHOLDER_OUTLINE = "7F7F7F"

_ALIGN_MAP = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

_ANCHOR_MAP = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

_DASH_MAP = {
    "solid": MSO_LINE_DASH_STYLE.SOLID,
    "dash": MSO_LINE_DASH_STYLE.DASH,
    "dashDot": MSO_LINE_DASH_STYLE.DASH_DOT,
    "lgDash": MSO_LINE_DASH_STYLE.LONG_DASH,
    "lgDashDot": MSO_LINE_DASH_STYLE.LONG_DASH_DOT,
    "lgDashDotDot": MSO_LINE_DASH_STYLE.DASH_DOT_DOT,
    "sysDash": MSO_LINE_DASH_STYLE.SQUARE_DOT,
    "sysDot": MSO_LINE_DASH_STYLE.ROUND_DOT,
    "dot": MSO_LINE_DASH_STYLE.ROUND_DOT,
}


def _hex_to_rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.lstrip("#")[:6].upper())


def _load_image(path: Path, cache: dict[Path, bytes | None]) -> bytes | None:
    """Read an image once per build; a missing file is cached as None."""
    if path not in cache:
        if path.exists():
            cache[path] = path.read_bytes()
        else:
            logger.warning(f"Image not found: {path}")
            cache[path] = None
    return cache[path]


def _media_file(media_dir: Path, object_path: str) -> Path:
    # object paths look like './media/image1.png'
    return media_dir / Path(object_path).name


def _apply_line(shape_line, spec: LineSpec | None) -> None:
    if spec is None:
        shape_line.fill.background()
        return
    if spec.color:
        shape_line.color.rgb = _hex_to_rgb(spec.color)
    if spec.width is not None:
        shape_line.width = Pt(spec.width)
    if spec.dash_type in _DASH_MAP:
        shape_line.dash_style = _DASH_MAP[spec.dash_type]


def _add_picture(slide, data: bytes, x, y, w, h):
    return slide.shapes.add_picture(
        io.BytesIO(data), Inches(x or 0), Inches(y or 0), Inches(w or 0) or None, Inches(h or 0) or None,
    )


def _draw_rect(slide, obj: RectObject) -> None:
    shape_type = MSO_SHAPE.ROUNDED_RECTANGLE if obj.rect_radius else MSO_SHAPE.RECTANGLE
    shape = slide.shapes.add_shape(
        shape_type, Inches(obj.x or 0), Inches(obj.y or 0), Inches(obj.w or 0), Inches(obj.h or 0),
    )
    if obj.fill is not None:
        shape.fill.solid()
        shape.fill.fore_color.rgb = _hex_to_rgb(obj.fill.color)
    else:
        shape.fill.background()
    _apply_line(shape.line, obj.line)
    if obj.rotate:
        shape.rotation = obj.rotate


def _draw_line(slide, obj: LineObject) -> None:
    x, y = obj.x or 0, obj.y or 0
    connector = slide.shapes.add_connector(
        MSO_CONNECTOR.STRAIGHT, Inches(x), Inches(y), Inches(x + (obj.w or 0)), Inches(y + (obj.h or 0)),
    )
    _apply_line(connector.line, obj.line or LineSpec(color="000000"))
    if obj.rotate:
        connector.rotation = obj.rotate


def _fill_text_frame(tf, text: str, font_face, font_size, color, bold, italic, align) -> None:
    tf.word_wrap = True
    lines = text.split("\n") if text else [""]
    for i, line in enumerate(lines):
        p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        p.text = line
        if align in _ALIGN_MAP:
            p.alignment = _ALIGN_MAP[align]
        for run in p.runs:
            if font_face:
                run.font.name = font_face
            if font_size:
                run.font.size = Pt(font_size)
            if color:
                run.font.color.rgb = _hex_to_rgb(color)
            if bold:
                run.font.bold = True
            if italic:
                run.font.italic = True


def _set_margins(tf, margin) -> None:
    if margin is None:
        return
    top, right, bottom, left = margin
    tf.margin_top = Inches(top)
    tf.margin_right = Inches(right)
    tf.margin_bottom = Inches(bottom)
    tf.margin_left = Inches(left)


def _draw_text(slide, obj: TextObject) -> None:
    o = obj.options
    box = slide.shapes.add_textbox(Inches(o.x or 0), Inches(o.y or 0), Inches(o.w or 0), Inches(o.h or 0))
    tf = box.text_frame
    _set_margins(tf, o.margin)
    if o.valign in _ANCHOR_MAP:
        tf.vertical_anchor = _ANCHOR_MAP[o.valign]
    _fill_text_frame(tf, obj.text, o.font_face, o.font_size, o.color, o.bold, o.italic, o.align)
    if o.fill is not None:
        box.fill.solid()
        box.fill.fore_color.rgb = _hex_to_rgb(o.fill.color)
    if o.line is not None:
        _apply_line(box.line, o.line)
    if o.rotate:
        box.rotation = o.rotate


def _draw_placeholder(slide, obj: PlaceholderObject) -> None:
    """Dashed outline labelled with the placeholder's name and role."""
    o = obj.options
    shape = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Inches(o.x), Inches(o.y), Inches(o.w), Inches(o.h))
    if o.fill is not None:
        shape.fill.solid()
        shape.fill.fore_color.rgb = _hex_to_rgb(o.fill.color)
    else:
        shape.fill.background()
    shape.line.color.rgb = _hex_to_rgb(PLACEHOLDER_OUTLINE)
    shape.line.dash_style = MSO_LINE_DASH_STYLE.DASH

    tf = shape.text_frame
    _set_margins(tf, o.margin)
    tf.vertical_anchor = _ANCHOR_MAP.get(o.valign or "top", MSO_ANCHOR.TOP)
    label = f"{o.name or o.type} ({o.type})"
    _fill_text_frame(tf, label, o.font_face, o.font_size, o.color, o.bold, o.italic, o.align)
    if o.rotate:
        shape.rotation = o.rotate


def _draw_layout(prs, layout: LayoutResult, media_dir: Path, image_cache: dict[Path, bytes | None]) -> None:
    slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT_INDEX])
    width_in = prs.slide_width / 914400
    height_in = prs.slide_height / 914400

    bg = layout.background
    if bg is not None and bg.color:
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _hex_to_rgb(bg.color)
    elif bg is not None and bg.path:
        data = _load_image(_media_file(media_dir, bg.path), image_cache)
        if data is not None:
            try:
                _add_picture(slide, data, 0, 0, width_in, height_in)
            except (ValueError, OSError, PythonPptxError) as e:
                logger.warning(f"[{layout.name}] Could not draw background image: {e}")

    for obj in layout.objects:
        try:
            if isinstance(obj, RectObject):
                _draw_rect(slide, obj)
            elif isinstance(obj, LineObject):
                _draw_line(slide, obj)
            elif isinstance(obj, TextObject):
                _draw_text(slide, obj)
            elif isinstance(obj, ImageObject):
                data = _load_image(_media_file(media_dir, obj.path), image_cache)
                if data is not None:
                    pic = _add_picture(slide, data, obj.x, obj.y, obj.w, obj.h)
                    if obj.rotate:
                        pic.rotation = obj.rotate
            elif isinstance(obj, PlaceholderObject):
                _draw_placeholder(slide, obj)
        except (ValueError, OSError, PythonPptxError) as e:
            logger.warning(f"[{layout.name}] Could not draw {obj.kind} object: {e}")

    sn = layout.slide_number
    if sn is not None:
        box = slide.shapes.add_textbox(Inches(sn.x), Inches(sn.y), Inches(sn.w), Inches(sn.h))
        _set_margins(box.text_frame, sn.margin)
        _fill_text_frame(box.text_frame, "#", sn.font_face, sn.font_size, sn.color, None, None, sn.align)


def build_preview(result: ExtractionResult, media_dir: str | Path | None = None) -> Presentation:
    """Draw every layout of an extraction result into a new presentation."""
    media_dir = Path(media_dir) if media_dir is not None else Path("media")
    prs = Presentation()
    prs.slide_width = Inches(result.dimensions.width)
    prs.slide_height = Inches(result.dimensions.height)

    image_cache: dict[Path, bytes | None] = {}
    for layout in result.layouts:
        _draw_layout(prs, layout, media_dir, image_cache)

    logger.info(f"Preview: {len(result.layouts)} slide(s)")
    return prs


def save_preview(result: ExtractionResult, output_path: str | Path, media_dir: str | Path | None = None) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    build_preview(result, media_dir).save(str(output_path))
    return output_path
