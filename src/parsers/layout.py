"""Slide layout parser, plus slide dimensions from presentation.xml."""

import logging

from pptx.oxml.ns import qn

from src.mappers.units import emu_to_inches
from src.parsers.colors import ColorResolver
from src.parsers.relationships import parse_relationships
from src.parsers.shape_tree import (
    split_shape_tree,
    unsupported_shape_warnings,
    walk_shape_tree,
)
from src.parsers.xml_utils import extract_background, num_attr
from src.schemas.template_model import (
    ParsedLayout,
    PlaceholderDefault,
    SlideDimensions,
    ThemeFonts,
)

logger = logging.getLogger(__name__)

DEFAULT_SLIDE_CX = 9144000
DEFAULT_SLIDE_CY = 6858000


def extract_clr_map_override(clr_map_ovr) -> dict[str, str] | None:
    """None when the layout inherits the master's map (a:masterClrMapping)."""
    if clr_map_ovr is None:
        return None
    if clr_map_ovr.find(qn("a:masterClrMapping")) is not None:
        return None
    override = clr_map_ovr.find(qn("a:overrideClrMapping"))
    if override is None:
        return None
    return dict(override.attrib) or None


def parse_slide_layout(
    layout_root,
    rels_root=None,
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
    master_defaults: dict[str, PlaceholderDefault] | None = None,
    file: str | None = None,
) -> ParsedLayout:
    """Parse a p:sldLayout root element.

    ``master_defaults`` are the owning master's placeholder defaults, used
    to fill in placeholders that carry no position or text of their own.
    The background is left None when the layout has none, so the caller
    can fall back to the master's.
    """
    if layout_root is None or layout_root.tag != qn("p:sldLayout"):
        logger.debug(f"No p:sldLayout root in {file or 'layout'}, returning empty layout")
        return ParsedLayout(file=file)

    c_sld = layout_root.find(qn("p:cSld"))
    sp_tree = c_sld.find(qn("p:spTree")) if c_sld is not None else None
    shapes = walk_shape_tree(sp_tree)

    placeholders, static_shapes = split_shape_tree(shapes, color_resolver, theme_fonts, master_defaults)
    warnings = unsupported_shape_warnings(shapes)

    name = layout_root.get("name") or (c_sld.get("name") if c_sld is not None else None) or ""

    return ParsedLayout(
        file=file,
        name=name,
        type=layout_root.get("type") or None,
        show_master_sp=layout_root.get("showMasterSp") != "0",
        clr_map_override=extract_clr_map_override(layout_root.find(qn("p:clrMapOvr"))),
        background=extract_background(c_sld.find(qn("p:bg")) if c_sld is not None else None),
        placeholders=placeholders,
        static_shapes=static_shapes,
        warnings=warnings,
        relationships=parse_relationships(rels_root),
    )


def parse_presentation(presentation_root) -> SlideDimensions:
    """Slide size from p:presentation/p:sldSz; 10 x 7.5 inches when absent."""
    if presentation_root is None or presentation_root.tag != qn("p:presentation"):
        return SlideDimensions()

    sld_sz = presentation_root.find(qn("p:sldSz"))
    if sld_sz is None:
        return SlideDimensions()

    return SlideDimensions(
        width=emu_to_inches(num_attr(sld_sz, "cx") or DEFAULT_SLIDE_CX),
        height=emu_to_inches(num_attr(sld_sz, "cy") or DEFAULT_SLIDE_CY),
    )
