"""Slide master parser: color map, background, shape tree, text styles and relationships."""

import logging

from pptx.oxml.ns import qn

from src.parsers.colors import ColorResolver
from src.parsers.relationships import parse_relationships
from src.parsers.shape_tree import (
    placeholder_info,
    placeholder_keys,
    split_shape_tree,
    walk_shape_tree,
)
from src.parsers.text import extract_text_props
from src.parsers.theme import parse_clr_map
from src.parsers.xml_utils import extract_background, extract_position
from src.schemas.template_model import (
    ParsedMaster,
    PlaceholderDefault,
    ShapeTreeItem,
    TextStyles,
    ThemeFonts,
)

logger = logging.getLogger(__name__)


def _extract_text_styles(tx_styles) -> TextStyles:
    if tx_styles is None:
        return TextStyles()
    return TextStyles(
        title=tx_styles.find(qn("p:titleStyle")),
        body=tx_styles.find(qn("p:bodyStyle")),
        other=tx_styles.find(qn("p:otherStyle")),
    )


def extract_placeholder_defaults(
    shapes: list[ShapeTreeItem],
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
) -> dict[str, PlaceholderDefault]:
    """Position and text of every master placeholder sp.

    Each default is stored under its type and, when present, under
    'idx:<n>' as well.
    """
    defaults: dict[str, PlaceholderDefault] = {}

    for item in shapes:
        if item.tag != "sp":
            continue
        sp = item.element
        ph = placeholder_info(sp.find(f"{qn('p:nvSpPr')}/{qn('p:nvPr')}"))
        if ph is None:
            continue

        tx_body = sp.find(qn("p:txBody"))
        default = PlaceholderDefault(
            position=extract_position(sp.find(f"{qn('p:spPr')}/{qn('a:xfrm')}")),
            text_props=(
                extract_text_props(tx_body, color_resolver, theme_fonts)
                if tx_body is not None
                else None
            ),
        )
        for key in placeholder_keys(ph["type"], ph["idx"]):
            defaults[key] = default

    return defaults


def parse_slide_master(
    master_root,
    rels_root=None,
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
    file: str | None = None,
) -> ParsedMaster:
    """Parse a p:sldMaster root element (plus its optional .rels root)."""
    if master_root is None or master_root.tag != qn("p:sldMaster"):
        logger.debug(f"No p:sldMaster root in {file or 'master'}, returning empty master")
        return ParsedMaster(file=file)

    c_sld = master_root.find(qn("p:cSld"))
    sp_tree = c_sld.find(qn("p:spTree")) if c_sld is not None else None
    shapes = walk_shape_tree(sp_tree)

    # The master's own placeholders are not kept as objects, only as inheritance defaults
    _, static_shapes = split_shape_tree(shapes, color_resolver, theme_fonts)

    master = ParsedMaster(
        file=file,
        clr_map=parse_clr_map(master_root.find(qn("p:clrMap"))),
        background=extract_background(c_sld.find(qn("p:bg")) if c_sld is not None else None),
        shapes=shapes,
        text_styles=_extract_text_styles(master_root.find(qn("p:txStyles"))),
        relationships=parse_relationships(rels_root),
        placeholder_defaults=extract_placeholder_defaults(shapes, color_resolver, theme_fonts),
        static_shapes=static_shapes,
    )
    logger.debug(
        f"Parsed master {file or ''}: {len(master.placeholder_defaults)} placeholder defaults, "
        f"{len(static_shapes)} static shapes"
    )
    return master
