"""Walk a p:spTree and turn its sp/pic children into placeholder and static-shape records.

Masters and layouts share the same shape-tree structure, so both parsers
go through :func:`split_shape_tree`.
"""

import logging

from pptx.oxml.ns import qn

from src.parsers.colors import ColorResolver
from src.parsers.text import extract_text_props
from src.parsers.xml_utils import (
    extract_av_lst,
    extract_fill,
    extract_position,
    extract_rotation,
    local_name,
)
from src.schemas.template_model import (
    ParsedPlaceholder,
    ParsedShape,
    PlaceholderDefault,
    ShapeKind,
    ShapeProps,
    ShapeTreeItem,
    ThemeFonts,
)

logger = logging.getLogger(__name__)

SHAPE_TREE_TAGS = ("sp", "pic", "grpSp", "cxnSp", "graphicFrame")

_UNSUPPORTED_WARNINGS = {
    "grpSp": "Found {n} grouped shape(s) (not supported in v1)",
    "cxnSp": "Found {n} connection shape(s) (not supported in v1)",
    "graphicFrame": "Found {n} graphic frame(s) (tables/charts, not supported in v1)",
}


def walk_shape_tree(sp_tree) -> list[ShapeTreeItem]:
    """Direct shape children of a p:spTree, tagged by kind, in document order."""
    if sp_tree is None:
        return []
    items = []
    for child in sp_tree:
        if not isinstance(child.tag, str):
            continue
        tag = local_name(child)
        if tag in SHAPE_TREE_TAGS:
            items.append(ShapeTreeItem(tag=tag, element=child))
    return items


def placeholder_info(nv_pr) -> dict | None:
    """type/idx/sz of the p:ph marker under a p:nvPr, or None for a non-placeholder."""
    if nv_pr is None:
        return None
    ph = nv_pr.find(qn("p:ph"))
    if ph is None:
        return None
    return {
        "type": ph.get("type") or None,
        "idx": ph.get("idx"),
        "size": ph.get("sz") or None,
    }


def placeholder_keys(ph_type: str | None, idx: str | None) -> list[str]:
    """Lookup keys for a placeholder identity: its type, then 'idx:<n>'."""
    keys = []
    if ph_type:
        keys.append(ph_type)
    if idx is not None:
        keys.append(f"idx:{idx}")
    return keys


def find_placeholder_default(
    master_defaults: dict[str, PlaceholderDefault] | None,
    ph_type: str | None,
    idx: str | None,
) -> PlaceholderDefault | None:
    if not master_defaults:
        return None
    for key in placeholder_keys(ph_type, idx):
        found = master_defaults.get(key)
        if found is not None:
            return found
    return None


def extract_shape_props(sp_pr) -> ShapeProps:
    if sp_pr is None:
        return ShapeProps()
    prst_geom = sp_pr.find(qn("a:prstGeom"))
    return ShapeProps(
        geometry=(prst_geom.get("prst") or None) if prst_geom is not None else None,
        fill=extract_fill(sp_pr),
        line=sp_pr.find(qn("a:ln")),
        effects=sp_pr.find(qn("a:effectLst")),
        av_lst=extract_av_lst(sp_pr),
    )


def parse_sp(
    sp,
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
    master_defaults: dict[str, PlaceholderDefault] | None = None,
) -> ParsedPlaceholder | ParsedShape:
    """Parse a p:sp element.

    Placeholders missing a position or a text body borrow them from the
    master's default for the same identity (type first, then index).
    Values present on the shape itself are never replaced.
    """
    nv_sp_pr = sp.find(qn("p:nvSpPr"))
    c_nv_pr = nv_sp_pr.find(qn("p:cNvPr")) if nv_sp_pr is not None else None
    nv_pr = nv_sp_pr.find(qn("p:nvPr")) if nv_sp_pr is not None else None
    sp_pr = sp.find(qn("p:spPr"))
    tx_body = sp.find(qn("p:txBody"))

    name = (c_nv_pr.get("name") or "") if c_nv_pr is not None else ""
    xfrm = sp_pr.find(qn("a:xfrm")) if sp_pr is not None else None
    position = extract_position(xfrm)
    rotation = extract_rotation(xfrm)
    shape_props = extract_shape_props(sp_pr)
    text_props = extract_text_props(tx_body, color_resolver, theme_fonts) if tx_body is not None else None

    ph = placeholder_info(nv_pr)
    if ph is None:
        return ParsedShape(
            kind=ShapeKind.SHAPE,
            name=name,
            position=position,
            rotation=rotation,
            text_props=text_props,
            geometry=shape_props.geometry,
            fill=shape_props.fill,
            line=shape_props.line,
            effects=shape_props.effects,
            av_lst=shape_props.av_lst,
        )

    if position is None or text_props is None:
        inherited = find_placeholder_default(master_defaults, ph["type"], ph["idx"])
        if inherited is not None:
            if position is None and inherited.position is not None:
                position = inherited.position
            if text_props is None and inherited.text_props is not None:
                text_props = inherited.text_props

    return ParsedPlaceholder(
        type=ph["type"],
        idx=ph["idx"],
        size=ph["size"],
        name=name,
        position=position,
        rotation=rotation,
        text_props=text_props,
        shape_props=shape_props,
    )


def parse_pic(pic, master_defaults: dict[str, PlaceholderDefault] | None = None) -> ParsedPlaceholder | ParsedShape:
    """Parse a p:pic element. Picture placeholders default to type 'pic'."""
    nv_pic_pr = pic.find(qn("p:nvPicPr"))
    c_nv_pr = nv_pic_pr.find(qn("p:cNvPr")) if nv_pic_pr is not None else None
    nv_pr = nv_pic_pr.find(qn("p:nvPr")) if nv_pic_pr is not None else None
    sp_pr = pic.find(qn("p:spPr"))
    blip = pic.find(f"{qn('p:blipFill')}/{qn('a:blip')}")

    name = (c_nv_pr.get("name") or "") if c_nv_pr is not None else ""
    xfrm = sp_pr.find(qn("a:xfrm")) if sp_pr is not None else None
    position = extract_position(xfrm)
    rotation = extract_rotation(xfrm)
    image_ref = (blip.get(qn("r:embed")) or None) if blip is not None else None
    shape_props = extract_shape_props(sp_pr)

    ph = placeholder_info(nv_pr)
    if ph is None:
        return ParsedShape(
            kind=ShapeKind.PICTURE,
            name=name,
            position=position,
            rotation=rotation,
            geometry=shape_props.geometry,
            fill=shape_props.fill,
            line=shape_props.line,
            effects=shape_props.effects,
            image_ref=image_ref,
        )

    ph_type = ph["type"] or "pic"
    if position is None:
        inherited = find_placeholder_default(master_defaults, ph_type, ph["idx"])
        if inherited is not None and inherited.position is not None:
            position = inherited.position

    return ParsedPlaceholder(
        type=ph_type,
        idx=ph["idx"],
        size=ph["size"],
        name=name,
        position=position,
        rotation=rotation,
        shape_props=shape_props,
        image_ref=image_ref,
    )


def split_shape_tree(
    items: list[ShapeTreeItem],
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
    master_defaults: dict[str, PlaceholderDefault] | None = None,
) -> tuple[list[ParsedPlaceholder], list[ParsedShape]]:
    """Separate placeholders from static decoration. Groups, connectors and frames are skipped."""
    placeholders: list[ParsedPlaceholder] = []
    static_shapes: list[ParsedShape] = []

    for item in items:
        if item.tag == "sp":
            parsed = parse_sp(item.element, color_resolver, theme_fonts, master_defaults)
        elif item.tag == "pic":
            parsed = parse_pic(item.element, master_defaults)
        else:
            continue

        if isinstance(parsed, ParsedPlaceholder):
            placeholders.append(parsed)
        else:
            static_shapes.append(parsed)

    return placeholders, static_shapes


def unsupported_shape_warnings(items: list[ShapeTreeItem]) -> list[str]:
    """One warning per unsupported element kind present, with its count."""
    warnings = []
    for tag, template in _UNSUPPORTED_WARNINGS.items():
        n = sum(1 for item in items if item.tag == tag)
        if n:
            warnings.append(template.format(n=n))
    return warnings
