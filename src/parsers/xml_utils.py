"""Shared helpers for walking DrawingML / PresentationML elements.

Every helper accepts ``None`` and returns an empty/default value, since
real templates are frequently sparse.
"""

import re

from lxml import etree
from pptx.oxml.ns import qn

from src.mappers.units import emu_angle_to_degrees, emu_to_inches
from src.schemas.template_model import (
    BackgroundKind,
    BackgroundRef,
    FillKind,
    FillRef,
    Position,
)

__all__ = [
    "qn",
    "local_name",
    "num_attr",
    "bool_attr",
    "extract_position",
    "extract_rotation",
    "extract_av_lst",
    "extract_fill",
    "extract_background",
]

_FILL_ORDER = (FillKind.SOLID, FillKind.GRADIENT, FillKind.IMAGE, FillKind.PATTERN, FillKind.NONE)

_GD_VALUE = re.compile(r"^val\s+(\d+)")


def local_name(el) -> str:
    return etree.QName(el).localname


def num_attr(el, name: str, default=None):
    """Read a numeric attribute; ``default`` when missing or malformed."""
    if el is None:
        return default
    raw = el.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        try:
            return float(raw)
        except ValueError:
            return default


def bool_attr(el, name: str) -> bool | None:
    """Three-valued xsd:boolean attribute: None when absent."""
    if el is None:
        return None
    raw = el.get(name)
    if raw is None:
        return None
    return raw in ("1", "true")


def extract_position(xfrm) -> Position | None:
    """Bounds from an a:xfrm (or p:xfrm) element, None when it carries neither offset nor extent."""
    if xfrm is None:
        return None

    off = xfrm.find(qn("a:off"))
    ext = xfrm.find(qn("a:ext"))
    if off is None and ext is None:
        return None

    return Position(
        x=emu_to_inches(num_attr(off, "x", 0)) if off is not None else 0.0,
        y=emu_to_inches(num_attr(off, "y", 0)) if off is not None else 0.0,
        w=emu_to_inches(num_attr(ext, "cx", 0)) if ext is not None else 0.0,
        h=emu_to_inches(num_attr(ext, "cy", 0)) if ext is not None else 0.0,
    )


def extract_rotation(xfrm) -> float | None:
    rot = num_attr(xfrm, "rot")
    if rot is None:
        return None
    return emu_angle_to_degrees(rot)


def extract_av_lst(sp_pr) -> dict[str, int] | None:
    """Adjustment values (a:prstGeom/a:avLst) as name -> value, e.g. {'adj': 16667}."""
    if sp_pr is None:
        return None
    av_lst = sp_pr.find(f"{qn('a:prstGeom')}/{qn('a:avLst')}")
    if av_lst is None:
        return None

    values = {}
    for gd in av_lst.findall(qn("a:gd")):
        name = gd.get("name")
        match = _GD_VALUE.match(gd.get("fmla") or "")
        if name and match:
            values[name] = int(match.group(1))
    return values or None


def extract_fill(sp_pr) -> FillRef | None:
    """First fill element found on a shape-properties element."""
    if sp_pr is None:
        return None
    for kind in _FILL_ORDER:
        el = sp_pr.find(qn(f"a:{kind.value}"))
        if el is not None:
            return FillRef(kind=kind, element=el)
    return None


def extract_background(bg) -> BackgroundRef | None:
    """Inline p:bgPr or theme p:bgRef from a p:bg element."""
    if bg is None:
        return None

    bg_pr = bg.find(qn("p:bgPr"))
    if bg_pr is not None:
        return BackgroundRef(kind=BackgroundKind.PROPERTIES, element=bg_pr)

    bg_ref = bg.find(qn("p:bgRef"))
    if bg_ref is not None:
        return BackgroundRef(kind=BackgroundKind.THEME_REFERENCE, element=bg_ref)

    return None
