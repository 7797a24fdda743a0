"""Map a master/layout background (p:bgPr or p:bgRef) to a color or image."""

import logging

from pptx.oxml.ns import qn

from src.mappers.shapes import media_path
from src.parsers.colors import ColorResolver
from src.schemas.master_data import BackgroundSpec
from src.schemas.template_model import BackgroundKind, BackgroundRef, Relationship

logger = logging.getLogger(__name__)


def _color_background(resolved) -> BackgroundSpec:
    return BackgroundSpec(color=resolved.color, transparency=resolved.transparency)


def map_background(
    background: BackgroundRef | None,
    color_resolver: ColorResolver | None,
    relationships: dict[str, Relationship] | None = None,
) -> tuple[BackgroundSpec | None, list[str]]:
    """Resolve a background reference.

    bgRef only has its color child honoured; the referenced format-scheme
    fill is not looked up. Gradients and patterns fall back to a single color.
    """
    warnings: list[str] = []
    if background is None:
        return None, warnings

    el = background.element
    resolve = color_resolver.resolve if color_resolver is not None else (lambda _el: None)

    if background.kind == BackgroundKind.THEME_REFERENCE:
        resolved = resolve(el)
        if resolved is not None:
            return _color_background(resolved), warnings
        warnings.append("bgRef (theme format scheme reference) not fully supported")
        return None, warnings

    solid = el.find(qn("a:solidFill"))
    if solid is not None:
        resolved = resolve(solid)
        return (_color_background(resolved) if resolved is not None else None), warnings

    blip_fill = el.find(qn("a:blipFill"))
    if blip_fill is not None:
        blip = blip_fill.find(qn("a:blip"))
        r_id = blip.get(qn("r:embed")) if blip is not None else None
        rel = (relationships or {}).get(r_id) if r_id else None
        if rel is not None:
            return BackgroundSpec(path=media_path(rel.target)), warnings
        warnings.append(f"Could not resolve background image reference {r_id}")
        return None, warnings

    grad_fill = el.find(qn("a:gradFill"))
    if grad_fill is not None:
        resolved = resolve(grad_fill.find(f"{qn('a:gsLst')}/{qn('a:gs')}"))
        if resolved is not None:
            warnings.append("Gradient background not fully supported, using first stop color as fallback")
            return BackgroundSpec(color=resolved.color), warnings
        warnings.append("Gradient background not supported")
        return None, warnings

    patt_fill = el.find(qn("a:pattFill"))
    if patt_fill is not None:
        resolved = resolve(patt_fill.find(qn("a:fgClr")))
        if resolved is not None:
            warnings.append("Pattern background not supported, using foreground color as fallback")
            return BackgroundSpec(color=resolved.color), warnings
        warnings.append("Pattern background not supported")
        return None, warnings

    # a:noFill, or nothing recognisable
    return None, warnings
