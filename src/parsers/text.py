"""Text property extraction from DrawingML text bodies (a:txBody).

Used by the master and layout parsers and by the shape mappers to pull
text content and styling out of PowerPoint elements.
"""

import logging

from pptx.oxml.ns import qn

from src.mappers.units import emu_angle_to_degrees, emu_to_inches
from src.parsers.colors import ColorResolver, resolve_theme_font
from src.parsers.xml_utils import bool_attr, local_name, num_attr
from src.schemas.template_model import (
    BodyProps,
    Bullet,
    BulletSpec,
    LevelProps,
    Paragraph,
    RunProps,
    TextProps,
    TextRun,
    ThemeFonts,
)

logger = logging.getLogger(__name__)

# Body inset defaults in EMU (0.1" left/right, 0.05" top/bottom)
DEFAULT_LINS = 91440
DEFAULT_TINS = 45720
DEFAULT_RINS = 91440
DEFAULT_BINS = 45720

ANCHOR_MAP = {
    "t": "top",
    "ctr": "middle",
    "b": "bottom",
}

ALIGN_MAP = {
    "l": "left",
    "ctr": "center",
    "r": "right",
    "just": "justify",
}

_AUTOFIT_TAGS = (
    ("normAutofit", "shrink"),
    ("spAutoFit", "resize"),
    ("noAutofit", "none"),
)


def extract_text_props(
    tx_body,
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
) -> TextProps:
    """Extract body properties, paragraphs, plain text and list style from a txBody.

    A missing txBody yields default body properties and no paragraphs.
    """
    if tx_body is None:
        return TextProps(body_props=_default_body_props())

    body_props = _extract_body_props(tx_body.find(qn("a:bodyPr")))
    lst_style_props = _extract_lst_style(tx_body.find(qn("a:lstStyle")), color_resolver, theme_fonts)
    paragraphs = [
        _extract_paragraph(p, color_resolver, theme_fonts)
        for p in tx_body.findall(qn("a:p"))
    ]

    plain_text = "\n".join("".join(r.text for r in p.runs) for p in paragraphs)

    return TextProps(
        body_props=body_props,
        paragraphs=paragraphs,
        plain_text=plain_text,
        lst_style_props=lst_style_props,
    )


def extract_default_text_style(
    def_rpr,
    color_resolver: ColorResolver | None = None,
    theme_fonts: ThemeFonts | None = None,
) -> RunProps:
    """Run properties of an a:defRPr (placeholder/list-style defaults)."""
    return _extract_run_props(def_rpr, color_resolver, theme_fonts)


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------

def _default_body_props() -> BodyProps:
    return BodyProps(
        margin=(
            emu_to_inches(DEFAULT_TINS),
            emu_to_inches(DEFAULT_RINS),
            emu_to_inches(DEFAULT_BINS),
            emu_to_inches(DEFAULT_LINS),
        )
    )


def _extract_body_props(body_pr) -> BodyProps:
    if body_pr is None:
        return _default_body_props()

    margin = (
        emu_to_inches(num_attr(body_pr, "tIns", DEFAULT_TINS)),
        emu_to_inches(num_attr(body_pr, "rIns", DEFAULT_RINS)),
        emu_to_inches(num_attr(body_pr, "bIns", DEFAULT_BINS)),
        emu_to_inches(num_attr(body_pr, "lIns", DEFAULT_LINS)),
    )

    rot = num_attr(body_pr, "rot")

    auto_fit = None
    for tag, mode in _AUTOFIT_TAGS:
        # presence is what counts; these are usually empty elements
        if body_pr.find(qn(f"a:{tag}")) is not None:
            auto_fit = mode
            break

    return BodyProps(
        margin=margin,
        valign=ANCHOR_MAP.get(body_pr.get("anchor")),
        rotation=emu_angle_to_degrees(rot) if rot is not None else None,
        vert=body_pr.get("vert") or None,
        auto_fit=auto_fit,
    )


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------

def _extract_line_spacing(ln_spc) -> tuple[float | None, float | None]:
    """(points, multiple); at most one of the two is set."""
    if ln_spc is None:
        return None, None

    pts = ln_spc.find(qn("a:spcPts"))
    if pts is not None:
        return num_attr(pts, "val", 0) / 100, None

    pct = ln_spc.find(qn("a:spcPct"))
    if pct is not None:
        return None, num_attr(pct, "val", 0) / 100000

    return None, None


def _extract_spacing(spc) -> float | None:
    """a:spcBef / a:spcAft in points (spcPct is kept as a fraction)."""
    if spc is None:
        return None

    pts = spc.find(qn("a:spcPts"))
    if pts is not None:
        return num_attr(pts, "val", 0) / 100

    pct = spc.find(qn("a:spcPct"))
    if pct is not None:
        return num_attr(pct, "val", 0) / 100000

    return None


def _extract_bullet(p_pr, color_resolver: ColorResolver | None) -> BulletSpec:
    if p_pr is None:
        return None

    if p_pr.find(qn("a:buNone")) is not None:
        return False

    bu_char = p_pr.find(qn("a:buChar"))
    bu_auto_num = p_pr.find(qn("a:buAutoNum"))
    if bu_char is None and bu_auto_num is None:
        return None

    font_face = None
    bu_font = p_pr.find(qn("a:buFont"))
    if bu_font is not None:
        font_face = bu_font.get("typeface") or ""

    color = None
    bu_clr = p_pr.find(qn("a:buClr"))
    if bu_clr is not None:
        resolved = color_resolver.resolve(bu_clr) if color_resolver else None
        color = resolved.color if resolved else "000000"

    size_percent = None
    bu_sz_pct = p_pr.find(qn("a:buSzPct"))
    if bu_sz_pct is not None:
        size_percent = num_attr(bu_sz_pct, "val", 0) / 1000

    if bu_char is not None:
        char = bu_char.get("char") or ""
        return Bullet(
            type="char",
            character_code=f"{ord(char[0]):X}" if char else "",
            font_face=font_face,
            color=color,
            size_percent=size_percent,
        )

    return Bullet(
        type="number",
        number_type=bu_auto_num.get("type") or "",
        font_face=font_face,
        color=color,
        size_percent=size_percent,
    )


def _extract_paragraph(p, color_resolver, theme_fonts) -> Paragraph:
    p_pr = p.find(qn("a:pPr"))

    explicit_align = ALIGN_MAP.get(p_pr.get("algn")) if p_pr is not None else None
    lvl = num_attr(p_pr, "lvl")
    mar_l = num_attr(p_pr, "marL")
    indent = num_attr(p_pr, "indent")

    line_spacing = line_spacing_multiple = None
    space_before = space_after = None
    default_run_props = None
    if p_pr is not None:
        line_spacing, line_spacing_multiple = _extract_line_spacing(p_pr.find(qn("a:lnSpc")))
        space_before = _extract_spacing(p_pr.find(qn("a:spcBef")))
        space_after = _extract_spacing(p_pr.find(qn("a:spcAft")))
        def_rpr = p_pr.find(qn("a:defRPr"))
        if def_rpr is not None:
            default_run_props = _extract_run_props(def_rpr, color_resolver, theme_fonts)

    return Paragraph(
        align=explicit_align or "left",
        explicit_align=explicit_align,
        level=lvl + 1 if lvl is not None else 1,
        rtl_mode=bool_attr(p_pr, "rtl") is True,
        margin_left=emu_to_inches(mar_l) if mar_l is not None else 0.0,
        indent=emu_to_inches(indent) if indent is not None else 0.0,
        line_spacing=line_spacing,
        line_spacing_multiple=line_spacing_multiple,
        para_space_before=space_before,
        para_space_after=space_after,
        bullet=_extract_bullet(p_pr, color_resolver),
        runs=_extract_runs(p, color_resolver, theme_fonts),
        default_run_props=default_run_props,
    )


def _extract_runs(p, color_resolver, theme_fonts) -> list[TextRun]:
    """Text runs and fields in document order, with line breaks interleaved.

    N breaks between N+1 content runs go after runs 0..N-1. Any other
    break count is appended after the content.
    """
    content: list[TextRun] = []
    break_count = 0

    for child in p:
        if not isinstance(child.tag, str):
            continue
        tag = local_name(child)
        if tag == "br":
            break_count += 1
            continue
        if tag not in ("r", "fld"):
            continue

        t = child.find(qn("a:t"))
        props = _extract_run_props(child.find(qn("a:rPr")), color_resolver, theme_fonts)
        run = TextRun(text=(t.text or "") if t is not None else "", **props.model_dump())
        if tag == "fld":
            run.is_field = True
            run.field_type = child.get("type") or ""
        content.append(run)

    if not break_count:
        return content

    if len(content) > 1 and break_count <= len(content) - 1:
        result = []
        for i, run in enumerate(content):
            result.append(run)
            if i < break_count:
                result.append(TextRun(text="\n", is_break=True))
        return result

    logger.debug(f"{break_count} line break(s) do not fit between {len(content)} run(s), appending")
    return content + [TextRun(text="\n", is_break=True) for _ in range(break_count)]


def _extract_run_props(r_pr, color_resolver, theme_fonts) -> RunProps:
    if r_pr is None:
        return RunProps()

    sz = num_attr(r_pr, "sz")
    baseline = num_attr(r_pr, "baseline", 0)
    spc = num_attr(r_pr, "spc")

    font_face = None
    latin = r_pr.find(qn("a:latin"))
    if latin is not None:
        typeface = latin.get("typeface")
        if typeface:
            if typeface.startswith("+"):
                font_face = (
                    color_resolver.resolve_font_ref(typeface)
                    if color_resolver is not None
                    else resolve_theme_font(typeface, theme_fonts)
                )
            else:
                font_face = typeface

    color = None
    solid_fill = r_pr.find(qn("a:solidFill"))
    if solid_fill is not None and color_resolver is not None:
        resolved = color_resolver.resolve(solid_fill)
        color = resolved.color if resolved else None

    highlight = None
    hl = r_pr.find(qn("a:highlight"))
    if hl is not None and color_resolver is not None:
        resolved = color_resolver.resolve(hl)
        highlight = resolved.color if resolved else None

    return RunProps(
        font_size=sz / 100 if sz is not None else None,
        bold=bool_attr(r_pr, "b"),
        italic=bool_attr(r_pr, "i"),
        underline=r_pr.get("u") or None,
        strike=r_pr.get("strike") or None,
        font_face=font_face,
        color=color,
        highlight=highlight,
        superscript=baseline > 0,
        subscript=baseline < 0,
        char_spacing=spc / 100 if spc is not None else None,
    )


# ---------------------------------------------------------------------------
# List styles
# ---------------------------------------------------------------------------

def _extract_lst_style(lst_style, color_resolver, theme_fonts) -> dict[int, LevelProps] | None:
    """a:lstStyle -> {0: defPPr, 1: lvl1pPr, ..., 9: lvl9pPr}; None when empty."""
    if lst_style is None:
        return None

    levels: dict[int, LevelProps] = {}

    def_ppr = lst_style.find(qn("a:defPPr"))
    if def_ppr is not None:
        levels[0] = extract_level_props(def_ppr, color_resolver, theme_fonts)

    for i in range(1, 10):
        lvl_pr = lst_style.find(qn(f"a:lvl{i}pPr"))
        if lvl_pr is not None:
            levels[i] = extract_level_props(lvl_pr, color_resolver, theme_fonts)

    return levels or None


def extract_level_props(lvl_pr, color_resolver=None, theme_fonts=None) -> LevelProps:
    """Paragraph defaults of one list-style level (also used for master text styles)."""
    mar_l = num_attr(lvl_pr, "marL")
    indent = num_attr(lvl_pr, "indent")
    line_spacing, line_spacing_multiple = _extract_line_spacing(lvl_pr.find(qn("a:lnSpc")))

    def_rpr = lvl_pr.find(qn("a:defRPr"))

    return LevelProps(
        align=ALIGN_MAP.get(lvl_pr.get("algn")),
        margin_left=emu_to_inches(mar_l) if mar_l is not None else None,
        indent=emu_to_inches(indent) if indent is not None else None,
        line_spacing=line_spacing,
        line_spacing_multiple=line_spacing_multiple,
        para_space_before=_extract_spacing(lvl_pr.find(qn("a:spcBef"))),
        para_space_after=_extract_spacing(lvl_pr.find(qn("a:spcAft"))),
        bullet=_extract_bullet(lvl_pr, color_resolver),
        default_run_props=(
            _extract_run_props(def_rpr, color_resolver, theme_fonts) if def_rpr is not None else None
        ),
    )
