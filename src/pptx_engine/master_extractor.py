"""Extract resolved slide masters from a .pptx/.potx template.

Walks theme -> masters -> layouts, resolving every color against the
effective color map of the layout and every placeholder against its
master's defaults, and produces one flat object list per layout.
"""

import logging
import re
from pathlib import Path

from pptx.oxml.ns import qn

from src.mappers.backgrounds import map_background
from src.mappers.palette import is_dark_color
from src.mappers.placeholders import map_placeholder
from src.mappers.shapes import map_shape
from src.mappers.slide_number import (
    extract_slide_number_from_shape,
    map_slide_number_and_footers,
)
from src.parsers.archive import TemplateArchive, open_template
from src.parsers.colors import DEFAULT_CLR_MAP, ColorResolver, create_color_resolver
from src.parsers.layout import (
    extract_clr_map_override,
    parse_presentation,
    parse_slide_layout,
)
from src.parsers.master import parse_slide_master
from src.parsers.relationships import (
    find_relationship,
    media_filename,
    parse_relationships,
    resolve_rel_path,
)
from src.parsers.theme import parse_clr_map, parse_theme
from src.schemas.config import ExtractionConfig
from src.schemas.master_data import (
    BackgroundSpec,
    ExtractionResult,
    ImageObject,
    LayoutResult,
    MediaFile,
    PlaceholderObject,
    RectObject,
    SlideObject,
    TextObject,
)
from src.schemas.template_model import ParsedLayout, ParsedMaster, SlideDimensions, Theme

logger = logging.getLogger(__name__)

PRESENTATION_PATH = "ppt/presentation.xml"
PRESENTATION_RELS_PATH = "ppt/_rels/presentation.xml.rels"
DEFAULT_THEME_PATH = "ppt/theme/theme1.xml"

_MASTER_FILE = re.compile(r"^ppt/slideMasters/slideMaster(\d+)\.xml$")
_LAYOUT_FILE = re.compile(r"^ppt/slideLayouts/slideLayout(\d+)\.xml$")
_DEFAULT_TEXT_FILL = f"{qn('a:lvl1pPr')}/{qn('a:defRPr')}/{qn('a:solidFill')}"


def rels_path_for(part_path: str) -> str:
    """ppt/slideLayouts/slideLayout1.xml -> ppt/slideLayouts/_rels/slideLayout1.xml.rels"""
    directory, _, filename = part_path.rpartition("/")
    return f"{directory}/_rels/{filename}.rels" if directory else f"_rels/{filename}.rels"


def to_upper_snake_case(name: str) -> str:
    """'Title Slide - Dark' -> 'TITLE_SLIDE_DARK'"""
    cleaned = re.sub(r"[_-]", " ", name)
    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", cleaned).strip()
    return re.sub(r"\s+", "_", cleaned).upper()


def _numbered_parts(files: list[str], pattern: re.Pattern) -> list[str]:
    numbered = []
    for f in files:
        m = pattern.match(f)
        if m:
            numbered.append((int(m.group(1)), f))
    return [f for _, f in sorted(numbered)]


def _resolve_theme_path(archive: TemplateArchive) -> str:
    rels = parse_relationships(archive.get_optional_xml(PRESENTATION_RELS_PATH))
    theme_rel = find_relationship(rels, "theme")
    if theme_rel is None:
        return DEFAULT_THEME_PATH
    return resolve_rel_path(PRESENTATION_PATH, theme_rel.target)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def filter_layouts(layouts: list[ParsedLayout], filters: list[str] | None) -> list[ParsedLayout]:
    """Keep layouts selected by 1-based number or case-insensitive name fragment."""
    if not filters:
        return layouts

    numbers = set()
    fragments = []
    for token in filters:
        token = token.strip()
        if not token:
            continue
        if token.isdigit():
            numbers.add(int(token))
        else:
            fragments.append(token.lower())

    selected = []
    for i, layout in enumerate(layouts, start=1):
        lower_name = layout.name.lower()
        if i in numbers or any(f in lower_name for f in fragments):
            selected.append(layout)
    return selected


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def _round2(v: float | None):
    return round(v, 2) if v is not None else ""


def _dedup_key(obj) -> str | None:
    if isinstance(obj, TextObject):
        o = obj.options
        return f"text:{obj.text}:{_round2(o.x)}:{_round2(o.y)}:{_round2(o.w)}:{_round2(o.h)}"
    if isinstance(obj, ImageObject):
        return f"image:{obj.path}:{_round2(obj.x)}:{_round2(obj.y)}:{_round2(obj.w)}:{_round2(obj.h)}"
    if isinstance(obj, RectObject):
        return f"rect:{_round2(obj.x)}:{_round2(obj.y)}:{_round2(obj.w)}:{_round2(obj.h)}"
    return None


def deduplicate_objects(objects: list[SlideObject]) -> list[SlideObject]:
    """Drop repeated text/image/rect objects; the first occurrence wins.

    Placeholders and lines are always kept.
    """
    seen: set[str] = set()
    result = []
    for obj in objects:
        key = None if isinstance(obj, PlaceholderObject) else _dedup_key(obj)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        result.append(obj)
    return result


def is_dark_background(background: BackgroundSpec | None) -> bool:
    if background is None or not background.color or len(background.color) != 6:
        return False
    return is_dark_color(background.color)


def contrast_color(background: BackgroundSpec | None) -> str:
    return "FFFFFF" if is_dark_background(background) else "000000"


def cleanup_footer_zone(
    objects: list[SlideObject],
    dimensions: SlideDimensions,
    background: BackgroundSpec | None,
    zone_ratio: float = 0.9,
) -> None:
    """Text in the bottom band loses paragraph spacing and gets a readable color."""
    threshold = (dimensions.height or 7.5) * zone_ratio
    fallback = contrast_color(background)

    for obj in objects:
        if not isinstance(obj, TextObject):
            continue
        opts = obj.options
        if (opts.y or 0) < threshold:
            continue
        opts.para_space_before = None
        opts.para_space_after = None
        if not opts.color:
            opts.color = fallback


def resolve_default_text_color(resolver: ColorResolver, master: ParsedMaster | None) -> str | None:
    """First lvl1pPr/defRPr/solidFill color of the master's title, body, then other style."""
    if master is None:
        return None

    styles = master.text_styles
    for style in (styles.title, styles.body, styles.other):
        if style is None:
            continue
        fill = style.find(_DEFAULT_TEXT_FILL)
        if fill is None:
            continue
        resolved = resolver.resolve(fill)
        if resolved is not None and resolved.color:
            return resolved.color
    return None


def apply_placeholder_color_defaults(objects: list[SlideObject], color: str | None) -> None:
    if not color:
        return
    for obj in objects:
        if isinstance(obj, PlaceholderObject) and not obj.options.color:
            obj.options.color = color


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def _collect_media(
    relationships,
    part_path: str,
    media: dict[str, MediaFile],
) -> None:
    for rel in relationships.values():
        if rel.type != "image":
            continue
        archive_path = resolve_rel_path(part_path, rel.target)
        if archive_path not in media:
            media[archive_path] = MediaFile(archive_path=archive_path, filename=media_filename(rel.target))


def _master_color_map(master: ParsedMaster | None) -> dict[str, str] | None:
    # A master without p:clrMap gets the standard mapping
    if master is None or not master.clr_map:
        return None
    return master.clr_map


def extract_masters(path: str | Path, config: ExtractionConfig | None = None) -> ExtractionResult:
    """Extract every (or every selected) layout of a template.

    Raises:
        FileNotFoundError: if the template does not exist.
        ValueError: if it is not a zip package or its theme is invalid.
        ArchiveEntryNotFoundError: if the theme or presentation part is missing.
    """
    config = config or ExtractionConfig()
    path = Path(path)
    archive = open_template(path)
    all_files = archive.list_files()

    # 1. Theme
    theme_path = _resolve_theme_path(archive)
    theme = parse_theme(archive.get_xml(theme_path))
    logger.info(f"Theme {theme_path}: {len(theme.colors)} colors, fonts {theme.fonts.heading}/{theme.fonts.body}")

    # 2. Dimensions
    dimensions = parse_presentation(archive.get_xml(PRESENTATION_PATH))

    # 3. Masters, each resolved under its own color map
    masters: dict[str, ParsedMaster] = {}
    for master_file in _numbered_parts(all_files, _MASTER_FILE):
        root = archive.get_xml(master_file)
        rels_root = archive.get_optional_xml(rels_path_for(master_file))
        # the color map lives on the root; read it first to build the resolver
        clr_map = parse_clr_map(root.find(qn("p:clrMap"))) or None
        resolver = create_color_resolver(theme.colors, clr_map, theme.fonts)
        masters[master_file] = parse_slide_master(root, rels_root, resolver, theme.fonts, file=master_file)
    first_master = next(iter(masters.values()), None)
    logger.info(f"Parsed {len(masters)} slide master(s)")

    # 4. Layouts
    parsed_layouts: list[ParsedLayout] = []
    for layout_file in _numbered_parts(all_files, _LAYOUT_FILE):
        root = archive.get_xml(layout_file)
        rels_root = archive.get_optional_xml(rels_path_for(layout_file))

        master_rel = find_relationship(parse_relationships(rels_root), "slideMaster")
        master_file = resolve_rel_path(layout_file, master_rel.target) if master_rel else None
        master = masters.get(master_file) or first_master

        clr_map_override = extract_clr_map_override(root.find(qn("p:clrMapOvr")))
        resolver = _layout_resolver(theme, master, clr_map_override)

        layout = parse_slide_layout(
            root,
            rels_root,
            resolver,
            theme.fonts,
            master_defaults=master.placeholder_defaults if master else None,
            file=layout_file,
        )
        layout.master_file = master.file if master else None
        parsed_layouts.append(layout)
    logger.info(f"Parsed {len(parsed_layouts)} slide layout(s)")

    # 5. Filter
    selected = filter_layouts(parsed_layouts, config.layouts)
    if config.layouts:
        logger.info(f"Layout filter {config.layouts} selected {len(selected)} of {len(parsed_layouts)}")

    # 6. Map
    all_warnings: list[str] = []
    media: dict[str, MediaFile] = {}
    results = []
    for layout in selected:
        master = masters.get(layout.master_file) or first_master
        result, warnings = _map_layout(layout, master, theme, dimensions, config, media)
        results.append(result)
        all_warnings.extend(f"[{layout.name}] {w}" for w in warnings)

    for w in all_warnings:
        logger.debug(w)

    return ExtractionResult(
        template_name=path.name,
        theme_colors=theme.colors,
        theme_fonts=theme.fonts,
        dimensions=dimensions,
        layouts=results,
        parsed_layouts=selected,
        warnings=all_warnings,
        media_files=list(media.values()),
    )


def _layout_resolver(theme: Theme, master: ParsedMaster | None, clr_map_override: dict[str, str] | None) -> ColorResolver:
    clr_map = _master_color_map(master)
    if clr_map_override:
        clr_map = {**(clr_map or DEFAULT_CLR_MAP), **clr_map_override}
    return create_color_resolver(theme.colors, clr_map, theme.fonts)


def _map_layout(
    layout: ParsedLayout,
    master: ParsedMaster | None,
    theme: Theme,
    dimensions: SlideDimensions,
    config: ExtractionConfig,
    media: dict[str, MediaFile],
) -> tuple[LayoutResult, list[str]]:
    warnings = list(layout.warnings)
    resolver = _layout_resolver(theme, master, layout.clr_map_override)
    height_factor = config.slide_number_height_factor

    # Background: the layout's own, else the master's (with the master's relationships)
    master_background = layout.background is None and master is not None and master.background is not None
    if master_background:
        background, bg_warnings = map_background(master.background, resolver, master.relationships)
    else:
        background, bg_warnings = map_background(layout.background, resolver, layout.relationships)
    warnings.extend(bg_warnings)

    slide_number, footer_objects = map_slide_number_and_footers(layout.placeholders, height_factor)

    placeholder_objects = []
    for ph in layout.placeholders:
        obj, ph_warnings = map_placeholder(ph, resolver)
        warnings.extend(ph_warnings)
        if obj is not None:
            placeholder_objects.append(obj)

    shape_objects = []
    for shape in layout.static_shapes:
        embedded = extract_slide_number_from_shape(shape, height_factor)
        if embedded is not None:
            slide_number = slide_number or embedded
            continue
        obj, shape_warnings = map_shape(shape, resolver, layout.relationships)
        warnings.extend(shape_warnings)
        if obj is not None:
            shape_objects.append(obj)

    master_objects = []
    if layout.show_master_sp and master is not None:
        for shape in master.static_shapes:
            embedded = extract_slide_number_from_shape(shape, height_factor)
            if embedded is not None:
                slide_number = slide_number or embedded
                continue
            obj, shape_warnings = map_shape(shape, resolver, master.relationships)
            warnings.extend(shape_warnings)
            if obj is not None:
                master_objects.append(obj)

    if layout.file:
        _collect_media(layout.relationships, layout.file, media)
    if (master_objects or master_background) and master is not None and master.file:
        _collect_media(master.relationships, master.file, media)

    objects = deduplicate_objects(shape_objects + footer_objects + placeholder_objects + master_objects)
    cleanup_footer_zone(objects, dimensions, background, config.footer_zone_ratio)
    apply_placeholder_color_defaults(objects, resolve_default_text_color(resolver, master))

    if slide_number is not None and not slide_number.color:
        slide_number.color = contrast_color(background)

    logger.debug(
        f"Mapped layout '{layout.name}': {len(placeholder_objects)} placeholders, "
        f"{len(objects)} objects, {len(warnings)} warnings"
    )

    return LayoutResult(
        name=layout.name,
        title=to_upper_snake_case(layout.name),
        background=background,
        slide_number=slide_number,
        objects=objects,
        warnings=warnings,
    ), warnings
