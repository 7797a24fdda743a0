"""Relationship parts (_rels/*.rels): relationship ID -> type and target.

Types are shortened to the last segment of their URL, so
``.../relationships/slideLayout`` becomes ``slideLayout``.
"""

from src.schemas.template_model import Relationship

_NS_PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"


def parse_relationships(rels_root) -> dict[str, Relationship]:
    """Parse a Relationships root element. Absent input yields an empty map."""
    result: dict[str, Relationship] = {}
    if rels_root is None or rels_root.tag != f"{{{_NS_PKG_REL}}}Relationships":
        return result

    for rel in rels_root.findall(f"{{{_NS_PKG_REL}}}Relationship"):
        rel_id = rel.get("Id")
        if not rel_id:
            continue
        type_url = rel.get("Type") or ""
        result[rel_id] = Relationship(
            type=type_url.rsplit("/", 1)[-1],
            target=rel.get("Target") or "",
        )

    return result


def resolve_rel_path(base_path: str, rel_target: str) -> str:
    """Resolve a relationship target against the part that owns the .rels file.

    >>> resolve_rel_path("ppt/slideLayouts/slideLayout1.xml", "../media/image1.png")
    'ppt/media/image1.png'
    >>> resolve_rel_path("ppt/presentation.xml", "slides/slide1.xml")
    'ppt/slides/slide1.xml'
    """
    if rel_target.startswith("/"):
        return rel_target[1:]

    base_dir = base_path.rsplit("/", 1)[0] if "/" in base_path else ""
    segments = base_dir.split("/") if base_dir else []

    for seg in rel_target.split("/"):
        if seg == "..":
            if segments:
                segments.pop()
        elif seg not in (".", ""):
            segments.append(seg)

    return "/".join(segments)


def media_filename(target: str) -> str:
    return target.rsplit("/", 1)[-1]


def find_relationship(relationships: dict[str, Relationship], rel_type: str) -> Relationship | None:
    """First relationship of the given short type, or None."""
    for rel in relationships.values():
        if rel.type == rel_type:
            return rel
    return None
