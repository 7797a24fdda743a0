"""File I/O and path utilities."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from src.parsers.archive import TemplateArchive
from src.schemas.master_data import MediaFile

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".pptx", ".potx")


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_yaml(data: dict[str, Any], path: str | Path) -> None:
    """Save a dict to a YAML file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Save data to a JSON file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w") as f:
        json.dump(data, f, indent=indent, default=str)


def validate_template_path(path: str | Path) -> Path:
    """Check that ``path`` is an existing .pptx/.potx file.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if it has another extension.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Not found: {path}")
    if path.suffix.lower() not in TEMPLATE_SUFFIXES:
        raise ValueError(f"Expected a .pptx or .potx file, got: {path.suffix or path.name}")
    return path


def copy_media(archive: TemplateArchive, media_files: list[MediaFile], media_dir: str | Path) -> list[Path]:
    """Write each referenced media part of the archive into ``media_dir``.

    Parts missing from the archive are skipped with a warning.
    """
    media_dir = ensure_directory(media_dir)
    written = []
    for media in media_files:
        if not archive.has_file(media.archive_path):
            logger.warning(f"Media not found in archive: {media.archive_path}")
            continue
        target = media_dir / media.filename
        target.write_bytes(archive.get_bytes(media.archive_path))
        written.append(target)
    logger.info(f"Copied {len(written)} media file(s) to {media_dir}")
    return written

