"""Read parts out of a .pptx/.potx package."""

import logging
import zipfile
from pathlib import Path

from lxml import etree

logger = logging.getLogger(__name__)

# Templates are trusted-ish office files, but never expand entities or hit the network
_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)


class ArchiveEntryNotFoundError(FileNotFoundError):
    """A part the caller required is absent from the package."""

    def __init__(self, name: str):
        super().__init__(f"File not found in archive: {name}")
        self.name = name


class TemplateArchive:
    """In-memory view of a template package's parts."""

    def __init__(self, path: Path, entries: dict[str, bytes]):
        self.path = path
        self._entries = entries

    def list_files(self) -> list[str]:
        return list(self._entries)

    def has_file(self, name: str) -> bool:
        return name in self._entries

    def get_bytes(self, name: str) -> bytes:
        try:
            return self._entries[name]
        except KeyError:
            raise ArchiveEntryNotFoundError(name) from None

    def get_xml(self, name: str):
        """Parse a part and return its root element."""
        return etree.fromstring(self.get_bytes(name), _XML_PARSER)

    def get_optional_xml(self, name: str):
        """Like get_xml, but None when the part does not exist (e.g. optional .rels)."""
        if name not in self._entries:
            return None
        return self.get_xml(name)


def open_template(path: str | Path) -> TemplateArchive:
    """Load every non-directory entry of a template package.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the file is not a zip package.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Template file not found: {path}")
    if not zipfile.is_zipfile(path):
        raise ValueError(f"Not a PowerPoint package (expected a zip archive): {path}")

    with zipfile.ZipFile(path, "r") as zf:
        entries = {
            info.filename: zf.read(info.filename)
            for info in zf.infolist()
            if not info.is_dir()
        }

    logger.debug(f"Opened {path.name}: {len(entries)} parts")
    return TemplateArchive(path, entries)
