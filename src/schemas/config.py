"""Extraction settings, loadable from YAML and overridable from the CLI."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class ExtractionConfig(BaseModel):
    layouts: list[str] = Field(
        default_factory=list,
        description="Layout filters: 1-based numbers or case-insensitive name fragments. Empty = all.",
    )
    output_dir: Path = Path("output")
    preview: bool = Field(default=True, description="Write preview.pptx")
    report: bool = Field(default=True, description="Write report.md")
    footer_zone_ratio: float = Field(
        default=0.9, gt=0, le=1,
        description="Text objects at or below this fraction of slide height count as footer text",
    )
    slide_number_height_factor: float = Field(
        default=2.5, gt=0,
        description="Minimum slide-number box height as a multiple of its font size",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ExtractionConfig":
        """Load extraction settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)
