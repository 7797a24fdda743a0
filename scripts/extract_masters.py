#!/usr/bin/env python3
"""Extract resolved slide masters and layouts from a PowerPoint template.

Usage:
    # Everything, into output/:
    python scripts/extract_masters.py templates/brand.potx -o output/

    # List layouts only:
    python scripts/extract_masters.py templates/brand.pptx --list

    # Selected layouts (by number or name fragment):
    python scripts/extract_masters.py templates/brand.pptx --layout "Title Slide" --layouts 3,5
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.generators.report import generate_report
from src.generators.theme_json import generate_theme_json
from src.parsers.archive import open_template
from src.pptx_engine.master_extractor import extract_masters
from src.pptx_engine.preview import save_preview
from src.schemas.config import ExtractionConfig
from src.utils.file_utils import copy_media, ensure_directory, save_json, validate_template_path


def build_config(args) -> ExtractionConfig:
    config = ExtractionConfig.from_yaml(args.config) if args.config else ExtractionConfig()

    filters = list(args.layout or [])
    if args.layouts:
        filters += [token.strip() for token in args.layouts.split(",") if token.strip()]

    updates = {}
    if filters:
        updates["layouts"] = filters
    if args.output is not None:
        updates["output_dir"] = args.output
    if args.no_preview:
        updates["preview"] = False
    if args.no_report:
        updates["report"] = False
    return config.model_copy(update=updates)


def main():
    parser = argparse.ArgumentParser(description="Extract slide masters and layouts from a .pptx/.potx template")
    parser.add_argument("input", type=Path, help="Template file (.pptx or .potx)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output directory (default: output/)")
    parser.add_argument("--list", action="store_true",
                        help="List layouts and exit")
    parser.add_argument("--layout", action="append",
                        help="Layout to extract, by number or name fragment (repeatable)")
    parser.add_argument("--layouts", type=str,
                        help="Comma-separated layout numbers or name fragments")
    parser.add_argument("--config", type=Path,
                        help="YAML file with extraction settings")
    parser.add_argument("--no-preview", action="store_true",
                        help="Skip preview.pptx")
    parser.add_argument("--no-report", action="store_true",
                        help="Skip report.md")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        template = validate_template_path(args.input)
        config = build_config(args)

        if args.list:
            result = extract_masters(template, config.model_copy(update={"layouts": []}))
            for i, layout in enumerate(result.layouts, start=1):
                print(f"{i}. {layout.name}")
            return

        print(f"Extracting masters from: {template.name}")
        result = extract_masters(template, config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output_dir = ensure_directory(config.output_dir)
    media_dir = output_dir / "media"

    save_json(
        generate_theme_json(result.theme_colors, result.theme_fonts, result.dimensions, result.layouts),
        output_dir / "theme.json",
    )
    result.to_yaml(output_dir / "masters.yaml")

    if result.media_files:
        copy_media(open_template(template), result.media_files, media_dir)

    if config.report:
        (output_dir / "report.md").write_text(generate_report(result), encoding="utf-8")

    if config.preview:
        save_preview(result, output_dir / "preview.pptx", media_dir)

    print(f"\nOutput saved to: {output_dir}")
    print(f"  Layouts: {len(result.layouts)}")
    print(f"  Theme colors: {len(result.theme_colors)}")
    print(f"  Fonts: {result.theme_fonts.heading or 'Calibri'} / {result.theme_fonts.body or 'Calibri'}")
    print(f"  Media files: {len(result.media_files)}")
    print(f"  Warnings: {len(result.warnings)}")
    for name in ("theme.json", "masters.yaml", "report.md", "preview.pptx"):
        if (output_dir / name).exists():
            print(f"  - {name}")


if __name__ == "__main__":
    main()
