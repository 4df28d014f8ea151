"""
Command-line entry point for mythic-catalog.
Usage: python -m mythic_catalog [--mobs-path PATH] {status,list,validate} ...
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from . import __version__
from .catalog import MythicCatalogService
from .catalog.models import Category
from .settings import AppSettings
from .utils.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mythic_catalog", description="Inspect MythicMobs configuration catalogs."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--mobs-path", type=Path, help="MythicMobs Mobs directory")
    parser.add_argument("--settings-file", type=Path, help="INI settings file")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="show configuration and cache status")

    list_parser = commands.add_parser("list", help="export a whole catalog as JSON")
    list_parser.add_argument(
        "category", choices=[category.value for category in Category]
    )

    validate_parser = commands.add_parser("validate", help="validate a YAML file")
    validate_parser.add_argument("file", type=Path)
    return parser


def _print_json(value: object) -> None:
    sys.stdout.write(orjson.dumps(value, option=orjson.OPT_INDENT_2).decode("utf-8"))
    sys.stdout.write("\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main command-line entry point."""
    args = build_parser().parse_args(argv)
    logger = logging.getLogger(f"{__name__}.main")

    settings = AppSettings(settings_file=args.settings_file)
    setup_logging(settings)

    validation = settings.validate()
    for warning in validation.warnings:
        logger.warning(f"  {warning}")

    if args.command == "validate":
        try:
            text = args.file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {args.file}: {e}")
            return 1
        service = MythicCatalogService(mobs_path=args.mobs_path, settings=settings)
        report = service.validator.validate_entity_document(text)
        _print_json(
            {
                "valid": report.valid,
                "error": report.error,
                "line": report.line,
                "column": report.column,
                "warnings": report.warnings,
            }
        )
        return 0 if report.valid else 1

    service = MythicCatalogService(mobs_path=args.mobs_path, settings=settings)
    if not service.is_configured():
        logger.error(f"MythicMobs path not configured: {service.get_config_path() or '<unset>'}")

    if args.command == "status":
        # Touch the mob catalog so the status reflects a real scan
        service.get_all_mobs()
        _print_json(service.get_status().to_dict())
        return 0 if service.is_configured() else 1

    sys.stdout.write(service.export_json(Category(args.category)).decode("utf-8"))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
