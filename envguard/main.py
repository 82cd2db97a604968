"""Command line entry point.

    envguard validate [--path DIR ...] [--filter REGEX ...] [--no-defaults] [--config FILE]
    envguard list     [--path DIR ...] [--filter REGEX ...] [--no-defaults] [--config FILE]

``validate`` checks the current process environment; exit status is 0 on
success, 1 on a schema violation and 2 when discovery fails.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envguard.core import (
    Config, EnvValidation, EnvValidationHook, FilesystemError, ModuleLoadError,
    ValidationError, load_config,
)
from envguard.core.schemas import describe_schema

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_DISCOVERY = 2


def setup_logging(config: Config):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=config.log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_validation(args) -> EnvValidation:
    config = load_config(args.config)
    if args.no_defaults:
        config.use_default_paths = False
        config.use_default_filters = False
    config.resolution_paths.extend(args.path or [])
    config.config_file_filters.extend(args.filter or [])
    if args.verbose:
        config.log_level = "DEBUG"
    setup_logging(config)
    return EnvValidation.from_config(config)


def cmd_validate(args, console: Console) -> int:
    """Validate os.environ against every discovered schema."""
    validation = build_validation(args)

    table = Table(title="Environment validation")
    table.add_column("Schema")
    table.add_column("Status")
    table.add_column("Error")

    def record(payload):
        error = getattr(payload.error, "message", None) or (str(payload.error) if payload.error else "")
        status = "[red]FAIL[/red]" if payload.error else "[green]OK[/green]"
        table.add_row(escape(describe_schema(payload.schema)), status, escape(error))

    validation.on(EnvValidationHook.VALIDATE_SCHEMA, record)

    try:
        validation.validate(os.environ)
    except ValidationError as e:
        console.print(table)
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return EXIT_INVALID
    except (FilesystemError, ModuleLoadError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return EXIT_DISCOVERY

    console.print(table)
    console.print(f"[green]✓[/green] Environment valid ({table.row_count} schema(s) checked)")
    return EXIT_OK


def cmd_list(args, console: Console) -> int:
    """List configuration modules and the schemas they export."""
    validation = build_validation(args)

    try:
        discovered = validation.resolve_schemas()
    except (FilesystemError, ModuleLoadError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return EXIT_DISCOVERY

    table = Table(title="Discovered schemas")
    table.add_column("#", justify="right")
    table.add_column("Schema")
    table.add_column("Source")
    for index, item in enumerate(discovered, 1):
        table.add_row(str(index), escape(describe_schema(item.schema)), escape(str(item.source)))
    console.print(table)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envguard",
        description="Validate environment variables against discovered configuration schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, handler, help_text in (
        ("validate", cmd_validate, "Validate the current environment"),
        ("list", cmd_list, "List discovered schemas"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--path", action="append", help="Resolution path to scan (repeatable)")
        sub.add_argument("--filter", action="append", help="Filename regex for config modules (repeatable)")
        sub.add_argument("--no-defaults", action="store_true", help="Drop the built-in paths and filter")
        sub.add_argument("--config", type=str, help="YAML settings file")
        sub.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
        sub.set_defaults(handler=handler)

    return parser


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    return args.handler(args, console or Console())


if __name__ == "__main__":
    sys.exit(main())
