#!/usr/bin/env python3
"""Main entry point for the updateinfo parser."""

import argparse
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from .config import SECURITY_TYPE, build_settings, load_config
from .errors import UpdateInfoError
from .pipeline import run


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    # stdout carries the rendered updates
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


@contextmanager
def open_output(output: Optional[str]) -> Iterator[TextIO]:
    """Yield the output sink, a file when a path is given and stdout otherwise."""
    if not output:
        yield sys.stdout
        sys.stdout.flush()
        return

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yield f


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="updateinfo-parser",
        description="A simple CLI to parse updateinfo XML files",
    )
    parser.add_argument(
        "updateinfo",
        help="Path or URL of the updateinfo XML file (may be gzip-compressed)",
    )
    parser.add_argument(
        "-b",
        "--beforeDate",
        help="Filter updates released before the given date (format: 'YYYY-MM-DD'). Defaults to current date",
    )
    parser.add_argument(
        "-a",
        "--afterDate",
        help="Filter updates released after the given date (format: 'YYYY-MM-DD'). Defaults to '2006-01-02'",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file. Defaults to stdout",
    )
    parser.add_argument(
        "-t",
        "--template",
        help="Provides a custom update template file (Jinja2)",
    )
    parser.add_argument(
        "-p",
        "--packages",
        help=(
            "Package file list to filter updates modifying any of listed packages. "
            "Blank lines and '#' comments are ignored; a file without names matches every update"
        ),
    )
    parser.add_argument(
        "-s",
        "--security",
        action="store_true",
        default=None,
        help="Match only security updates",
    )
    parser.add_argument(
        "--type",
        help="Match only updates of the given type (e.g. 'recommended')",
    )
    parser.add_argument(
        "--config",
        help="Path to config YAML file providing defaults for these options",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write log messages to this file",
    )
    return parser


def _pick(flag, config: dict, key: str, default=None):
    """Command-line value first, then config file, then default."""
    if flag is not None:
        return flag
    return config.get(key, default)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else {}
    except UpdateInfoError as e:
        logging.error(f"Configuration error: {e}")
        return 1

    setup_logging(
        verbose=bool(_pick(args.verbose, config, "verbose", False)),
        log_file=_pick(args.log_file, config, "log_file"),
    )

    update_type = _pick(args.type, config, "type", "")
    if _pick(args.security, config, "security", False):
        update_type = SECURITY_TYPE

    try:
        settings = build_settings(
            args.updateinfo,
            before=_pick(args.beforeDate, config, "before_date"),
            after=_pick(args.afterDate, config, "after_date"),
            packages_file=_pick(args.packages, config, "packages"),
            template_file=_pick(args.template, config, "template"),
            output=_pick(args.output, config, "output"),
            update_type=update_type,
        )
        with open_output(settings.output) as sink:
            run(settings.source, settings.filters, settings.template, sink)
    except UpdateInfoError as e:
        logging.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130
    except Exception as e:
        logging.exception(f"Error during execution: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
