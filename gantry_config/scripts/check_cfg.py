#!/usr/bin/env python3
"""Validate printer config files.

Parses each file, prints a one-line summary per section, and reports the
first error of a broken file as ``file:line:column: message`` followed by
the offending line with a caret.

Usage::

    python -m gantry_config.scripts.check_cfg printer.cfg
    python -m gantry_config.scripts.check_cfg a.cfg b.cfg --log-level DEBUG
    python -m gantry_config.scripts.check_cfg printer.cfg --dump

Exit status is 0 when every file parses, 1 otherwise.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from gantry_config.cfg.document import ConfigDocument
from gantry_config.cfg.errors import ConfigError, ConfigSyntaxError
from gantry_config.cfg.writer import format_document
from gantry_config.host.loader import load_printer_config
from gantry_config.utils.logging_config import get_logger, log_context, setup_logging

logger = get_logger(__name__)


def summarize(doc: ConfigDocument) -> list[str]:
    """One line per section: header, option count, value kinds."""
    lines = []
    for section in doc.sections():
        kinds = sorted({kv.value.kind for kv in section.items})
        lines.append(
            f"[{section.name}] {len(section)} option(s)"
            + (f" ({', '.join(kinds)})" if kinds else "")
        )
    return lines


def check_file(path: str, dump: bool = False) -> bool:
    """Parse one file and print the result.  Returns ``True`` on success."""
    with log_context(file=path):
        try:
            doc = load_printer_config(path)
        except FileNotFoundError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            return False
        except ConfigSyntaxError as exc:
            print(str(exc), file=sys.stderr)
            print(exc.excerpt(), file=sys.stderr)
            return False
        except ConfigError as exc:
            print(str(exc), file=sys.stderr)
            return False

        if dump:
            try:
                print(format_document(doc), end="")
            except ConfigError as exc:
                print(f"{path}: {exc}", file=sys.stderr)
                return False
        else:
            print(f"{path}: OK, {len(doc)} section(s)")
            for line in summarize(doc):
                print(f"  {line}")
        logger.debug("Checked %s", path)
        return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate printer config files.",
    )
    parser.add_argument("files", nargs="+", help="Printer config files (.cfg)")
    parser.add_argument(
        "--dump", action="store_true",
        help="Print the normalized config instead of a summary",
    )
    parser.add_argument("--log-level", default="WARNING", help="Root log level")
    parser.add_argument(
        "--json-log", action="store_true", help="Emit JSON log lines",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        log_level=args.log_level,
        json=args.json_log,
        context={"app": "check_cfg"},
    )

    ok = True
    for path in args.files:
        ok = check_file(path, dump=args.dump) and ok
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
