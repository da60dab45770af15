"""Command-line glue: parse a delimited file and print the typed rows as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from typedrows import (
    CsvParseError,
    ParseDialect,
    Row,
    parse_bytes,
    parse_file,
    to_python,
)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class LabeledFormatter(logging.Formatter):
    """Prefix every message with a short level label (INFO, WARN, ERROR)."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the package logger."""
    logger = logging.getLogger("typedrows")
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    # repeated main() calls must not stack handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Undo setup_logging. Mainly for tests."""
    logger = logging.getLogger("typedrows")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _encode_row(row: Row) -> Dict[str, Any]:
    return {k: {"type": v.kind, "value": v.value} for k, v in row.items()}


def _parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="typedrows",
        description="Parse delimited text into typed rows and print them as JSON",
    )
    p.add_argument("path", help="input file, or '-' for stdin")
    p.add_argument("-s", "--separator", default=",", help="field separator (default: ',')")
    p.add_argument("--encoding", default="utf-8", help="input encoding (file or stdin)")
    p.add_argument("--strict", action="store_true", help="reject ragged rows and bad header names")
    p.add_argument("--keep-extra", action="store_true", help="keep fields past the header as __N")
    p.add_argument("--skip-empty", action="store_true", help="leave empty fields out of rows")
    p.add_argument("--name-blank", action="store_true", help="name blank headers __N")
    p.add_argument("--plain", action="store_true", help="print bare values instead of typed objects")
    p.add_argument("--debug", action="store_true", help="enable debug logging")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(args.debug)

    if len(args.separator) != 1:
        logger.error(f"separator must be a single character, got {args.separator!r}")
        return EXIT_FAILURE

    dialect = ParseDialect(
        name_blank_headers=args.name_blank,
        keep_extra_fields=args.keep_extra,
        skip_empty_fields=args.skip_empty,
        strict=args.strict,
    )

    try:
        if args.path == "-":
            rows = parse_bytes(
                sys.stdin.buffer.read(), args.separator,
                dialect=dialect, encoding=args.encoding, source="<stdin>",
            )
        else:
            rows = parse_file(args.path, args.separator, dialect=dialect, encoding=args.encoding)
    except OSError as e:
        logger.error(f"cannot read {args.path}: {e}")
        return EXIT_FAILURE
    except CsvParseError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    logger.debug(f"{len(rows)} rows from {args.path}")
    encode = to_python if args.plain else _encode_row
    json.dump([encode(r) for r in rows], sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
