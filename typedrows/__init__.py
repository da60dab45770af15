"""
typedrows — plain delimited text -> list of typed dict rows (stdlib-only).

Contract (v1):
- Input is split into lines; blank / whitespace-only lines are skipped.
- First kept line is the header: split on the separator, each name stripped.
  Names are taken as-is (blank and duplicate names allowed, later wins).
- Every later kept line is a data row: split on the separator, each field
  stripped, paired with the header by position.
    fewer fields than names -> trailing keys absent
    more fields than names  -> extras dropped
- Each field becomes exactly one of:
    Integer(int)  "-?[0-9]+" within the signed 64-bit range
    Float(float)  "-?" + digits with exactly one "." (digits on one side at least)
    Text(str)     anything else, verbatim (including "")
- No quoting, no escapes, no multi-line fields.
- The default dialect never raises. ParseDialect(strict=True) turns ragged
  rows and blank/duplicate header names into CsvParseError.

API:
- parse_csv(text, separator, *, dialect=DEFAULT) -> list of rows
- parse_file(path, separator, *, dialect=DEFAULT, encoding="utf-8") -> list of rows
- parse_bytes(data, separator, *, dialect=DEFAULT, encoding="utf-8") -> list of rows
- parse_header(line, separator, ...) / parse_line(line, separator, fieldnames, ...)
- infer_value(raw) -> Integer | Float | Text
- to_python(row) -> dict of unwrapped values

Python: 3.10+
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Mapping, Sequence, Union

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


# ----------------------------
# Exceptions
# ----------------------------

class CsvParseError(ValueError):
    """Raised by strict mode (and file decoding) with line/field context."""

    def __init__(
        self,
        *,
        row: int,
        col: int,
        column: str,
        value: str,
        reason: str,
    ) -> None:
        msg = (
            "CsvParseError(" +
            f"row={row}, col={col}, column={column!r}, value={value!r}): {reason}"
        )
        super().__init__(msg)
        self.row = row          # 1-based physical line number (0 when not tied to a line)
        self.col = col          # 0-based field index, -1 for whole-line problems
        self.column = column    # column name, "" when unknown
        self.value = value      # raw field or line text
        self.reason = reason


# ----------------------------
# Values
# ----------------------------

@dataclass(frozen=True)
class Integer:
    value: int
    kind: ClassVar[str] = "integer"


@dataclass(frozen=True)
class Float:
    value: float
    kind: ClassVar[str] = "float"


@dataclass(frozen=True)
class Text:
    value: str
    kind: ClassVar[str] = "text"


CsvValue = Union[Integer, Float, Text]
Row = Dict[str, CsvValue]

_INT_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE = re.compile(r"-?(?:[0-9]+\.[0-9]*|\.[0-9]+)")
_I64_MIN = -(2 ** 63)
_I64_MAX = 2 ** 63 - 1
_I64_DIGITS = 19
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def infer_value(raw: str) -> CsvValue:
    """
    Type one field: Integer, then Float, else Text.
    The field is stripped first; the decision depends on nothing but `raw`.
    """
    s = raw.strip()
    if _INT_RE.fullmatch(s):
        # int() refuses very long digit strings; anything this long is out of range anyway
        if len(s.lstrip("-").lstrip("0")) > _I64_DIGITS:
            return Text(s)
        n = int(s)
        if _I64_MIN <= n <= _I64_MAX:
            return Integer(n)
        # out of range whole numbers have no decimal point, so they stay text
        return Text(s)
    if _FLOAT_RE.fullmatch(s):
        return Float(float(s))
    return Text(s)


def to_python(row: Mapping[str, CsvValue]) -> Dict[str, Union[int, float, str]]:
    """Unwrap every value of a parsed row to its plain payload."""
    return {k: v.value for k, v in row.items()}


# ----------------------------
# Dialect
# ----------------------------

@dataclass(frozen=True)
class ParseDialect:
    # all switches off == the lenient default contract
    name_blank_headers: bool = False
    keep_extra_fields: bool = False
    skip_empty_fields: bool = False
    strict: bool = False
    unnamed_prefix: str = "__"

    def unnamed(self, col: int) -> str:
        return f"{self.unnamed_prefix}{col + 1}"


DEFAULT = ParseDialect()


def _check_separator(separator: str) -> None:
    if len(separator) != 1:
        raise ValueError(f"separator must be a single character, got {separator!r}")


# ----------------------------
# Header / line parsing
# ----------------------------

def parse_header(
    line: str,
    separator: str,
    dialect: ParseDialect = DEFAULT,
    *,
    row: int = 1,
) -> List[str]:
    """Split the header line into stripped column names."""
    _check_separator(separator)
    names = [cell.strip() for cell in line.split(separator)]

    if dialect.strict and not dialect.name_blank_headers:
        for j, name in enumerate(names):
            if not name:
                raise CsvParseError(
                    row=row, col=j, column="", value=line,
                    reason="Blank header name"
                )

    if dialect.name_blank_headers:
        names = [name if name else dialect.unnamed(j) for j, name in enumerate(names)]

    # generated names can collide with given ones, so check after renaming
    if dialect.strict:
        seen = set()
        for j, name in enumerate(names):
            if name in seen:
                raise CsvParseError(
                    row=row, col=j, column=name, value=line,
                    reason=f"Duplicate header name: {name!r}"
                )
            seen.add(name)

    return names


def parse_line(
    line: str,
    separator: str,
    fieldnames: Sequence[str],
    dialect: ParseDialect = DEFAULT,
    *,
    row: int = 0,
) -> Row:
    """
    Turn one data line into a row keyed by `fieldnames` (paired by position).
    `row` is only used for error context and log messages.
    """
    _check_separator(separator)
    fields = line.split(separator)

    if len(fields) != len(fieldnames):
        if dialect.strict:
            raise CsvParseError(
                row=row, col=-1, column="", value=line,
                reason=f"Expected {len(fieldnames)} fields, got {len(fields)}"
            )
        logger.debug("line %d: %d fields for %d columns", row, len(fields), len(fieldnames))

    out: Row = {}
    for j, cell in enumerate(fields):
        if j < len(fieldnames):
            key = fieldnames[j]
        elif dialect.keep_extra_fields:
            key = dialect.unnamed(j)
        else:
            break

        raw = cell.strip()
        if raw == "" and dialect.skip_empty_fields:
            continue
        out[key] = infer_value(raw)
    return out


# ----------------------------
# Entry points
# ----------------------------

def parse_csv(
    text: str,
    separator: str,
    *,
    dialect: ParseDialect = DEFAULT,
) -> List[Row]:
    """Parse a whole text blob; one row per non-blank line after the header."""
    _check_separator(separator)

    fieldnames: List[str] | None = None
    rows: List[Row] = []

    # only \n, \r\n and \r end a line; NEL, U+2028 and friends stay inside fields
    for lineno, line in enumerate(_LINE_BREAK_RE.split(text), start=1):
        if not line.strip():
            continue
        if fieldnames is None:
            fieldnames = parse_header(line, separator, dialect, row=lineno)
            continue
        rows.append(parse_line(line, separator, fieldnames, dialect, row=lineno))

    logger.debug(
        "parsed %d rows over %d columns",
        len(rows), 0 if fieldnames is None else len(fieldnames),
    )
    return rows


def parse_file(
    path: Union[str, os.PathLike],
    separator: str,
    *,
    dialect: ParseDialect = DEFAULT,
    encoding: str = "utf-8",
) -> List[Row]:
    """Read `path` fully and hand its contents to parse_csv."""
    with open(path, "rb") as f:
        data = f.read()
    return parse_bytes(data, separator, dialect=dialect, encoding=encoding, source=os.fspath(path))


def parse_bytes(
    data: bytes,
    separator: str,
    *,
    dialect: ParseDialect = DEFAULT,
    encoding: str = "utf-8",
    source: str = "<bytes>",
) -> List[Row]:
    """Decode raw input with `encoding` and parse it; decoding failures become CsvParseError."""
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        raise CsvParseError(
            row=0, col=-1, column="", value=source,
            reason=f"Cannot decode input as {encoding}: {e}"
        ) from e
    return parse_csv(text, separator, dialect=dialect)


__all__ = [
    "CsvParseError",
    "CsvValue",
    "Integer",
    "Float",
    "Text",
    "Row",
    "ParseDialect",
    "DEFAULT",
    "__version__",
    "infer_value",
    "parse_header",
    "parse_line",
    "parse_csv",
    "parse_file",
    "parse_bytes",
    "to_python",
]
