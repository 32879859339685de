"""Literal-value extraction from ``INSERT INTO ... VALUES`` dumps.

This is not a SQL engine. It understands one statement shape::

    INSERT INTO teams (id, name, gender) VALUES
    (1, 'St. John\\'s Prep', 'M'),
    (2, "Xaverian", NULL);

and turns each tuple into a dict keyed by the declared columns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator

from .logging import get_logger

logger = get_logger(__name__)

_HEADER_RE = re.compile(
    r"INSERT\s+INTO\s+[`\"]?(?P<table>[\w.]+)[`\"]?\s*\((?P<columns>[^)]*)\)\s*VALUES",
    re.IGNORECASE,
)
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")
_QUOTED_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


def coerce_value(raw: str, quoted: bool) -> Any:
    if quoted:
        return raw
    if raw == "":
        return None
    lowered = raw.lower()
    if lowered == "null":
        return None
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    return raw


def split_tuples(text: str) -> Iterator[list[Any]]:
    """Yield the coerced values of every ``( ... )`` group in ``text``.

    Scanning stops at the first ``;`` outside a tuple, which ends the statement.
    """
    values: list[Any] = []
    chars: list[str] = []
    quoted = False
    in_tuple = False
    quote_char = ""
    escaped = False
    idx = 0
    length = len(text)

    def flush(force: bool) -> None:
        nonlocal chars, quoted
        if force or chars or quoted:
            values.append(coerce_value("".join(chars), quoted))
        chars = []
        quoted = False

    while idx < length:
        char = text[idx]
        idx += 1

        if not in_tuple:
            if char == ";":
                return
            if char == "(":
                in_tuple = True
                values = []
                chars = []
                quoted = False
            continue

        if escaped:
            chars.append(_QUOTED_ESCAPES.get(char, char) if quote_char else char)
            escaped = False
            continue

        if char == "\\":
            escaped = True
            continue

        if quote_char:
            if char == quote_char:
                if idx < length and text[idx] == quote_char:
                    chars.append(char)
                    idx += 1
                else:
                    quote_char = ""
                continue
            chars.append(char)
            continue

        if char in ("'", '"'):
            quote_char = char
            quoted = True
            continue

        if char == ",":
            flush(force=True)
            continue

        if char == ")":
            flush(force=False)
            in_tuple = False
            yield values
            continue

        if not char.isspace():
            chars.append(char)


@dataclass(slots=True)
class SqlInsertParser:
    """Stateful parser that counts what it keeps and what it drops."""

    table: str | None = None
    rows_parsed: int = 0
    rows_dropped: int = 0
    statements: int = 0
    tables_seen: set[str] = field(default_factory=set)

    def parse(self, sql: str) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        columns: list[str] = []
        buffer: list[str] = []
        in_values = False
        skip_statement = False

        for line in sql.splitlines():
            stripped = line.strip()

            if not in_values:
                if not stripped or stripped.startswith("--"):
                    continue
                match = _HEADER_RE.search(stripped)
                if match is None:
                    continue
                table = match.group("table").split(".")[-1]
                self.tables_seen.add(table)
                self.statements += 1
                columns = [self._clean_column(c) for c in match.group("columns").split(",")]
                skip_statement = self.table is not None and table.lower() != self.table.lower()
                buffer = [stripped[match.end():]]
                in_values = True
            elif stripped.startswith("--"):
                continue
            else:
                buffer.append(line)

            if stripped.endswith(";"):
                if not skip_statement:
                    results.extend(self._rows(columns, "\n".join(buffer)))
                buffer = []
                in_values = False

        if in_values and not skip_statement:
            # Unterminated trailing statement: keep whatever tuples are complete.
            results.extend(self._rows(columns, "\n".join(buffer)))

        logger.debug(
            "Parsed {} rows ({} dropped) from {} statement(s)",
            self.rows_parsed,
            self.rows_dropped,
            self.statements,
        )
        return results

    def _rows(self, columns: list[str], values_text: str) -> Iterator[dict[str, Any]]:
        for values in split_tuples(values_text):
            if len(values) != len(columns):
                self.rows_dropped += 1
                logger.debug(
                    "Dropping row with {} values for {} columns: {!r}",
                    len(values),
                    len(columns),
                    values[:3],
                )
                continue
            self.rows_parsed += 1
            yield dict(zip(columns, values))

    @staticmethod
    def _clean_column(raw: str) -> str:
        return raw.strip().strip("`\"'[]").strip()


def parse_inserts(sql: str, table: str | None = None) -> list[dict[str, Any]]:
    return SqlInsertParser(table=table).parse(sql)
