"""Turn raw upload content into a header list plus positional rows.

Both parsers return a ``ParsedTable``; rows are lists aligned to
``headers`` so the profiler and the dataset never see per-row dicts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from errors import EmptyDatasetError, EmptyInputError, UnsupportedShapeError

logger = logging.getLogger(__name__)


@dataclass
class ParsedTable:
    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)


def split_csv_line(line: str) -> List[str]:
    """Split one line on commas that are outside double quotes.

    Quote characters only toggle the quoted state and are dropped from the
    field; ``""`` is not unescaped to a literal quote.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return [f.replace('"', "") for f in fields]


def parse_delimited(text: str) -> ParsedTable:
    # only "\n" ends a record; other line-break characters stay inside cells
    lines = [ln for ln in text.split("\n") if ln.strip()]
    if not lines:
        raise EmptyInputError()

    headers = split_csv_line(lines[0])
    width = len(headers)
    rows: List[List[Any]] = []
    for ln in lines[1:]:
        values = split_csv_line(ln)[:width]
        # short rows are padded, long rows lose their trailing fields
        if len(values) < width:
            values.extend([""] * (width - len(values)))
        rows.append(values)

    logger.debug("Parsed delimited text: %d columns, %d rows", width, len(rows))
    return ParsedTable(headers=headers, rows=rows)


def normalize_json(value: Any) -> ParsedTable:
    """Flatten a decoded JSON document into a table.

    Accepted shapes, in order: a list of records, an object whose ``data``
    field is a list, or a single object. Headers come from the first record
    only; keys that appear only in later records are not kept.
    """
    if isinstance(value, list):
        records = value
    elif isinstance(value, dict) and isinstance(value.get("data"), list):
        records = value["data"]
    elif isinstance(value, dict):
        records = [value]
    else:
        raise UnsupportedShapeError()

    if not records:
        raise EmptyDatasetError()

    first = records[0]
    if not isinstance(first, dict):
        raise UnsupportedShapeError("Unsupported JSON structure: rows must be objects")

    headers = [str(k) for k in first.keys()]
    rows: List[List[Any]] = []
    for record in records:
        if not isinstance(record, dict):
            raise UnsupportedShapeError("Unsupported JSON structure: rows must be objects")
        rows.append([record.get(h) for h in headers])

    logger.debug("Normalized JSON: %d columns, %d rows", len(headers), len(rows))
    return ParsedTable(headers=headers, rows=rows)
