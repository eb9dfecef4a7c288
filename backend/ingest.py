"""Upload entry point: raw bytes or text in, profiled ``Dataset`` out.

Failures are terminal for the upload and raised as ``IngestionError``
subclasses; a partially built dataset is never returned.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from config import Settings
from errors import DuplicateColumnError, MalformedRecordError, UnsupportedFormatError
from parsers import ParsedTable, normalize_json, parse_delimited
from profiler import parse_number, profile_column
from schemas import ColumnStats, Dataset, DatasetSummary

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {".csv"}
CSV_MIME_TYPES = {"text/csv"}
JSON_EXTENSIONS = {".json"}
JSON_MIME_TYPES = {"application/json"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}
EXCEL_MIME_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
ALLOWED_FORMATS = ("csv", "json")


def detect_format(filename: str, mime_type: Optional[str] = None) -> Optional[str]:
    """Return ``"csv"``, ``"json"``, ``"excel"`` or None for unknown files."""
    _, ext = os.path.splitext((filename or "").lower())
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime in CSV_MIME_TYPES or ext in CSV_EXTENSIONS:
        return "csv"
    if mime in JSON_MIME_TYPES or ext in JSON_EXTENSIONS:
        return "json"
    if mime in EXCEL_MIME_TYPES or ext in EXCEL_EXTENSIONS:
        return "excel"
    return None


def decode_content(raw: Union[bytes, str]) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedRecordError(f"File is not valid UTF-8 text: {e}") from e


def build_dataset(name: str, source_kind: str, table: ParsedTable, settings: Optional[Settings] = None) -> Dataset:
    """Profile every column of ``table`` and wrap it in a Dataset."""
    settings = settings or Settings()
    seen = set()
    for header in table.headers:
        if header in seen:
            raise DuplicateColumnError(header)
        seen.add(header)

    columns = []
    for i, header in enumerate(table.headers):
        values = [row[i] for row in table.rows]
        columns.append(
            profile_column(
                header,
                values,
                sample_size=settings.profile_sample_size,
                sample_values=settings.profile_sample_values,
                threshold=settings.profile_type_threshold,
            )
        )
    return Dataset(name=name, source_kind=source_kind, columns=columns, rows=table.rows)


def ingest(
    filename: str,
    mime_type: Optional[str],
    content: Union[bytes, str],
    settings: Optional[Settings] = None,
) -> Dataset:
    fmt = detect_format(filename, mime_type)
    if fmt not in ALLOWED_FORMATS:
        logger.warning("Rejected upload %r (mime=%s, detected=%s)", filename, mime_type, fmt)
        raise UnsupportedFormatError(filename, ALLOWED_FORMATS)

    text = decode_content(content)
    if fmt == "csv":
        table = parse_delimited(text)
    else:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedRecordError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
        table = normalize_json(document)

    dataset = build_dataset(filename, fmt, table, settings)
    logger.info(
        "Ingested %r as %s: %d rows x %d columns",
        filename, fmt, dataset.row_count, dataset.column_count,
    )
    return dataset


def describe_upload(filename: str, size: int, mime_type: Optional[str] = None) -> Dict[str, Any]:
    """Placeholder metadata for spreadsheet uploads, which are not parsed."""
    if detect_format(filename, mime_type) != "excel":
        raise UnsupportedFormatError(filename, ("xlsx", "xls"))
    return {
        "kind": "excel",
        "filename": filename,
        "size": size,
        "columns": ["A", "B", "C", "D", "E"],
    }


def column_stats(values: List[Any]) -> Optional[ColumnStats]:
    numbers = [n for n in (parse_number(v) for v in values) if n is not None]
    if not numbers:
        return None
    series = pd.Series(numbers, dtype="float64").sort_values(ignore_index=True)
    return ColumnStats(
        count=int(series.size),
        mean=float(series.mean()),
        # upper-middle element for even counts
        median=float(series.iloc[series.size // 2]),
        min=float(series.iloc[0]),
        max=float(series.iloc[-1]),
    )


def summarize(dataset: Dataset, sample_rows: int = 10) -> DatasetSummary:
    """Serializable view of a dataset for prompt builders and API clients."""
    stats: Dict[str, ColumnStats] = {}
    for col in dataset.columns:
        if col.inferred_type != "number":
            continue
        result = column_stats(dataset.values(col.name))
        if result is not None:
            stats[col.name] = result
    return DatasetSummary(
        name=dataset.name,
        source_kind=dataset.source_kind,
        row_count=dataset.row_count,
        column_count=dataset.column_count,
        columns=list(dataset.columns),
        sample_rows=dataset.records(limit=sample_rows),
        stats=stats,
    )
