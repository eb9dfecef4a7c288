from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any, Literal, Tuple

from errors import DuplicateColumnError

ColumnType = Literal["number", "date", "text"]
SourceKind = Literal["csv", "json"]
ChartKind = Literal["bar", "line", "pie"]


class ColumnProfile(BaseModel):
    name: str
    inferred_type: ColumnType = "text"
    sample_values: Tuple[Any, ...] = Field(default_factory=tuple, description="Up to five non-empty raw values")
    null_count: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)


class Dataset(BaseModel):
    """Parsed table plus per-column profiles.

    ``rows`` holds every row of the upload, each aligned positionally with
    ``columns``.
    """

    name: str = Field(..., description="Original filename or dataset name")
    source_kind: SourceKind
    columns: Tuple[ColumnProfile, ...] = Field(default_factory=tuple)
    rows: Tuple[Tuple[Any, ...], ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, columns: Tuple[ColumnProfile, ...]) -> Tuple[ColumnProfile, ...]:
        seen = set()
        for col in columns:
            if col.name in seen:
                raise DuplicateColumnError(col.name)
            seen.add(col.name)
        return columns

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def column_index(self, name: str) -> Optional[int]:
        for i, col in enumerate(self.columns):
            if col.name == name:
                return i
        return None

    def column(self, name: str) -> Optional[ColumnProfile]:
        idx = self.column_index(name)
        return None if idx is None else self.columns[idx]

    def values(self, name: str) -> List[Any]:
        idx = self.column_index(name)
        if idx is None:
            return []
        return [row[idx] for row in self.rows]

    def records(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        names = self.column_names
        rows = self.rows if limit is None else self.rows[:limit]
        return [dict(zip(names, row)) for row in rows]


class ChartRequest(BaseModel):
    kind: ChartKind = "bar"
    value_column: Optional[str] = None
    group_column: Optional[str] = None


class ChartPoint(BaseModel):
    label: str
    value: float
    color: Optional[str] = None


class ChartResponse(BaseModel):
    kind: ChartKind
    points: List[ChartPoint]


class ColumnStats(BaseModel):
    count: int
    mean: float
    median: float
    min: float
    max: float


class DatasetSummary(BaseModel):
    name: str
    source_kind: SourceKind
    row_count: int
    column_count: int
    columns: List[ColumnProfile]
    sample_rows: List[Dict[str, Any]]
    stats: Dict[str, ColumnStats] = Field(default_factory=dict)


class UploadResponse(BaseModel):
    dataset_id: str
    name: str
    source_kind: SourceKind
    row_count: int
    column_count: int
    columns: List[ColumnProfile]
    size: int = Field(..., description="Uploaded file size in bytes")
    uploaded_at: datetime


class UploadPlaceholder(BaseModel):
    """Stub card for spreadsheet uploads, which are acknowledged but not parsed."""

    kind: Literal["excel"] = "excel"
    filename: str
    size: int
    columns: List[str]
    uploaded_at: datetime


class DatasetListItem(BaseModel):
    dataset_id: str
    name: str
    row_count: int
    column_count: int
