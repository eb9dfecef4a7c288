from typing import Iterable, Optional


class IngestionError(Exception):
    """Base class for failures that abort an upload."""

    code = "INGESTION_ERROR"
    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class EmptyInputError(IngestionError):
    """Raised when a delimited file has no non-blank lines."""

    code = "EMPTY_INPUT"

    def __init__(self, message: str = "Empty CSV file"):
        super().__init__(message)


class EmptyDatasetError(IngestionError):
    """Raised when a JSON document resolves to zero rows."""

    code = "EMPTY_DATASET"

    def __init__(self, message: str = "No data found in JSON file"):
        super().__init__(message)


class UnsupportedShapeError(IngestionError):
    code = "UNSUPPORTED_SHAPE"

    def __init__(self, message: str = "Unsupported JSON structure"):
        super().__init__(message)


class UnsupportedFormatError(IngestionError):
    code = "UNSUPPORTED_FORMAT"
    status_code = 415

    def __init__(self, filename: str, allowed: Iterable[str] = ("csv", "json")):
        self.filename = filename
        self.allowed = tuple(allowed)
        super().__init__(
            f"Unsupported file format for '{filename}'. Please upload one of: {', '.join(self.allowed)}"
        )


class MalformedRecordError(IngestionError):
    """Raised when the payload cannot be decoded at all."""

    code = "MALFORMED_RECORD"


class DuplicateColumnError(IngestionError):
    code = "DUPLICATE_COLUMN"

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Duplicate column name: '{column}'")
