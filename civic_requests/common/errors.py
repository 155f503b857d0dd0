"""Domain errors and failure typing."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class MalformedInputError(PipelineError):
    """Raised when an uploaded file is empty, unparseable, or has no rows."""

    error_code = "MALFORMED_INPUT"


class MissingFieldsError(PipelineError):
    """Raised when required canonical fields have no source column."""

    error_code = "MISSING_FIELDS"

    def __init__(self, missing: list[str], message: str | None = None) -> None:
        self.missing = list(missing)
        super().__init__(message or f"Please map all required fields. Missing: {', '.join(self.missing)}")


class RowValidationError(PipelineError):
    """Raised when a required value fails to parse; aborts the whole batch."""

    error_code = "ROW_VALIDATION"

    def __init__(self, row_number: int, value: object, field: str = "created_date") -> None:
        self.row_number = row_number
        self.value = value
        self.field = field
        super().__init__(f"Invalid '{field}' at row {row_number}. Could not parse value: {value}")


class AnalysisServiceError(PipelineError):
    """Raised when the bottleneck analysis service cannot produce a summary."""

    error_code = "ANALYSIS_SERVICE_ERROR"
