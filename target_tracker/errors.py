"""Central error types used across the application."""

from __future__ import annotations


class TrackerError(RuntimeError):
    """Base error for recoverable tracker failures."""


class NotFoundError(TrackerError):
    """Raised when a target achievement identifier does not exist."""

    kind = "Target record"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"{self.kind} not found: {record_id}")
        self.record_id = record_id


class RunnerNotFoundError(NotFoundError):
    """Raised when a runner identifier does not exist."""

    kind = "Runner"


class DataFetchError(TrackerError):
    """Raised when a storage or network collaborator fails to return data."""


class RecordFormatError(TrackerError):
    """Raised when an incoming record lacks a required field."""


class ExcelFormatError(TrackerError):
    """Raised when the Excel workbook structure or required columns are invalid."""


class MalformedDateWarning(UserWarning):
    """Data-quality warning for records whose date could not be parsed.

    Never raised; the affected record is kept and the category name is used
    to tag the log message for operators.
    """


__all__ = [
    "TrackerError",
    "NotFoundError",
    "RunnerNotFoundError",
    "DataFetchError",
    "RecordFormatError",
    "ExcelFormatError",
    "MalformedDateWarning",
]
