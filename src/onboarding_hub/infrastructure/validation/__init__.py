"""Collection and export of recoverable pipeline issues."""

from .extraction_report import (
    ExtractionReport,
    IncompleteExtractionError,
    IssueType,
    ReportIssue,
)

__all__ = [
    "ExtractionReport",
    "IncompleteExtractionError",
    "IssueType",
    "ReportIssue",
]
