"""Structured collection of recoverable extraction issues.

Every condition the pipeline recovers from locally (a missing sheet or column,
a row that cannot be linked to a company, a duplicate company, an ambiguous
fuzzy match) is recorded here as an immutable ReportIssue, in addition to
being logged. Callers inspect the report to decide whether a partially
successful extraction is acceptable.

Usage:
    >>> report = ExtractionReport()
    >>> report.add_parse_gap("Missing sheet", sheet="RegistrationCeoProfiles")
    >>> report.counts()
    {'PARSE_GAP': 1, 'LINK_FAILURE': 0, 'DUPLICATE_IDENTITY': 0, 'AMBIGUOUS_MATCH': 0}
    >>> report.export_to_csv(Path("logs/onboarding_issues.csv"))
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from onboarding_hub.infrastructure.identity.types import LinkFailure, SourceRow
from onboarding_hub.utils.logging import get_logger

logger = get_logger(__name__)


class IssueType(str, Enum):
    """Recoverable issue categories.

    Values:
        PARSE_GAP: Sheet or column absent, or a cell value unusable
        LINK_FAILURE: Dependent row not attached to any company (row dropped)
        DUPLICATE_IDENTITY: Company row sharing a key with an earlier row (dropped)
        AMBIGUOUS_MATCH: Fuzzy match with several candidates (first kept)
    """

    PARSE_GAP = "PARSE_GAP"
    LINK_FAILURE = "LINK_FAILURE"
    DUPLICATE_IDENTITY = "DUPLICATE_IDENTITY"
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"


@dataclass(frozen=True)
class ReportIssue:
    """Immutable record of one recoverable issue.

    Attributes:
        issue_type: Category value from IssueType
        message: Human-readable description
        entity: Entity kind the issue concerns (empty when not row-specific)
        sheet: Sheet name (empty when unknown)
        row_index: 0-based row index in the sheet, None when not row-specific
        timestamp: ISO-8601 timestamp of detection
        raw_data: Serialized raw row data as JSON string
    """

    issue_type: str
    message: str
    entity: str = ""
    sheet: str = ""
    row_index: Optional[int] = None
    timestamp: str = ""
    raw_data: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def create(
        cls,
        issue_type: IssueType,
        message: str,
        *,
        row: Optional[SourceRow] = None,
        sheet: str = "",
        entity: str = "",
        detail: Optional[Mapping[str, Any]] = None,
    ) -> "ReportIssue":
        raw: Dict[str, Any] = dict(row.fields) if row is not None else {}
        if detail:
            raw["_detail"] = dict(detail)
        return cls(
            issue_type=issue_type.value,
            message=message,
            entity=row.kind.value if row is not None else entity,
            sheet=row.sheet if row is not None else sheet,
            row_index=row.row_index if row is not None else None,
            timestamp=datetime.now(timezone.utc).isoformat(),
            raw_data=json.dumps(raw, ensure_ascii=False, default=str) if raw else "",
        )


class IncompleteExtractionError(Exception):
    """Raised when a caller requires an extraction free of dropped rows."""

    def __init__(self, report: "ExtractionReport"):
        self.report = report
        counts = report.counts()
        super().__init__(
            "Extraction incomplete: "
            f"{counts[IssueType.LINK_FAILURE.value]} link failure(s), "
            f"{counts[IssueType.DUPLICATE_IDENTITY.value]} duplicate company row(s)"
        )


class ExtractionReport:
    """Collects recoverable issues for one pipeline run."""

    def __init__(self) -> None:
        self.issues: List[ReportIssue] = []

    def _record(self, issue: ReportIssue, event: str, **log_fields: Any) -> None:
        self.issues.append(issue)
        logger.warning(
            event,
            entity=issue.entity or None,
            sheet=issue.sheet or None,
            row_index=issue.row_index,
            message=issue.message,
            **log_fields,
        )

    def add_parse_gap(
        self,
        message: str,
        *,
        sheet: str = "",
        entity: str = "",
        row: Optional[SourceRow] = None,
        detail: Optional[Mapping[str, Any]] = None,
    ) -> None:
        issue = ReportIssue.create(
            IssueType.PARSE_GAP,
            message,
            row=row,
            sheet=sheet,
            entity=entity,
            detail=detail,
        )
        self._record(issue, "onboarding.report.parse_gap")

    def add_link_failure(self, failure: LinkFailure) -> None:
        issue = ReportIssue.create(
            IssueType.LINK_FAILURE,
            failure.reason,
            row=failure.row,
            detail={"attempted_keys": failure.attempted_keys},
        )
        self._record(
            issue,
            "onboarding.report.link_failure",
            attempted_keys=failure.attempted_keys,
        )

    def add_duplicate_identity(
        self, row: SourceRow, key: str, kept_position: int
    ) -> None:
        issue = ReportIssue.create(
            IssueType.DUPLICATE_IDENTITY,
            f"Company key '{key}' already taken by row {kept_position}; row dropped",
            row=row,
            detail={"key": key, "kept_row_index": kept_position},
        )
        self._record(issue, "onboarding.report.duplicate_identity", key=key)

    def add_ambiguous_match(
        self, row: SourceRow, chosen_key: str, candidates: Iterable[str]
    ) -> None:
        candidate_list = list(candidates)
        issue = ReportIssue.create(
            IssueType.AMBIGUOUS_MATCH,
            f"{len(candidate_list)} companies matched; kept first '{chosen_key}'",
            row=row,
            detail={"chosen": chosen_key, "candidates": candidate_list},
        )
        self._record(
            issue,
            "onboarding.report.ambiguous_match",
            chosen=chosen_key,
            candidates=candidate_list,
        )

    def by_type(self, issue_type: IssueType) -> List[ReportIssue]:
        return [i for i in self.issues if i.issue_type == issue_type.value]

    @property
    def link_failures(self) -> List[ReportIssue]:
        return self.by_type(IssueType.LINK_FAILURE)

    @property
    def has_dropped_rows(self) -> bool:
        """True when any input row was excluded from the output."""
        return bool(
            self.link_failures or self.by_type(IssueType.DUPLICATE_IDENTITY)
        )

    def counts(self) -> Dict[str, int]:
        counts = {t.value: 0 for t in IssueType}
        for issue in self.issues:
            counts[issue.issue_type] += 1
        return counts

    def raise_if_incomplete(self) -> None:
        """Raise IncompleteExtractionError when any row was dropped."""
        if self.has_dropped_rows:
            raise IncompleteExtractionError(self)

    def export_to_csv(self, csv_path: Path) -> Path:
        """Write all issues to CSV (header row always written)."""
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        fieldnames = list(ReportIssue.__dataclass_fields__.keys())
        with open(csv_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for issue in self.issues:
                writer.writerow(issue.to_dict())

        logger.info(
            "onboarding.report.exported",
            path=str(csv_path),
            issue_count=len(self.issues),
        )
        return csv_path

    def __len__(self) -> int:
        return len(self.issues)
