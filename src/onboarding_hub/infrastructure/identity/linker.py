"""
Entity linker: company index construction and dependent-row resolution.

The linker is the only stage allowed to build the LinkIndex. It is built once
per run from the company sheet (first-seen key wins), frozen, and then used to
resolve every CEO, organization-admin and user-request row.

Resolution order for a dependent row (first success wins):

1. Explicit company field: exact key, then substring match
2. Email domain: exact key, then substring match
3. CEO rows use the Remark field in place of (1) and never use email

Rows that no step resolves become LinkFailures.
"""

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from onboarding_hub.utils.logging import get_logger

from .matching import DEFAULT_STRATEGIES, MatchStrategy
from .normalizer import company_key_from_email, normalize_name
from .types import (
    EntityKind,
    LinkFailure,
    LinkIndex,
    LinkResult,
    ResolutionSource,
    SourceRow,
)

if TYPE_CHECKING:
    from onboarding_hub.infrastructure.validation.extraction_report import (
        ExtractionReport,
    )

logger = get_logger(__name__)

COMPANY_NAME_FIELD = "name_en"
COMPANY_FIELD = "company"
REMARK_FIELD = "remark"
EMAIL_FIELD = "email"

# signal name -> (exact source, fuzzy source)
_SIGNAL_SOURCES: Dict[str, Tuple[ResolutionSource, ResolutionSource]] = {
    COMPANY_FIELD: (
        ResolutionSource.EXPLICIT_FIELD,
        ResolutionSource.EXPLICIT_FIELD_FUZZY,
    ),
    REMARK_FIELD: (ResolutionSource.REMARK, ResolutionSource.REMARK_FUZZY),
    EMAIL_FIELD: (
        ResolutionSource.EMAIL_DOMAIN,
        ResolutionSource.EMAIL_DOMAIN_FUZZY,
    ),
}


def build_link_index(
    company_rows: Iterable[SourceRow], report: "ExtractionReport"
) -> LinkIndex:
    """
    Build the per-run company index from company rows in file order.

    Rows without a usable English name are skipped with a parse gap; rows whose
    key is already indexed are skipped with a duplicate-identity warning, so
    ids stay stable when the same input is re-run.

    Returns:
        Frozen LinkIndex with dense 1-based company ids.
    """
    index = LinkIndex()

    for row in company_rows:
        key = normalize_name(row.get(COMPANY_NAME_FIELD))
        if key is None:
            report.add_parse_gap(
                "Company row has no usable English name; row skipped",
                row=row,
            )
            continue

        existing = index.get(key)
        if existing is not None:
            report.add_duplicate_identity(row, key, existing.position)
            continue

        entry = index.add(key, row.row_index, row)
        logger.debug(
            "onboarding.linker.company_indexed",
            key=key,
            company_id=entry.company_id,
            row_index=row.row_index,
        )

    logger.info("onboarding.linker.index_built", company_count=len(index))
    return index.freeze()


class EntityLinker:
    """
    Resolves dependent rows against a frozen LinkIndex.

    Attributes:
        index: Company index for this run.
        strategies: Matching strategies tried in order for each signal.
        report: Collector for link failures and ambiguous matches.
    """

    def __init__(
        self,
        index: LinkIndex,
        report: "ExtractionReport",
        strategies: Sequence[MatchStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        if not index.frozen:
            raise ValueError("EntityLinker requires a frozen LinkIndex")
        self.index = index
        self.report = report
        self.strategies = tuple(strategies)

    def _signals(self, row: SourceRow) -> List[Tuple[str, Optional[str]]]:
        if row.kind == EntityKind.CEO:
            return [(REMARK_FIELD, normalize_name(row.get(REMARK_FIELD)))]
        return [
            (COMPANY_FIELD, normalize_name(row.get(COMPANY_FIELD))),
            (EMAIL_FIELD, company_key_from_email(row.get(EMAIL_FIELD))),
        ]

    def resolve(self, row: SourceRow) -> Union[LinkResult, LinkFailure]:
        """
        Resolve one dependent row to its company.

        Returns:
            LinkResult on success, LinkFailure when every signal misses.
        """
        if row.kind == EntityKind.COMPANY:
            raise ValueError("Company rows are indexed, not resolved")

        attempted: Dict[str, Optional[str]] = {}
        for signal, key in self._signals(row):
            attempted[signal] = key
            if key is None:
                continue

            exact_source, fuzzy_source = _SIGNAL_SOURCES[signal]
            for strategy in self.strategies:
                outcome = strategy.match(key, self.index)
                if outcome is None:
                    continue

                result = LinkResult(
                    company_id=outcome.entry.company_id,
                    reference_id=outcome.entry.company_id,
                    source=fuzzy_source if strategy.fuzzy else exact_source,
                    matched_key=outcome.entry.key,
                    candidates=outcome.candidates,
                )
                if result.ambiguous:
                    self.report.add_ambiguous_match(
                        row, outcome.entry.key, outcome.candidates
                    )
                logger.debug(
                    "onboarding.linker.row_resolved",
                    entity=row.kind.value,
                    row_index=row.row_index,
                    company_id=result.company_id,
                    source=result.source.value,
                )
                return result

        failure = LinkFailure(
            row=row,
            attempted_keys=attempted,
            reason=_failure_reason(row, attempted),
        )
        self.report.add_link_failure(failure)
        return failure

    def resolve_all(
        self, rows: Iterable[SourceRow]
    ) -> List[Tuple[SourceRow, LinkResult]]:
        """Resolve rows in order, keeping only the linked ones."""
        linked: List[Tuple[SourceRow, LinkResult]] = []
        for row in rows:
            outcome = self.resolve(row)
            if isinstance(outcome, LinkResult):
                linked.append((row, outcome))
        return linked


def _failure_reason(row: SourceRow, attempted: Dict[str, Optional[str]]) -> str:
    if all(key is None for key in attempted.values()):
        return f"No company signal on {row.kind.value} row ({', '.join(attempted)} empty)"
    tried = ", ".join(f"{signal}={key!r}" for signal, key in attempted.items() if key)
    return f"No company matched {row.kind.value} row ({tried})"
