from dataclasses import dataclass, field
from typing import Dict, List


class OnboardingLoaderError(Exception):
    """Raised when onboarding batches cannot be turned into inserts."""


@dataclass
class LoadResult:
    """Structured response for OnboardingWarehouseLoader.insert_batches."""

    success: bool
    rows_inserted: int
    duration_ms: float
    execution_id: str
    query_count: int = 0
    rows_by_table: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
