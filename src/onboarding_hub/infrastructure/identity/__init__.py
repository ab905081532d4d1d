"""
Company identity linkage: key normalization, matching strategies and the
entity linker.

Usage:
    from onboarding_hub.infrastructure.identity import EntityLinker, build_link_index
"""

from .linker import EntityLinker, build_link_index
from .matching import ExactKeyMatch, MatchOutcome, MatchStrategy, SubstringMatch
from .normalizer import company_key_from_email, normalize_name
from .types import (
    EntityKind,
    LinkFailure,
    LinkIndex,
    LinkIndexEntry,
    LinkResult,
    ResolutionSource,
    SourceRow,
)

__all__ = [
    "EntityKind",
    "EntityLinker",
    "ExactKeyMatch",
    "LinkFailure",
    "LinkIndex",
    "LinkIndexEntry",
    "LinkResult",
    "MatchOutcome",
    "MatchStrategy",
    "ResolutionSource",
    "SourceRow",
    "SubstringMatch",
    "build_link_index",
    "company_key_from_email",
    "normalize_name",
]
