"""
Key matching strategies used by the entity linker.

A strategy answers one question: given a normalized key, which index entries
does it match? The linker walks its strategies in order and takes the first
strategy that returns any candidates, and within that strategy the first
candidate in index order.

SubstringMatch reproduces the historical first-match-wins rule. It has no
scoring, so when several companies contain (or are contained in) the key, the
earliest company in the sheet wins. Callers see every candidate in the
MatchOutcome and decide whether to flag the tie.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from .types import LinkIndex, LinkIndexEntry


@dataclass(frozen=True)
class MatchOutcome:
    """Chosen entry plus every candidate key the strategy considered a match."""

    entry: LinkIndexEntry
    candidates: Tuple[str, ...]


class MatchStrategy(Protocol):
    """Interface for key -> company matching."""

    name: str
    fuzzy: bool

    def match(self, key: str, index: LinkIndex) -> Optional[MatchOutcome]:
        ...


class ExactKeyMatch:
    """Direct lookup of the normalized key."""

    name = "exact"
    fuzzy = False

    def match(self, key: str, index: LinkIndex) -> Optional[MatchOutcome]:
        entry = index.get(key)
        if entry is None:
            return None
        return MatchOutcome(entry=entry, candidates=(entry.key,))


class SubstringMatch:
    """
    Index keys that contain the key, or are contained in it.

    The first candidate in index (discovery) order is chosen.
    """

    name = "substring"
    fuzzy = True

    def match(self, key: str, index: LinkIndex) -> Optional[MatchOutcome]:
        if not key:
            return None

        candidates = [entry for entry in index if key in entry.key or entry.key in key]
        if not candidates:
            return None

        return MatchOutcome(
            entry=candidates[0],
            candidates=tuple(entry.key for entry in candidates),
        )


DEFAULT_STRATEGIES: Tuple[MatchStrategy, ...] = (ExactKeyMatch(), SubstringMatch())
