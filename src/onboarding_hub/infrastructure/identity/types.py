"""
Type definitions for company identity linkage.

SourceRow is what the extractor hands over; LinkIndex is the per-run company
index built by the linker; LinkResult / LinkFailure are the two outcomes of
resolving a dependent row.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


class EntityKind(str, Enum):
    """Entity kinds read from the onboarding workbook."""

    COMPANY = "company"
    CEO = "ceo"
    ORG_ADMIN = "org_admin"
    USER_REQUEST = "user_request"


class ResolutionSource(str, Enum):
    """Which signal resolved a dependent row to its company."""

    EXPLICIT_FIELD = "explicit_field"
    EXPLICIT_FIELD_FUZZY = "explicit_field_fuzzy"
    REMARK = "remark"
    REMARK_FUZZY = "remark_fuzzy"
    EMAIL_DOMAIN = "email_domain"
    EMAIL_DOMAIN_FUZZY = "email_domain_fuzzy"


@dataclass(frozen=True)
class SourceRow:
    """
    One extracted workbook row.

    Attributes:
        kind: Entity kind the row was extracted as.
        sheet: Sheet name the row came from.
        row_index: 0-based position of the row within its sheet.
        fields: Mapped target field -> raw cell value. Columns absent from the
            sheet are absent here too.
    """

    kind: EntityKind
    sheet: str
    row_index: int
    fields: Mapping[str, Any]

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class LinkIndexEntry:
    """
    A company accepted into the link index.

    Attributes:
        key: Normalized identity key.
        position: 0-based row index in the company sheet.
        company_id: Dense 1-based synthetic id (discovery rank).
        row: Source company row.
    """

    key: str
    position: int
    company_id: int
    row: SourceRow


class LinkIndex:
    """
    Ordered normalized-key -> company index for a single pipeline run.

    Entries keep insertion (discovery) order. Once frozen, the index rejects
    further additions.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, LinkIndexEntry] = {}
        self._frozen = False

    def add(self, key: str, position: int, row: SourceRow) -> LinkIndexEntry:
        if self._frozen:
            raise RuntimeError("LinkIndex is frozen; entries cannot be added")
        if key in self._entries:
            raise KeyError(f"Duplicate identity key '{key}'")
        entry = LinkIndexEntry(
            key=key,
            position=position,
            company_id=len(self._entries) + 1,
            row=row,
        )
        self._entries[key] = entry
        return entry

    def freeze(self) -> "LinkIndex":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, key: Optional[str]) -> Optional[LinkIndexEntry]:
        if key is None:
            return None
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[LinkIndexEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class LinkResult:
    """
    Successful resolution of a dependent row.

    Attributes:
        company_id: Synthetic id of the matched company.
        reference_id: Id of the company's RegistrationReference (equal to
            company_id, since both are the discovery rank).
        source: Which signal produced the match.
        matched_key: Index key that was matched.
        candidates: All index keys that matched at the deciding step; more
            than one means the first-in-order rule broke a tie.
    """

    company_id: int
    reference_id: int
    source: ResolutionSource
    matched_key: str
    candidates: Tuple[str, ...] = ()

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass(frozen=True)
class LinkFailure:
    """
    A dependent row that no strategy could attach to a company.

    Attributes:
        row: The unresolved source row.
        attempted_keys: Normalized keys tried, by signal name.
        reason: Human-readable explanation.
    """

    row: SourceRow
    attempted_keys: Dict[str, Optional[str]] = field(default_factory=dict)
    reason: str = "no company matched"
