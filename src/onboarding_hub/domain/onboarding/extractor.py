"""Onboarding domain - Row Extractor.

Projects raw workbook rows (header -> cell value) onto target field names
using the configured column mapping. No defaulting happens here: a column the
sheet does not have is simply absent from the extracted row.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from onboarding_hub.config.sheet_mapping_loader import (
    EntitySheetMapping,
    SheetMappingConfig,
)
from onboarding_hub.infrastructure.identity.types import EntityKind, SourceRow
from onboarding_hub.infrastructure.validation.extraction_report import (
    ExtractionReport,
)
from onboarding_hub.utils.logging import get_logger

logger = get_logger(__name__)

RawSheet = Sequence[Mapping[str, Any]]


def extract(
    raw_sheet: Optional[RawSheet],
    column_mapping: Mapping[str, str],
    *,
    kind: EntityKind = EntityKind.COMPANY,
    sheet: str = "",
) -> List[SourceRow]:
    """
    Map each raw row's source columns onto target fields.

    Args:
        raw_sheet: Ordered rows of one sheet, or None when the sheet is missing
        column_mapping: target field -> source column header
        kind: Entity kind recorded on every extracted row
        sheet: Sheet name recorded on every extracted row

    Returns:
        One SourceRow per input row, in input order. Empty for a missing sheet.
    """
    if raw_sheet is None:
        return []

    rows: List[SourceRow] = []
    for row_index, raw_row in enumerate(raw_sheet):
        fields: Dict[str, Any] = {
            target: raw_row[source]
            for target, source in column_mapping.items()
            if source in raw_row
        }
        rows.append(
            SourceRow(kind=kind, sheet=sheet, row_index=row_index, fields=fields)
        )
    return rows


def resolve_sheet(
    sheets: Mapping[str, RawSheet], mapping: EntitySheetMapping
) -> Tuple[Optional[str], Optional[RawSheet]]:
    """
    Find the sheet for an entity, trying the canonical name then its aliases.

    Exact titles win; otherwise titles are compared trimmed and case-insensitive.

    Returns:
        (sheet name as found in the workbook, rows) or (None, None).
    """
    candidates = mapping.sheet_names()
    for name in candidates:
        if name in sheets:
            return name, sheets[name]

    folded = {title.strip().casefold(): title for title in sheets}
    for name in candidates:
        title = folded.get(name.strip().casefold())
        if title is not None:
            return title, sheets[title]
    return None, None


def _missing_columns(raw_sheet: RawSheet, column_mapping: Mapping[str, str]) -> List[str]:
    present = set()
    for raw_row in raw_sheet:
        present.update(raw_row.keys())
    return [source for source in column_mapping.values() if source not in present]


def extract_sheets(
    sheets: Mapping[str, RawSheet],
    mapping_config: SheetMappingConfig,
    report: ExtractionReport,
    kinds: Iterable[EntityKind] = tuple(EntityKind),
) -> Dict[EntityKind, List[SourceRow]]:
    """
    Extract every entity kind from a loaded workbook.

    Missing sheets and mapped columns absent from every row of a sheet are
    recorded as parse gaps; extraction carries on with what is there.

    Returns:
        entity kind -> extracted rows (empty list for a missing sheet)
    """
    extracted: Dict[EntityKind, List[SourceRow]] = {}

    for kind in kinds:
        mapping = mapping_config.for_entity(kind.value)
        sheet_name, raw_sheet = resolve_sheet(sheets, mapping)

        if raw_sheet is None:
            report.add_parse_gap(
                f"Sheet not found (tried: {', '.join(mapping.sheet_names())})",
                sheet=mapping.sheet,
                entity=kind.value,
            )
            extracted[kind] = []
            continue

        if raw_sheet:
            for column in _missing_columns(raw_sheet, mapping.columns):
                report.add_parse_gap(
                    f"Column '{column}' not present in any row",
                    sheet=sheet_name or mapping.sheet,
                    entity=kind.value,
                    detail={"column": column},
                )

        extracted[kind] = extract(
            raw_sheet, mapping.columns, kind=kind, sheet=sheet_name or mapping.sheet
        )
        logger.info(
            "onboarding.extractor.sheet_extracted",
            entity=kind.value,
            sheet=sheet_name,
            row_count=len(extracted[kind]),
        )

    return extracted
