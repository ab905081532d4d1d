"""Unit tests for the Row Extractor."""

import pytest

from onboarding_hub.config.sheet_mapping_loader import default_sheet_mapping_config
from onboarding_hub.domain.onboarding.extractor import (
    extract,
    extract_sheets,
    resolve_sheet,
)
from onboarding_hub.infrastructure.identity import EntityKind
from onboarding_hub.infrastructure.validation import ExtractionReport, IssueType


class TestExtract:
    def test_maps_present_columns_only(self):
        raw = [
            {"nameEn": "Acme Corp", "phone": "021234567", "ignored": "x"},
            {"nameEn": "Beta"},
        ]
        rows = extract(raw, {"name_en": "nameEn", "phone": "phone", "sector": "sector"})

        assert rows[0].fields == {"name_en": "Acme Corp", "phone": "021234567"}
        assert rows[1].fields == {"name_en": "Beta"}

    def test_keeps_explicit_none_values(self):
        rows = extract([{"nameEn": None}], {"name_en": "nameEn"})
        assert rows[0].fields == {"name_en": None}

    def test_missing_sheet_yields_empty(self):
        assert extract(None, {"name_en": "nameEn"}) == []

    def test_rows_carry_kind_sheet_and_index(self):
        rows = extract(
            [{"Remark": "Acme"}, {"Remark": "Beta"}],
            {"remark": "Remark"},
            kind=EntityKind.CEO,
            sheet="Ceo",
        )

        assert [(r.kind, r.sheet, r.row_index) for r in rows] == [
            (EntityKind.CEO, "Ceo", 0),
            (EntityKind.CEO, "Ceo", 1),
        ]


class TestResolveSheet:
    @pytest.fixture
    def company_mapping(self):
        return default_sheet_mapping_config().for_entity("company")

    def test_canonical_name_preferred(self, company_mapping):
        sheets = {"Company": [{"a": 1}], "RegistrationCompanyProfiles": [{"b": 2}]}
        assert resolve_sheet(sheets, company_mapping)[0] == "RegistrationCompanyProfiles"

    def test_alias(self, company_mapping):
        assert resolve_sheet({"Company Profile": []}, company_mapping)[0] == "Company Profile"

    def test_case_and_whitespace_insensitive_fallback(self, company_mapping):
        name, rows = resolve_sheet({" company profile ": [{"a": 1}]}, company_mapping)
        assert name == " company profile "
        assert rows == [{"a": 1}]

    def test_not_found(self, company_mapping):
        assert resolve_sheet({"Other": []}, company_mapping) == (None, None)


class TestExtractSheets:
    def test_extracts_every_entity_kind(self, onboarding_sheets):
        report = ExtractionReport()
        extracted = extract_sheets(onboarding_sheets, default_sheet_mapping_config(), report)

        assert len(extracted[EntityKind.COMPANY]) == 2
        assert len(extracted[EntityKind.CEO]) == 1
        assert len(extracted[EntityKind.ORG_ADMIN]) == 1
        assert len(extracted[EntityKind.USER_REQUEST]) == 3
        assert extracted[EntityKind.CEO][0].get("remark") == "Acme"
        assert extracted[EntityKind.CEO][0].sheet == "Ceo Profile"
        assert len(report) == 0

    def test_missing_sheet_recorded_as_parse_gap(self, onboarding_sheets):
        del onboarding_sheets["Ceo Profile"]
        report = ExtractionReport()

        extracted = extract_sheets(onboarding_sheets, default_sheet_mapping_config(), report)

        assert extracted[EntityKind.CEO] == []
        gaps = report.by_type(IssueType.PARSE_GAP)
        assert len(gaps) == 1
        assert gaps[0].entity == "ceo"
        assert gaps[0].sheet == "RegistrationCeoProfiles"

    def test_missing_column_recorded_as_parse_gap(self):
        sheets = {"Company": [{"nameEn": "Acme Corp"}]}
        report = ExtractionReport()

        extract_sheets(
            sheets, default_sheet_mapping_config(), report, kinds=[EntityKind.COMPANY]
        )

        gaps = report.by_type(IssueType.PARSE_GAP)
        missing = {issue.message for issue in gaps}
        assert "Column 'nameTh' not present in any row" in missing
        assert "Column 'nameEn' not present in any row" not in missing
        assert all(issue.sheet == "Company" for issue in gaps)

    def test_empty_sheet_has_no_column_gaps(self):
        report = ExtractionReport()
        extracted = extract_sheets(
            {"Company": []}, default_sheet_mapping_config(), report, kinds=[EntityKind.COMPANY]
        )

        assert extracted[EntityKind.COMPANY] == []
        assert len(report) == 0
