"""Unit tests for company identity key normalization."""

import pytest

from onboarding_hub.infrastructure.identity.normalizer import (
    company_key_from_email,
    normalize_name,
)


class TestNormalizeName:
    """normalize_name trims, lowercases and drops whitespace, dots and hyphens."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Acme Corp", "acmecorp"),
            ("  ACME   CORP  ", "acmecorp"),
            ("beta.co", "betaco"),
            ("Gamma-Delta Ltd.", "gammadeltaltd"),
            ("Tab\tNew\nLine", "tabnewline"),
            ("บริษัท เอ", "บริษัทเอ"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "...", " - . - "])
    def test_empty_results_are_none(self, raw):
        assert normalize_name(raw) is None

    def test_non_string_scalars_are_stringified(self):
        assert normalize_name(12345) == "12345"

    @pytest.mark.parametrize(
        "raw", ["Acme Corp", "beta.co", "X-Y.Z", "  mixed Case  ", "บริษัท เอ"]
    )
    def test_idempotent(self, raw):
        once = normalize_name(raw)
        assert normalize_name(once) == once


class TestCompanyKeyFromEmail:
    def test_uses_first_domain_label(self):
        assert company_key_from_email("local@sub.domain.tld") == normalize_name("sub")

    def test_simple_domain(self):
        assert company_key_from_email("admin@beta.co") == "beta"

    def test_domain_label_is_normalized(self):
        assert company_key_from_email("someone@Acme-Corp.com") == "acmecorp"

    @pytest.mark.parametrize(
        "email", [None, "", "no-at-sign", "trailing@", "x@.com", 42]
    )
    def test_unusable_input_yields_none(self, email):
        assert company_key_from_email(email) is None
