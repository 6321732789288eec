"""Tests for regulatory tables."""

import pytest

from label_verifier.models import BeverageType
from label_verifier.services.rules import (
    GOVERNMENT_WARNING_PREFIX,
    GOVERNMENT_WARNING_REQUIRED_PHRASES,
    GOVERNMENT_WARNING_TEXT,
    alcohol_tolerance,
    is_standard_fill_size,
)
from label_verifier.services.normalization import normalize


class TestAlcoholTolerance:
    """Tolerance breakpoints are exact."""

    @pytest.mark.parametrize("beverage_type,abv,expected", [
        (BeverageType.DISTILLED_SPIRITS, 40.0, 0.3),
        (BeverageType.DISTILLED_SPIRITS, 50.0, 0.3),
        (BeverageType.DISTILLED_SPIRITS, 50.1, 0.15),
        (BeverageType.DISTILLED_SPIRITS, 55.0, 0.15),
        (BeverageType.WINE, 12.0, 1.5),
        (BeverageType.WINE, 14.0, 1.5),
        (BeverageType.WINE, 14.5, 1.0),
        (BeverageType.WINE, 18.0, 1.0),
        (BeverageType.BEER, 5.0, 0.3),
        (BeverageType.BEER, 12.0, 0.3),
    ])
    def test_tolerance(self, beverage_type, abv, expected):
        assert alcohol_tolerance(beverage_type, abv) == expected


class TestFillSizes:
    """Test standard container sizes."""

    def test_standard_sizes(self):
        assert is_standard_fill_size(BeverageType.DISTILLED_SPIRITS, 750)
        assert is_standard_fill_size(BeverageType.WINE, 187)
        assert is_standard_fill_size(BeverageType.BEER, 354.882)

    def test_rounding_tolerance_is_strict(self):
        assert is_standard_fill_size(BeverageType.DISTILLED_SPIRITS, 752)
        assert not is_standard_fill_size(BeverageType.DISTILLED_SPIRITS, 755)

    def test_non_standard(self):
        assert not is_standard_fill_size(BeverageType.DISTILLED_SPIRITS, 700)
        assert not is_standard_fill_size(BeverageType.WINE, 200)


class TestWarningConstants:
    """Test the canonical warning text."""

    def test_canonical_text_contains_every_phrase(self):
        normalized = normalize(GOVERNMENT_WARNING_TEXT)
        assert all(phrase in normalized for phrase in GOVERNMENT_WARNING_REQUIRED_PHRASES)

    def test_canonical_text_starts_with_prefix(self):
        assert GOVERNMENT_WARNING_TEXT.startswith(GOVERNMENT_WARNING_PREFIX)
