"""Tests for alcohol and net contents parsing."""

import pytest

from label_verifier.services.parsing import (
    NetContents,
    UNIT_FL_OZ,
    UNIT_ML,
    parse_alcohol_content,
    parse_net_contents,
)


class TestParseAlcoholContent:
    """Test ABV and proof extraction."""

    def test_percentage_and_proof(self):
        parsed = parse_alcohol_content("45% Alc./Vol. (90 Proof)")
        assert parsed.percentage == 45.0
        assert parsed.proof == 90

    @pytest.mark.parametrize("text,expected", [
        ("13.5% ABV", 13.5),
        ("40% alcohol by volume", 40.0),
        ("45 % alc/vol", 45.0),
        ("12.5% ALC. / VOL.", 12.5),
    ])
    def test_percentage_forms(self, text, expected):
        assert parse_alcohol_content(text).percentage == expected

    def test_bare_percent_is_not_a_statement(self):
        parsed = parse_alcohol_content("45%")
        assert parsed.percentage is None
        assert parsed.proof is None

    def test_proof_only(self):
        parsed = parse_alcohol_content("80 Proof")
        assert parsed.percentage is None
        assert parsed.proof == 80


class TestParseNetContents:
    """Test volume extraction."""

    @pytest.mark.parametrize("text,value", [
        ("750 mL", 750.0),
        ("750ML", 750.0),
        ("375 milliliters", 375.0),
        ("1.75 L", 1750.0),
        ("1 Liter", 1000.0),
    ])
    def test_metric(self, text, value):
        parsed = parse_net_contents(text)
        assert parsed.value == pytest.approx(value)
        assert parsed.unit == UNIT_ML

    @pytest.mark.parametrize("text", ["12 fl oz", "12 FL. OZ.", "12 oz", "12 ounces"])
    def test_imperial(self, text):
        parsed = parse_net_contents(text)
        assert parsed.value == 12.0
        assert parsed.unit == UNIT_FL_OZ

    def test_metric_preferred_when_both_present(self):
        parsed = parse_net_contents("12 FL OZ (355 mL)")
        assert parsed.value == 355.0
        assert parsed.unit == UNIT_ML

    def test_unparseable(self):
        parsed = parse_net_contents("one bottle")
        assert parsed.value is None
        assert parsed.unit is None
        assert parsed.in_milliliters() is None

    def test_fluid_ounce_conversion(self):
        assert NetContents(12.0, UNIT_FL_OZ).in_milliliters() == pytest.approx(354.882)

