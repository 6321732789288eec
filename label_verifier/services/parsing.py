"""Parsers that pull numeric meaning out of free-text label fields."""

import re
from dataclasses import dataclass
from typing import Optional

from .rules import FL_OZ_TO_ML


# "45% Alc./Vol.", "45% ABV", "45% Alcohol by Volume"; a bare "45%" is not a valid statement
ALCOHOL_PERCENT_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*%\s*(?:alc\.?\s*/\s*vol\.?|abv|alcohol\s*by\s*volume)",
    re.IGNORECASE,
)
PROOF_PATTERN = re.compile(r"(\d+)\s*proof", re.IGNORECASE)

METRIC_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*(milliliters?|liters?|ml|l)\b",
    re.IGNORECASE,
)
IMPERIAL_PATTERN = re.compile(
    r"(\d+(?:\.\d+)?)\s*(fl\.?\s*oz\.?|oz\.?|ounces?)",
    re.IGNORECASE,
)

UNIT_ML = "ml"
UNIT_FL_OZ = "fl oz"

_LITER_UNITS = {"l", "liter", "liters"}


@dataclass(frozen=True)
class AlcoholContent:
    """Parsed alcohol statement; either part may be missing."""
    percentage: Optional[float] = None
    proof: Optional[int] = None


@dataclass(frozen=True)
class NetContents:
    """Parsed net contents in millilitres or fluid ounces."""
    value: Optional[float] = None
    unit: Optional[str] = None

    def in_milliliters(self) -> Optional[float]:
        if self.value is None:
            return None
        if self.unit == UNIT_FL_OZ:
            return self.value * FL_OZ_TO_ML
        return self.value


def parse_alcohol_content(text: str) -> AlcoholContent:
    """
    Extract ABV percentage and/or proof from an alcohol statement.

    Args:
        text: e.g. "45% Alc./Vol. (90 Proof)"

    Returns:
        AlcoholContent with whichever parts were recognized
    """
    percent_match = ALCOHOL_PERCENT_PATTERN.search(text)
    proof_match = PROOF_PATTERN.search(text)

    return AlcoholContent(
        percentage=float(percent_match.group(1)) if percent_match else None,
        proof=int(proof_match.group(1)) if proof_match else None,
    )


def parse_net_contents(text: str) -> NetContents:
    """
    Extract a volume from a net contents statement.

    Metric volumes come back in mL (litres are scaled by 1000). Imperial
    volumes stay in fluid ounces; conversion happens only when comparing
    across units.
    """
    metric_match = METRIC_PATTERN.search(text)
    if metric_match:
        value = float(metric_match.group(1))
        if metric_match.group(2).lower() in _LITER_UNITS:
            value *= 1000
        return NetContents(value=value, unit=UNIT_ML)

    imperial_match = IMPERIAL_PATTERN.search(text)
    if imperial_match:
        return NetContents(value=float(imperial_match.group(1)), unit=UNIT_FL_OZ)

    return NetContents()

