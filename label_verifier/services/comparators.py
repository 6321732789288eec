"""Field comparators: one per field family, plus the dispatch table."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging

from ..config import get_settings
from ..models import BeverageType, FieldVerification
from .normalization import similarity, semantically_equal
from .parsing import parse_alcohol_content, parse_net_contents
from .rules import alcohol_tolerance, is_standard_fill_size

logger = logging.getLogger(__name__)

# Relative tolerance for same-unit net contents
NET_CONTENTS_RELATIVE_TOLERANCE = 0.01
# Absolute tolerance after converting fl oz to mL
UNIT_CONVERSION_TOLERANCE_ML = 5.0
# Threshold for the raw-string fallback when a value cannot be parsed
PARSE_FALLBACK_THRESHOLD = 0.9

NOT_SPECIFIED_NOTE = "Field not specified in application"
NOT_FOUND_NOTE = "Field not found on label"


@dataclass(frozen=True)
class Comparison:
    """Outcome of comparing an application value with a label value."""
    matches: bool
    confidence: float
    notes: Optional[str] = None


Comparator = Callable[[str, str], Comparison]


def compare_brand_names(application_name: str, label_name: str) -> Comparison:
    """
    Compare brand names, tolerating case, possessive and OCR glyph noise.

    Thresholds:
    - semantically equal or identical after normalization: match
    - >= 0.90 similarity: match with a note
    - 0.70 - 0.90: no match, needs review
    - < 0.70: mismatch
    """
    if semantically_equal(application_name, label_name):
        return Comparison(matches=True, confidence=1.0)

    settings = get_settings()
    score = similarity(application_name, label_name)

    if score >= 1.0:
        return Comparison(matches=True, confidence=1.0)

    if score >= settings.brand_high_similarity_threshold:
        return Comparison(
            matches=True,
            confidence=score,
            notes=f'Minor difference detected: "{application_name}" vs "{label_name}"',
        )

    if score >= settings.brand_review_threshold:
        return Comparison(
            matches=False,
            confidence=score,
            notes=f'Possible match requiring review: "{application_name}" vs "{label_name}"',
        )

    return Comparison(
        matches=False,
        confidence=score,
        notes=f'Mismatch: "{application_name}" vs "{label_name}"',
    )


def compare_alcohol_content(
    application_content: str,
    label_content: str,
    beverage_type: BeverageType = BeverageType.DISTILLED_SPIRITS,
) -> Comparison:
    """Compare alcohol statements using the regulatory tolerance for the beverage type."""
    app_parsed = parse_alcohol_content(application_content)
    label_parsed = parse_alcohol_content(label_content)

    if app_parsed.percentage is not None and label_parsed.percentage is not None:
        # Rounded so 12 vs 12.3 is exactly 0.3, not 0.3000000000000007
        diff = round(abs(app_parsed.percentage - label_parsed.percentage), 6)
        if diff == 0:
            return Comparison(matches=True, confidence=1.0)

        tolerance = alcohol_tolerance(beverage_type, app_parsed.percentage)
        if diff <= tolerance:
            note = None
            if diff > 0.05:
                note = (
                    f"Within TTB tolerance (±{tolerance:g}%): "
                    f"{app_parsed.percentage:g}% vs {label_parsed.percentage:g}%"
                )
            # Shallow penalty: compliant values should not look borderline
            return Comparison(matches=True, confidence=1 - (diff / tolerance) * 0.1, notes=note)

        return Comparison(
            matches=False,
            confidence=0.0,
            notes=(
                f"Alcohol content mismatch: {app_parsed.percentage:g}% vs "
                f"{label_parsed.percentage:g}% (exceeds ±{tolerance:g}% tolerance)"
            ),
        )

    if app_parsed.proof is not None and label_parsed.proof is not None:
        proof_diff = abs(app_parsed.proof - label_parsed.proof)
        if proof_diff == 0:
            return Comparison(matches=True, confidence=1.0)
        if proof_diff <= 1:
            return Comparison(
                matches=True,
                confidence=0.95,
                notes=f"Minor proof difference: {app_parsed.proof} vs {label_parsed.proof}",
            )
        return Comparison(
            matches=False,
            confidence=0.0,
            notes=f"Proof mismatch: {app_parsed.proof} vs {label_parsed.proof}",
        )

    score = similarity(application_content, label_content)
    return Comparison(
        matches=score >= PARSE_FALLBACK_THRESHOLD,
        confidence=score,
        notes="Could not parse alcohol content for comparison" if score < PARSE_FALLBACK_THRESHOLD else None,
    )


def compare_net_contents(
    application_contents: str,
    label_contents: str,
    beverage_type: BeverageType = BeverageType.DISTILLED_SPIRITS,
) -> Comparison:
    """Compare net contents, converting fl oz to mL when the units differ."""
    app_parsed = parse_net_contents(application_contents)
    label_parsed = parse_net_contents(label_contents)

    if app_parsed.value is None or label_parsed.value is None:
        score = similarity(application_contents, label_contents)
        return Comparison(matches=score >= PARSE_FALLBACK_THRESHOLD, confidence=score)

    if app_parsed.unit == label_parsed.unit:
        if app_parsed.value == label_parsed.value:
            note = None
            if not is_standard_fill_size(beverage_type, app_parsed.in_milliliters()):
                note = f"Non-standard container size: {application_contents}"
            return Comparison(matches=True, confidence=1.0, notes=note)

        diff = abs(app_parsed.value - label_parsed.value)
        if diff <= app_parsed.value * NET_CONTENTS_RELATIVE_TOLERANCE:
            return Comparison(
                matches=True,
                confidence=0.95,
                notes=(
                    f"Minor net contents difference: {app_parsed.value:g} vs "
                    f"{label_parsed.value:g} {app_parsed.unit}"
                ),
            )

    if abs(app_parsed.in_milliliters() - label_parsed.in_milliliters()) < UNIT_CONVERSION_TOLERANCE_ML:
        return Comparison(
            matches=True,
            confidence=0.90,
            notes=f"Matched after unit conversion: {application_contents} ≈ {label_contents}",
        )

    return Comparison(
        matches=False,
        confidence=0.0,
        notes=f"Net contents mismatch: {application_contents} vs {label_contents}",
    )


def compare_strings(app: str, label: str, threshold: float) -> Comparison:
    """Plain similarity comparison against a field-specific threshold."""
    score = similarity(app, label)
    return Comparison(
        matches=score >= threshold,
        confidence=score,
        notes=f'Values differ: "{app}" vs "{label}"' if score < threshold else None,
    )


def compare_exact(app: str, label: str) -> Comparison:
    """Exact string equality, no tolerance."""
    if app == label:
        return Comparison(matches=True, confidence=1.0)
    return Comparison(matches=False, confidence=0.0, notes=f"Mismatch: {app} vs {label}")


class FieldKind(str, Enum):
    """How a field is compared."""
    BRAND = "brand"
    ALCOHOL = "alcohol"
    NET_CONTENTS = "net_contents"
    STRING = "string"
    EXACT = "exact"


@dataclass(frozen=True)
class FieldSpec:
    """
    A compared field: its label, its attribute name and its comparison strategy.

    A mismatch whose confidence is at least ``review_floor`` goes to a human
    reviewer with ``review_reason``; any other mismatch is flagged with
    ``mismatch_issue``. A ``review_floor`` of None means mismatches are always
    flagged.
    """
    label: str
    attribute: str
    kind: FieldKind
    threshold: Optional[float] = None
    review_floor: Optional[float] = None
    mismatch_issue: str = ""
    review_reason: str = ""
    declared_only: bool = False  # compared only when the application declares it
    wine_only: bool = False

    def comparator(self, beverage_type: BeverageType) -> Comparator:
        if self.kind == FieldKind.BRAND:
            return compare_brand_names
        if self.kind == FieldKind.ALCOHOL:
            return lambda app, label: compare_alcohol_content(app, label, beverage_type)
        if self.kind == FieldKind.NET_CONTENTS:
            return lambda app, label: compare_net_contents(app, label, beverage_type)
        if self.kind == FieldKind.STRING:
            return lambda app, label: compare_strings(app, label, self.threshold)
        return compare_exact


def verify_field(
    field_name: str,
    application_value: Optional[str],
    label_value: Optional[str],
    compare: Comparator,
) -> FieldVerification:
    """
    Compare one field, short-circuiting unset or missing values.

    An empty application value asserts nothing and always matches; a declared
    value missing from the label never matches.
    """
    if not application_value:
        return FieldVerification(
            field=field_name,
            application_value="",
            label_value=label_value,
            matches=True,
            confidence=1.0,
            notes=NOT_SPECIFIED_NOTE,
        )

    if not label_value:
        return FieldVerification(
            field=field_name,
            application_value=application_value,
            label_value=None,
            matches=False,
            confidence=0.0,
            notes=NOT_FOUND_NOTE,
        )

    result = compare(application_value, label_value)
    logger.debug(
        f"{field_name}: '{application_value}' vs '{label_value}' -> "
        f"matches={result.matches} confidence={result.confidence:.2f}"
    )

    return FieldVerification(
        field=field_name,
        application_value=application_value,
        label_value=label_value,
        matches=result.matches,
        confidence=result.confidence,
        notes=result.notes,
    )
