"""Strict validation of the mandatory government health warning."""

from typing import Optional
import logging

from ..config import get_settings
from ..models import ExtractedLabelData, WarningValidation
from .normalization import normalize, similarity
from .rules import (
    GOVERNMENT_WARNING_PREFIX,
    GOVERNMENT_WARNING_REQUIRED_PHRASES,
    GOVERNMENT_WARNING_TEXT,
)

logger = logging.getLogger(__name__)

ALL_CAPS_ISSUE = '"GOVERNMENT WARNING:" must be in ALL CAPS'


def _diagnose_prefix(warning_text: str) -> str:
    """Describe why a case-insensitive 'government warning' is not the required prefix."""
    if "Government Warning:" in warning_text:
        return f'{ALL_CAPS_ISSUE} (found "Government Warning:" in title case)'
    if "government warning:" in warning_text:
        return f"{ALL_CAPS_ISSUE} (found lowercase)"
    if "GOVERNMENT WARNING" in warning_text:
        return 'Missing colon after "GOVERNMENT WARNING"'
    return ALL_CAPS_ISSUE


def _warning_similarity(warning_text: str) -> float:
    return similarity(normalize(warning_text), normalize(GOVERNMENT_WARNING_TEXT))


def validate_government_warning(warning_text: Optional[str]) -> WarningValidation:
    """
    Validate warning text against the mandated statement.

    The prefix "GOVERNMENT WARNING:" is checked case-sensitively; the body is
    checked for the required phrases and for similarity to the canonical text.
    """
    settings = get_settings()
    issues: list[str] = []

    if not warning_text or not warning_text.strip():
        return WarningValidation(
            present=False,
            correct=False,
            notes="Government warning not found on label",
            issues=["Government warning text not found"],
        )

    if GOVERNMENT_WARNING_PREFIX not in warning_text:
        if "government warning" in warning_text.lower():
            issues.append(_diagnose_prefix(warning_text))
            return WarningValidation(present=True, correct=False, notes=issues[0], issues=issues)

        return WarningValidation(
            present=False,
            correct=False,
            notes="Government warning prefix not found",
            issues=[f'Government warning prefix "{GOVERNMENT_WARNING_PREFIX}" not found'],
        )

    normalized_warning = normalize(warning_text)
    missing_phrases = [
        phrase for phrase in GOVERNMENT_WARNING_REQUIRED_PHRASES
        if phrase not in normalized_warning
    ]
    if missing_phrases:
        listed = ", ".join(missing_phrases[:3])
        suffix = "..." if len(missing_phrases) > 3 else ""
        issues.append(f"Missing required phrases: {listed}{suffix}")

    score = _warning_similarity(warning_text)

    if score >= settings.warning_min_similarity:
        return WarningValidation(present=True, correct=True, issues=issues)

    if score >= settings.warning_review_similarity:
        issues.append(f"Warning text {score:.0%} similar to required text")
        return WarningValidation(
            present=True,
            correct=False,
            notes="Government warning text differs slightly from required text",
            issues=issues,
        )

    if score >= settings.warning_partial_similarity:
        issues.append(f"Warning text only {score:.0%} similar to required text")
        return WarningValidation(
            present=True,
            correct=False,
            notes="Government warning text differs from required text",
            issues=issues,
        )

    issues.append(f"Warning text significantly different ({score:.0%} match)")
    return WarningValidation(
        present=True,
        correct=False,
        notes="Government warning text significantly differs from required text",
        issues=issues,
    )


def validate_government_warning_enhanced(extracted: ExtractedLabelData) -> WarningValidation:
    """
    Validate the warning text and fold in formatting flags from extraction.

    Text similarity and the asserted formatting attributes are independent
    signals; both must be clean for the warning to be correct. Bold and
    contrast only count when explicitly asserted False. Without a details
    record, the extraction service's own format flag stands in for them.
    """
    basic = validate_government_warning(extracted.government_warning)
    issues = list(basic.issues)

    if not basic.present:
        return WarningValidation(
            present=False,
            correct=False,
            notes=basic.notes,
            issues=issues or ["Government warning not found"],
            confidence=0.0,
        )

    details = extracted.government_warning_details
    if details is not None:
        if not details.prefix_in_all_caps and not any("ALL CAPS" in issue for issue in issues):
            issues.append('"GOVERNMENT WARNING:" prefix not in ALL CAPS')
        if details.appears_bold is False:
            issues.append('"GOVERNMENT WARNING:" should be in bold type (flagged for review)')
        if details.on_contrasting_background is False:
            issues.append("Government warning is not on a contrasting background")
        if not details.text_complete:
            issues.append("Government warning text appears incomplete")
        issues.extend(issue for issue in details.issues if issue not in issues)
    elif extracted.government_warning_format_correct is False:
        issues.append("Government warning formatting flagged as incorrect by extraction")

    correct = basic.correct and not issues
    if basic.correct and issues:
        logger.info(f"Warning text matches but {len(issues)} issue(s) block approval")

    return WarningValidation(
        present=True,
        correct=correct,
        notes=issues[0] if issues else basic.notes,
        issues=issues,
        confidence=_warning_similarity(extracted.government_warning),
    )
