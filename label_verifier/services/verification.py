"""Decision engine: compares an application with extracted label data and issues a verdict."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..config import Settings, get_settings
from ..models import (
    ApplicationData,
    BeverageType,
    ExtractedLabelData,
    FieldVerification,
    VerificationResult,
    VerificationStatus,
    WarningValidation,
)
from .comparators import FieldKind, FieldSpec, verify_field
from .parsing import parse_net_contents
from .rules import is_standard_fill_size
from .warning import validate_government_warning_enhanced

logger = logging.getLogger(__name__)

BRAND_FIELD = "Brand Name"
ALCOHOL_FIELD = "Alcohol Content"


class VerificationService:
    """
    Conservative label verifier.

    False negatives are acceptable (a human reviews them); false positives
    are not. Approval is only reachable when every field matched, the warning
    is correct, confidence is high and nothing asked for review.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.fields = self._build_field_specs()

    def _build_field_specs(self) -> tuple[FieldSpec, ...]:
        s = self.settings
        return (
            FieldSpec(
                label=BRAND_FIELD,
                attribute="brand_name",
                kind=FieldKind.BRAND,
                review_floor=s.brand_review_threshold,
                mismatch_issue="Brand name mismatch",
                review_reason="Brand name requires review: similar but not exact match ({confidence:.0%} similar)",
            ),
            FieldSpec(
                label="Class/Type",
                attribute="class_type",
                kind=FieldKind.STRING,
                threshold=s.class_type_match_threshold,
                review_floor=s.class_type_review_threshold,
                mismatch_issue="Class/type mismatch",
                review_reason="Class/type requires review",
            ),
            FieldSpec(
                label=ALCOHOL_FIELD,
                attribute="alcohol_content",
                kind=FieldKind.ALCOHOL,
                mismatch_issue="Alcohol content mismatch",
            ),
            FieldSpec(
                label="Net Contents",
                attribute="net_contents",
                kind=FieldKind.NET_CONTENTS,
                mismatch_issue="Net contents mismatch",
            ),
            FieldSpec(
                label="Producer Name",
                attribute="producer_name",
                kind=FieldKind.STRING,
                threshold=s.producer_match_threshold,
                review_floor=s.producer_review_threshold,
                mismatch_issue="Producer name mismatch",
                review_reason="Producer name requires review",
            ),
            FieldSpec(
                label="Country of Origin",
                attribute="country_of_origin",
                kind=FieldKind.STRING,
                threshold=s.country_match_threshold,
                mismatch_issue="Country of origin mismatch",
                declared_only=True,
            ),
            FieldSpec(
                label="Vintage Year",
                attribute="vintage_year",
                kind=FieldKind.EXACT,
                mismatch_issue="Vintage year mismatch",
                declared_only=True,
                wine_only=True,
            ),
            FieldSpec(
                label="Appellation",
                attribute="appellation",
                kind=FieldKind.STRING,
                threshold=s.appellation_match_threshold,
                review_floor=0.0,
                review_reason="Appellation requires review",
                declared_only=True,
                wine_only=True,
            ),
        )

    def verify(
        self,
        application: ApplicationData,
        extracted: ExtractedLabelData,
        processing_time_ms: float,
    ) -> VerificationResult:
        """
        Verify extracted label data against the application.

        Args:
            application: Declared label contents
            extracted: Fields read off the label photograph
            processing_time_ms: Elapsed time measured by the caller

        Returns:
            VerificationResult with per-field detail and the final status
        """
        beverage_type = application.beverage_type
        field_verifications: list[FieldVerification] = []
        flagged_issues: list[str] = []
        review_reasons: list[str] = []

        # Field comparisons
        for spec in self.fields:
            if spec.wine_only and beverage_type != BeverageType.WINE:
                continue
            application_value = getattr(application, spec.attribute)
            if spec.declared_only and not application_value:
                continue

            verification = verify_field(
                spec.label,
                application_value,
                getattr(extracted, spec.attribute),
                spec.comparator(beverage_type),
            )
            field_verifications.append(verification)

            if not verification.matches:
                self._route_mismatch(spec, verification, flagged_issues, review_reasons)

        # Advisory check on the application itself
        size_note = self._non_standard_size_reason(application)
        if size_note:
            review_reasons.append(size_note)

        # Government warning
        warning = validate_government_warning_enhanced(extracted)
        if not warning.present:
            flagged_issues.append("Government warning not present")
        elif not warning.correct:
            if warning.confidence >= self.settings.warning_review_similarity:
                review_reasons.append("Government warning requires review: minor formatting issues")
                flagged_issues.append("Government warning format/text issue")
            else:
                flagged_issues.append("Government warning format/text incorrect")

        # Image quality
        quality_note = self._image_quality_reason(extracted)
        if quality_note:
            review_reasons.append(quality_note)

        # Aggregate confidence: weakest link of field and extraction confidence
        matched_fields = sum(1 for f in field_verifications if f.matches)
        total_fields = len(field_verifications)
        avg_field_confidence = sum(f.confidence for f in field_verifications) / total_fields
        overall_confidence = min(avg_field_confidence, extracted.confidence)

        status = self._decide(
            field_verifications,
            warning,
            matched_fields,
            total_fields,
            overall_confidence,
            review_reasons,
        )

        meets_target_time = processing_time_ms <= self.settings.target_time_ms
        if not meets_target_time:
            logger.warning(f"Verification exceeded {self.settings.target_time_ms}ms target: {processing_time_ms:.0f}ms")

        logger.info(
            f"Verdict {status.value}: {matched_fields}/{total_fields} fields matched, "
            f"confidence {overall_confidence:.2f}, {len(flagged_issues)} flagged, "
            f"{len(review_reasons)} review reason(s)"
        )

        image_quality = extracted.image_quality
        return VerificationResult(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            status=status,
            overall_confidence=overall_confidence,
            processing_time_ms=processing_time_ms,
            field_verifications=field_verifications,
            government_warning_present=warning.present,
            government_warning_correct=warning.correct,
            government_warning_notes=warning.issues[0] if warning.issues else None,
            government_warning_issues=warning.issues,
            extracted_data=extracted,
            matched_fields=matched_fields,
            total_fields=total_fields,
            flagged_issues=flagged_issues,
            requires_human_review=len(review_reasons) > 0,
            human_review_reasons=review_reasons,
            image_quality_score=image_quality.overall_score if image_quality else None,
            image_quality_issues=list(image_quality.issues) if image_quality else None,
            meets_target_time=meets_target_time,
        )

    def _route_mismatch(
        self,
        spec: FieldSpec,
        verification: FieldVerification,
        flagged_issues: list[str],
        review_reasons: list[str],
    ) -> None:
        """Send a non-matching field to review or to the flagged issues."""
        if spec.review_floor is not None and verification.confidence >= spec.review_floor:
            review_reasons.append(spec.review_reason.format(confidence=verification.confidence))
        else:
            flagged_issues.append(spec.mismatch_issue)

    def _non_standard_size_reason(self, application: ApplicationData) -> Optional[str]:
        if not application.net_contents:
            return None
        parsed = parse_net_contents(application.net_contents)
        if not parsed.value:
            return None
        if is_standard_fill_size(application.beverage_type, parsed.in_milliliters()):
            return None
        return f"Non-standard container size: {application.net_contents}"

    def _image_quality_reason(self, extracted: ExtractedLabelData) -> Optional[str]:
        quality = extracted.image_quality
        if quality is None:
            return None
        if quality.recommend_resubmit:
            defects = ", ".join(issue.value for issue in quality.issues)
            return f"Image quality issues: {defects}"
        if quality.issues and quality.overall_score < self.settings.image_quality_review_score:
            return f"Low image quality may affect accuracy ({quality.overall_score:.0%})"
        return None

    def _has_critical_failure(
        self,
        field_verifications: list[FieldVerification],
        warning: WarningValidation,
    ) -> bool:
        """Warning absent or badly wrong, brand clearly different, or alcohol content off."""
        brand = next((f for f in field_verifications if f.field == BRAND_FIELD), None)
        alcohol = next((f for f in field_verifications if f.field == ALCOHOL_FIELD), None)

        return any((
            not warning.present,
            not warning.correct and warning.confidence < self.settings.warning_review_similarity,
            brand is not None and not brand.matches and brand.confidence < self.settings.brand_review_threshold,
            alcohol is not None and not alcohol.matches,
        ))

    def _decide(
        self,
        field_verifications: list[FieldVerification],
        warning: WarningValidation,
        matched_fields: int,
        total_fields: int,
        overall_confidence: float,
        review_reasons: list[str],
    ) -> VerificationStatus:
        """Apply the ordered decision policy. May append to review_reasons."""
        s = self.settings

        if self._has_critical_failure(field_verifications, warning):
            if overall_confidence >= s.medium_confidence and review_reasons:
                if not any("Critical" in reason for reason in review_reasons):
                    review_reasons.append("Critical fields may have issues but confidence is moderate")
                return VerificationStatus.NEEDS_REVIEW
            return VerificationStatus.REJECTED

        if (
            matched_fields == total_fields
            and warning.correct
            and overall_confidence >= s.auto_approval_minimum
            and not review_reasons
        ):
            return VerificationStatus.APPROVED

        if overall_confidence < s.human_review_threshold or review_reasons:
            if overall_confidence < s.human_review_threshold and not any(
                "confidence" in reason for reason in review_reasons
            ):
                review_reasons.append(f"Low confidence score: {overall_confidence:.1%}")
            return VerificationStatus.NEEDS_REVIEW

        if matched_fields >= total_fields * 0.8 and warning.correct:
            review_reasons.append("Some fields require human verification")
            return VerificationStatus.NEEDS_REVIEW

        return VerificationStatus.REJECTED


def verify_label(
    application: ApplicationData,
    extracted: ExtractedLabelData,
    processing_time_ms: float,
) -> VerificationResult:
    """Verify one label with the configured thresholds."""
    return VerificationService().verify(application, extracted, processing_time_ms)
