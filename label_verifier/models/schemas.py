"""Pydantic schemas for verification records and API requests/responses."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BeverageType(str, Enum):
    """Regulatory beverage category of the application."""
    WINE = "wine"
    BEER = "beer"
    DISTILLED_SPIRITS = "distilled_spirits"


class ProducerRole(str, Enum):
    """Role statement preceding the producer name on the label."""
    BOTTLED_BY = "bottled_by"
    PRODUCED_BY = "produced_by"
    DISTILLED_BY = "distilled_by"
    IMPORTED_BY = "imported_by"
    BLENDED_BY = "blended_by"


class ImageQualityIssue(str, Enum):
    """Named image defects reported by the extraction service."""
    BLUR = "blur"
    LOW_RESOLUTION = "low_resolution"
    GLARE = "glare"
    ANGLE_DISTORTION = "angle_distortion"
    PARTIAL_OCCLUSION = "partial_occlusion"
    POOR_LIGHTING = "poor_lighting"
    OVERSATURATION = "oversaturation"
    TEXT_CUT_OFF = "text_cut_off"
    MULTIPLE_LABELS = "multiple_labels"


class VerificationStatus(str, Enum):
    """Final verdict of a label verification."""
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVIEW = "needs_review"


class ApplicationData(CamelModel):
    """Declared label contents from the COLA application."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "brandName": "OLD TOM DISTILLERY",
                "classType": "Kentucky Straight Bourbon Whiskey",
                "beverageType": "distilled_spirits",
                "alcoholContent": "45% Alc./Vol.",
                "proof": "90 Proof",
                "netContents": "750 mL",
                "producerName": "Old Tom Distillery",
                "producerAddress": "Bardstown, KY",
            }
        },
    )

    brand_name: str
    fanciful_name: Optional[str] = None
    class_type: str
    beverage_type: BeverageType = BeverageType.DISTILLED_SPIRITS
    alcohol_content: str
    proof: Optional[str] = None
    net_contents: str
    producer_name: str
    producer_address: str
    country_of_origin: Optional[str] = None
    vintage_year: Optional[str] = None
    appellation: Optional[str] = None
    health_claims_or_statements: Optional[str] = None
    contains_sulfites: Optional[bool] = None
    age_statement: Optional[str] = None


class GovernmentWarningDetails(CamelModel):
    """Formatting attributes of the warning asserted by the extraction service."""

    model_config = ConfigDict(frozen=True)

    prefix_in_all_caps: bool = False
    appears_bold: Optional[bool] = None  # None when it cannot be determined
    on_contrasting_background: Optional[bool] = None
    text_complete: bool = True
    issues: list[str] = Field(default_factory=list)


class ImageQualityAssessment(CamelModel):
    """Photograph quality report from the extraction service."""

    model_config = ConfigDict(frozen=True)

    overall_score: float = Field(0.8, ge=0.0, le=1.0)
    issues: list[ImageQualityIssue] = Field(default_factory=list)
    recommend_resubmit: bool = False
    details: Optional[str] = None


class ExtractedLabelData(CamelModel):
    """Fields read off the label photograph; absence means not legible or not present."""

    model_config = ConfigDict(frozen=True)

    brand_name: Optional[str] = None
    fanciful_name: Optional[str] = None
    class_type: Optional[str] = None
    alcohol_content: Optional[str] = None
    proof: Optional[str] = None
    net_contents: Optional[str] = None
    producer_name: Optional[str] = None
    producer_address: Optional[str] = None
    producer_role: Optional[ProducerRole] = None
    country_of_origin: Optional[str] = None
    government_warning: Optional[str] = None
    government_warning_format_correct: Optional[bool] = None
    government_warning_details: Optional[GovernmentWarningDetails] = None
    vintage_year: Optional[str] = None
    appellation: Optional[str] = None
    contains_sulfites: Optional[bool] = None
    age_statement: Optional[str] = None
    raw_text: Optional[str] = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    field_confidences: Optional[dict[str, float]] = None
    image_quality: Optional[ImageQualityAssessment] = None
    extraction_notes: Optional[str] = None


class FieldVerification(CamelModel):
    """Result of comparing one application field with its label counterpart."""
    field: str
    application_value: str
    label_value: Optional[str] = None
    matches: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    notes: Optional[str] = None


class WarningValidation(CamelModel):
    """Outcome of the government warning check."""
    present: bool
    correct: bool
    notes: Optional[str] = None
    issues: list[str] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class VerificationResult(CamelModel):
    """Overall verification verdict for a label."""
    id: str
    timestamp: datetime
    status: VerificationStatus
    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: float
    field_verifications: list[FieldVerification]
    government_warning_present: bool
    government_warning_correct: bool
    government_warning_notes: Optional[str] = None
    government_warning_issues: list[str] = Field(default_factory=list)
    extracted_data: ExtractedLabelData
    matched_fields: int
    total_fields: int
    flagged_issues: list[str]
    requires_human_review: bool
    human_review_reasons: list[str]
    image_quality_score: Optional[float] = None
    image_quality_issues: Optional[list[ImageQualityIssue]] = None
    meets_target_time: bool


class VerifyRequest(CamelModel):
    """Request body for single label verification.

    Exactly one of ``extracted_data`` (an already parsed record) or
    ``extraction_response`` (the raw reply of the image-understanding
    service) must be supplied.
    """
    application_data: ApplicationData
    extracted_data: Optional[ExtractedLabelData] = None
    extraction_response: Optional[str] = None
    processing_time_ms: Optional[float] = Field(None, ge=0)


class VerificationResponse(CamelModel):
    """Response for single label verification."""
    success: bool
    result: Optional[VerificationResult] = None
    error: Optional[str] = None


class BatchLabel(CamelModel):
    """One label of a batch request."""
    id: str
    application_data: ApplicationData
    extracted_data: Optional[ExtractedLabelData] = None
    extraction_response: Optional[str] = None
    processing_time_ms: Optional[float] = Field(None, ge=0)


class BatchVerifyRequest(CamelModel):
    """Request body for batch verification."""
    labels: list[BatchLabel]


class BatchItemResult(CamelModel):
    """Per-label batch outcome: a verdict on success, an error otherwise."""
    id: str
    success: bool
    result: Optional[VerificationResult] = None
    error: Optional[str] = None


class BatchSummary(CamelModel):
    """Aggregate counts for a batch run."""
    total: int
    succeeded: int
    failed: int
    approved: int
    rejected: int
    needs_review: int
    processing_time_ms: float
    avg_time_per_label_ms: float


class BatchVerificationResponse(CamelModel):
    """Response for batch verification."""
    success: bool
    job_id: str
    summary: BatchSummary
    results: list[BatchItemResult]


class ErrorResponse(CamelModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str
