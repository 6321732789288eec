"""Pydantic models for verification records and request/response schemas."""

from .schemas import (
    BeverageType,
    ProducerRole,
    ImageQualityIssue,
    VerificationStatus,
    ApplicationData,
    GovernmentWarningDetails,
    ImageQualityAssessment,
    ExtractedLabelData,
    FieldVerification,
    WarningValidation,
    VerificationResult,
    VerifyRequest,
    VerificationResponse,
    BatchLabel,
    BatchVerifyRequest,
    BatchItemResult,
    BatchSummary,
    BatchVerificationResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "BeverageType",
    "ProducerRole",
    "ImageQualityIssue",
    "VerificationStatus",
    "ApplicationData",
    "GovernmentWarningDetails",
    "ImageQualityAssessment",
    "ExtractedLabelData",
    "FieldVerification",
    "WarningValidation",
    "VerificationResult",
    "VerifyRequest",
    "VerificationResponse",
    "BatchLabel",
    "BatchVerifyRequest",
    "BatchItemResult",
    "BatchSummary",
    "BatchVerificationResponse",
    "ErrorResponse",
    "HealthResponse",
]
