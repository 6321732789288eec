"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LABEL_VERIFIER_",
        extra="ignore",
    )

    # App settings
    app_name: str = "Label Verification API"
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Overall confidence thresholds
    auto_approval_minimum: float = 0.85
    human_review_threshold: float = 0.75  # Below this always goes to a reviewer
    medium_confidence: float = 0.70

    # Brand name matching
    brand_high_similarity_threshold: float = 0.90  # Accept with a note
    brand_review_threshold: float = 0.70  # Flag for review, not rejection

    # Generic string field thresholds
    class_type_match_threshold: float = 0.85
    class_type_review_threshold: float = 0.70
    producer_match_threshold: float = 0.80
    producer_review_threshold: float = 0.60
    country_match_threshold: float = 0.90
    appellation_match_threshold: float = 0.85

    # Government warning
    warning_min_similarity: float = 0.95
    warning_review_similarity: float = 0.85
    warning_partial_similarity: float = 0.70

    # Image quality
    image_quality_review_score: float = 0.70

    # Processing time target per label
    target_time_ms: int = 5000

    # Batch processing
    max_batch_size: int = 50
    batch_max_workers: int = 5  # Extraction service rate limit


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
