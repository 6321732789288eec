"""Shared fixtures for label verification tests."""

import pytest

from label_verifier.models import ApplicationData, ExtractedLabelData
from label_verifier.services.rules import GOVERNMENT_WARNING_TEXT


@pytest.fixture
def warning_text():
    """The mandated health warning, verbatim."""
    return GOVERNMENT_WARNING_TEXT


@pytest.fixture
def application():
    """A bourbon application with every required field declared."""
    return ApplicationData(
        brand_name="OLD TOM DISTILLERY",
        class_type="Kentucky Straight Bourbon Whiskey",
        alcohol_content="45% Alc./Vol. (90 Proof)",
        proof="90 Proof",
        net_contents="750 mL",
        producer_name="Old Tom Distillery",
        producer_address="Bardstown, Kentucky",
    )


@pytest.fixture
def make_extracted():
    """Factory for extraction records that match the application fixture."""
    def _make(**overrides) -> ExtractedLabelData:
        values = {
            "brand_name": "OLD TOM DISTILLERY",
            "class_type": "Kentucky Straight Bourbon Whiskey",
            "alcohol_content": "45% Alc./Vol. (90 Proof)",
            "net_contents": "750 mL",
            "producer_name": "Old Tom Distillery",
            "producer_address": "Bardstown, Kentucky",
            "government_warning": GOVERNMENT_WARNING_TEXT,
            "confidence": 0.95,
        }
        values.update(overrides)
        return ExtractedLabelData(**values)

    return _make


@pytest.fixture
def extraction_payload():
    """Factory for camelCase extraction replies as the extraction service sends them."""
    def _make(**overrides) -> dict:
        payload = {
            "brandName": "OLD TOM DISTILLERY",
            "classType": "Kentucky Straight Bourbon Whiskey",
            "alcoholContent": "45% Alc./Vol. (90 Proof)",
            "netContents": "750 mL",
            "producerName": "Old Tom Distillery",
            "producerAddress": "Bardstown, Kentucky",
            "governmentWarning": GOVERNMENT_WARNING_TEXT,
            "confidence": 0.95,
        }
        payload.update(overrides)
        return payload

    return _make
