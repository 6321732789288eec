"""Adapter from the image-understanding service's reply to ExtractedLabelData.

The service answers with JSON (sometimes wrapped in a markdown code block)
and marks unreadable fields with sentinel strings. This module is the only
place those sentinels are turned into absence; the engine never sees them.
"""

import json
import logging
import re
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ..models import BeverageType, ExtractedLabelData, ImageQualityIssue, ProducerRole

logger = logging.getLogger(__name__)

# Values the service uses for "not present" / "not legible"
SENTINEL_VALUES = {"", "NOT_FOUND", "NOT_READABLE", "null"}

# Used when the service omits its own confidence
DEFAULT_CONFIDENCE = 0.8
DEFAULT_IMAGE_QUALITY_SCORE = 0.8

STRING_FIELDS = (
    "brandName",
    "fancifulName",
    "classType",
    "alcoholContent",
    "proof",
    "netContents",
    "producerName",
    "producerAddress",
    "countryOfOrigin",
    "governmentWarning",
    "vintageYear",
    "appellation",
    "ageStatement",
    "rawText",
    "extractionNotes",
)

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

# Wine terms are checked first since some overlap with beer styles
WINE_INDICATORS = (
    "wine", "champagne", "prosecco", "cava", "sparkling",
    "cabernet", "merlot", "chardonnay", "pinot", "sauvignon",
    "riesling", "zinfandel", "syrah", "shiraz", "malbec",
    "sangiovese", "tempranillo", "moscato", "gewürztraminer",
    "port", "sherry", "madeira", "marsala", "vermouth",
)

BEER_INDICATORS = (
    "beer", "ale", "lager", "stout", "porter", "pilsner", "pilsener",
    "ipa", "india pale", "hefeweizen", "wheat beer", "witbier",
    "bock", "dunkel", "märzen", "oktoberfest", "kolsch", "kölsch",
    "saison", "farmhouse", "gose", "sour", "lambic",
    "malt beverage", "malt liquor", "hard seltzer", "hard cider",
)


class ExtractionParseError(ValueError):
    """Raised when an extraction reply cannot be turned into a record."""


def clean_value(value: Any) -> Optional[str]:
    """Strip a field value, mapping sentinels and blanks to None."""
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        if cleaned in SENTINEL_VALUES:
            return None
        return cleaned
    return str(value)


def _load_json(content: str) -> dict:
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        logger.warning(f"Direct JSON parse failed ({len(content)} chars), attempting fallback extraction")

    block = _CODE_BLOCK.search(content)
    if block:
        candidate = block.group(1)
    else:
        obj = _JSON_OBJECT.search(content)
        candidate = obj.group(0) if obj else content

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionParseError("Could not parse JSON from extraction response") from e


def _image_quality(raw: Optional[Mapping[str, Any]]) -> Optional[dict]:
    if not raw:
        return None

    known = {issue.value for issue in ImageQualityIssue}
    issues = []
    for issue in raw.get("issues") or []:
        if isinstance(issue, str) and issue in known:
            issues.append(issue)
        else:
            logger.warning(f"Ignoring unknown image quality issue: {issue!r}")

    score = raw.get("overallScore")
    return {
        "overallScore": DEFAULT_IMAGE_QUALITY_SCORE if score is None else score,
        "issues": issues,
        "recommendResubmit": bool(raw.get("recommendResubmit", False)),
        "details": clean_value(raw.get("details")),
    }


def _warning_details(raw: Optional[Mapping[str, Any]]) -> Optional[dict]:
    if not raw:
        return None
    text_complete = raw.get("textComplete")
    return {
        "prefixInAllCaps": bool(raw.get("prefixInAllCaps", False)),
        "appearsBold": raw.get("appearsBold"),
        "onContrastingBackground": raw.get("onContrastingBackground"),
        "textComplete": True if text_complete is None else bool(text_complete),
        "issues": list(raw.get("issues") or []),
    }


def _producer_role(raw: Any) -> Optional[str]:
    if not raw:
        return None
    if not isinstance(raw, str) or raw not in {role.value for role in ProducerRole}:
        logger.warning(f"Ignoring unknown producer role: {raw!r}")
        return None
    return raw


def to_extracted_label_data(parsed: Mapping[str, Any]) -> ExtractedLabelData:
    """
    Build an ExtractedLabelData record from the service's decoded JSON.

    Raises:
        ExtractionParseError: if the cleaned record fails validation
    """
    record: dict[str, Any] = {name: clean_value(parsed.get(name)) for name in STRING_FIELDS}

    record["governmentWarningDetails"] = _warning_details(parsed.get("governmentWarningDetails"))
    record["governmentWarningFormatCorrect"] = parsed.get("governmentWarningFormatCorrect")

    record["producerRole"] = _producer_role(parsed.get("producerRole"))
    record["containsSulfites"] = parsed.get("containsSulfites")
    record["imageQuality"] = _image_quality(parsed.get("imageQuality"))
    record["fieldConfidences"] = parsed.get("fieldConfidences")

    confidence = parsed.get("confidence")
    record["confidence"] = DEFAULT_CONFIDENCE if confidence is None else confidence

    try:
        return ExtractedLabelData.model_validate(record)
    except ValidationError as e:
        raise ExtractionParseError(f"Invalid extraction record: {e.error_count()} validation error(s)") from e


def parse_extraction_response(content: str) -> ExtractedLabelData:
    """
    Parse the raw text reply of the image-understanding service.

    Args:
        content: JSON text, optionally wrapped in a markdown code block

    Returns:
        ExtractedLabelData with sentinel values cleaned to None
    """
    parsed = _load_json(content)
    if not isinstance(parsed, dict):
        raise ExtractionParseError("Extraction response is not a JSON object")
    return to_extracted_label_data(parsed)


def _mentions(text: str, term: str) -> bool:
    return re.search(rf"\b{re.escape(term)}\b", text) is not None


def infer_beverage_type(class_type: Optional[str]) -> BeverageType:
    """Guess the beverage category from a class/type designation."""
    if not class_type:
        return BeverageType.DISTILLED_SPIRITS

    lower = class_type.lower()
    if any(_mentions(lower, indicator) for indicator in WINE_INDICATORS):
        return BeverageType.WINE
    if any(_mentions(lower, indicator) for indicator in BEER_INDICATORS):
        return BeverageType.BEER
    return BeverageType.DISTILLED_SPIRITS
