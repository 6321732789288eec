"""Text normalization and string similarity for label comparison."""

import re

from rapidfuzz.distance import Levenshtein


# Curly quotes, backtick and acute accent all stand in for an apostrophe on labels
_SINGLE_QUOTES = re.compile("[‘’‚‛`´]")
_DOUBLE_QUOTES = re.compile("[“”„‟]")
_DASHES = re.compile("[–—]")
_WHITESPACE = re.compile(r"\s+")
_POSSESSIVE = re.compile(r"'s\b")

# Common OCR character confusions, each tried on its own
OCR_SUBSTITUTIONS = (
    ("0", "o"),
    ("o", "0"),
    ("1", "l"),
    ("1", "i"),
    ("l", "1"),
    ("i", "1"),
    ("5", "s"),
    ("s", "5"),
    ("8", "b"),
    ("b", "8"),
    ("rn", "m"),
    ("m", "rn"),
)


def normalize(text: str) -> str:
    """
    Canonicalize text for comparison.

    Lower-cases, maps quote and dash glyphs to ASCII, expands the
    ellipsis glyph and collapses whitespace.
    """
    text = text.lower()
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _DASHES.sub("-", text)
    text = text.replace("…", "...")
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity between two strings.

    Returns:
        1.0 for identical normalized text, 0.0 if either side is empty,
        otherwise 1 - distance / longest length.
    """
    a_norm = normalize(a)
    b_norm = normalize(b)

    if a_norm == b_norm:
        return 1.0
    if not a_norm or not b_norm:
        return 0.0

    distance = Levenshtein.distance(a_norm, b_norm)
    return 1.0 - distance / max(len(a_norm), len(b_norm))


def _normalize_for_ocr(text: str) -> str:
    return _POSSESSIVE.sub("s", normalize(text))


def semantically_equal(a: str, b: str) -> bool:
    """
    Check equivalence modulo case, possessives and single OCR glyph confusions.

    "STONE'S THROW" equals "Stones Throw"; "0LD TOM" equals "OLD TOM".
    Each substitution is applied to the first string alone, never combined.
    """
    a_norm = _normalize_for_ocr(a)
    b_norm = _normalize_for_ocr(b)

    if a_norm == b_norm:
        return True

    for source, replacement in OCR_SUBSTITUTIONS:
        if source in a_norm and a_norm.replace(source, replacement) == b_norm:
            return True

    return False
