"""
Ingredient name normalizer.

Invoice lines arrive with diacritics, pack sizes and fat percentages baked
into the name ("Brânză Telemea 45% 1kg"). Matching only cares about the
words, so everything else is stripped:

    >>> normalize("Brânză Telemea 45% 1kg")
    'branza telemea'
"""

import re
import unicodedata
from functools import lru_cache

# Unit abbreviations that show up glued to quantities in extracted names
UNIT_ABBREVIATIONS = ("kg", "gr", "g", "ml", "l", "buc")

# Letters NFD does not split into base letter + combining mark
FALLBACK_LETTERS = {
    "ß": "ss",
    "ø": "o",
    "Ø": "O",
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ł": "l",
    "Ł": "L",
    "đ": "d",
    "Đ": "D",
}

_FALLBACK_TABLE = str.maketrans(FALLBACK_LETTERS)
_WHITESPACE_RE = re.compile(r"\s+")
_PERCENT_RE = re.compile(r"\d+(?:[.,]\d+)?%")
# Optional "2x" multiplier for multipacks ("2x0,5l")
_QUANTITY_RE = re.compile(
    r"(?:\d+\s*x\s*)?\d+(?:[.,]\d+)?\s*(?:" + "|".join(UNIT_ABBREVIATIONS) + r")\b"
)
_DISALLOWED_RE = re.compile(r"[^a-z0-9 ]")


def strip_diacritics(text: str) -> str:
    """Reduce accented letters to their base Latin letter (ș -> s, Ă -> A)."""
    text = text.translate(_FALLBACK_TABLE)
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@lru_cache(maxsize=4096)
def normalize(name: str) -> str:
    """
    Normalize an ingredient name for comparison.

    Args:
        name: Raw ingredient name from an invoice or the inventory

    Returns:
        Lowercase ASCII name with quantities, percentages and punctuation
        removed. Empty string for empty or all-punctuation input.
    """
    if not name:
        return ""

    text = strip_diacritics(name).lower()
    text = _WHITESPACE_RE.sub(" ", text)
    text = _PERCENT_RE.sub("", text)
    text = _QUANTITY_RE.sub("", text)
    text = _DISALLOWED_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()
