"""
String similarity scorers.

Three independent 0-1 scores over already-normalized names:
- edit_similarity: Levenshtein distance scaled by the longer string
- word_overlap: share of words that fuzzily appear on both sides
- containment: one name (or its words) literally inside the other
"""

from typing import Callable

from rapidfuzz.distance import Levenshtein

from .config import (
    FULL_CONTAINMENT_SCORE,
    MAX_NOISE_TOKEN_LENGTH,
    TOKEN_CONTAINMENT_WEIGHT,
    TOKEN_SIMILARITY_THRESHOLD,
)


def edit_similarity(a: str, b: str) -> float:
    """(max_len - distance) / max_len, 1.0 for two empty strings."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    distance = Levenshtein.distance(a, b)
    return (max_len - distance) / max_len


def tokenize(text: str) -> list[str]:
    """Unique whitespace tokens longer than the noise length, in order."""
    return list(dict.fromkeys(
        t for t in text.split() if len(t) > MAX_NOISE_TOKEN_LENGTH
    ))


def _count_from_smaller_side(
    tokens_a: list[str],
    tokens_b: list[str],
    related: Callable[[str, str], bool],
) -> int:
    """
    Count tokens of the smaller set related to some token of the other set.

    With equally sized sets both directions are counted and the higher
    count wins, so the result does not depend on argument order.
    """
    def count(source: list[str], target: list[str]) -> int:
        return sum(1 for s in source if any(related(s, t) for t in target))

    if len(tokens_a) < len(tokens_b):
        return count(tokens_a, tokens_b)
    if len(tokens_b) < len(tokens_a):
        return count(tokens_b, tokens_a)
    return max(count(tokens_a, tokens_b), count(tokens_b, tokens_a))


def word_overlap(a: str, b: str, token_threshold: float = TOKEN_SIMILARITY_THRESHOLD) -> float:
    """
    Fraction of words shared by both names, allowing small typos per word.

    Args:
        a, b: Normalized names
        token_threshold: edit_similarity needed for two words to match

    Returns:
        matched words / size of the larger word set, 0.0 if either is empty
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a or not tokens_b:
        return 0.0

    matched = _count_from_smaller_side(
        tokens_a, tokens_b,
        lambda x, y: edit_similarity(x, y) >= token_threshold,
    )
    return matched / max(len(tokens_a), len(tokens_b))


def containment(a: str, b: str) -> float:
    """
    Score one name being a more or less specific variant of the other.

    "mozzarella" inside "mozzarella galbani" scores FULL_CONTAINMENT_SCORE.
    Otherwise words are compared: a word counts when it is a substring of
    some word on the other side, or the other way round.
    """
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return FULL_CONTAINMENT_SCORE

    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a or not tokens_b:
        return 0.0

    contained = _count_from_smaller_side(
        tokens_a, tokens_b,
        lambda x, y: x in y or y in x,
    )
    if contained == 0:
        return 0.0
    return TOKEN_CONTAINMENT_WEIGHT * contained / min(len(tokens_a), len(tokens_b))
