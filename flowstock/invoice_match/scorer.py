"""
Hybrid Scorer - one confidence score per (candidate, inventory item) pair.

Cheap unambiguous checks run first and short-circuit:
1. identical after normalization -> EXACT_MATCH_SCORE
2. same synonym group            -> SYNONYM_MATCH_SCORE
3. strong containment            -> the containment score
4. otherwise the best of two edit/overlap blends, floored by containment
"""

from typing import Optional

from .config import (
    EDIT_LED_BLEND,
    EXACT_MATCH_SCORE,
    OVERLAP_LED_BLEND,
    SYNONYM_MATCH_SCORE,
    Config,
    default_config,
)
from .normalizer import normalize
from .similarity import containment, edit_similarity, word_overlap


def score(candidate_name: str, inventory_name: str, config: Optional[Config] = None) -> float:
    """
    Confidence that two ingredient names refer to the same ingredient.

    Args:
        candidate_name: Raw name extracted from the invoice
        inventory_name: Raw name of an inventory item
        config: Synonyms and settings (default: shipped config)

    Returns:
        Score in [0, 1]; 0.0 when either name normalizes to nothing
    """
    config = config or default_config()
    settings = config.settings

    a = normalize(candidate_name)
    b = normalize(inventory_name)
    if not a or not b:
        return 0.0

    if a == b:
        return EXACT_MATCH_SCORE

    if config.synonyms.synonyms_of(a) & config.synonyms.synonyms_of(b):
        return SYNONYM_MATCH_SCORE

    contained = containment(a, b)
    if contained > settings.containment_escalation:
        return contained

    overlap = word_overlap(a, b, token_threshold=settings.token_similarity_threshold)
    edit = edit_similarity(a, b)

    edit_led = edit * EDIT_LED_BLEND[0] + overlap * EDIT_LED_BLEND[1]
    overlap_led = edit * OVERLAP_LED_BLEND[0] + overlap * OVERLAP_LED_BLEND[1]
    return max(edit_led, overlap_led, contained)
