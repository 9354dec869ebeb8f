"""
Invoice Matcher - Core reconciliation engine.

Matches ingredient lines extracted from a supplier invoice against the
restaurant's existing inventory.

Decision Matrix:
| Any item >= threshold? | Best >= auto-accept? | Runner-up near-tie? | Result |
|------------------------|----------------------|---------------------|--------|
| ✗                      | -                    | -                   | NEW_INGREDIENT |
| ✓                      | ✗                    | -                   | NEEDS_CONFIRMATION |
| ✓                      | ✓                    | ✓                   | NEEDS_CONFIRMATION |
| ✓                      | ✓                    | ✗                   | AUTO_MATCH |

Every candidate is matched independently: two invoice lines may both point
at the same inventory item. Nothing here mutates the inventory, so callers
are free to split a batch across threads.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from .candidates import coerce_candidate
from .config import SCORE_PRECISION, Config, MatchSettings, default_config
from .models import (
    ExtractedCandidate,
    InventoryItem,
    MatchCandidate,
    MatchDecision,
    MatchResult,
    MatchSelection,
)
from .scorer import score

logger = logging.getLogger(__name__)


def match_one(
    name: str,
    inventory: Iterable[InventoryItem],
    threshold: Optional[float] = None,
    config: Optional[Config] = None,
) -> MatchSelection:
    """
    Rank inventory items against one extracted ingredient name.

    Args:
        name: Ingredient name as extracted from the invoice
        inventory: Snapshot of the inventory, not mutated
        threshold: Minimum score to retain an item (default from settings, 0.75)
        config: Synonyms and settings (default: shipped config)

    Returns:
        MatchSelection with up to max_matches items, best first. Items with
        equal scores keep their inventory order.
    """
    config = config or default_config()
    settings = config.settings
    if threshold is None:
        threshold = settings.inclusion_threshold

    scored = []
    for position, item in enumerate(inventory):
        item_score = score(name, item.name, config)
        # A zero score is never a match, even with threshold=0
        if item_score > 0 and item_score >= threshold:
            scored.append((item_score, position, item))

    scored.sort(key=lambda entry: (-entry[0], entry[1]))
    retained = [MatchCandidate(item=item, score=s) for s, _, item in scored]

    if not retained:
        return MatchSelection()

    best = retained[0]
    return MatchSelection(
        matches=retained[:settings.max_matches],
        best_match=best.item,
        confidence=best.score,
        needs_confirmation=_needs_confirmation(retained, settings),
    )


def _needs_confirmation(retained: list[MatchCandidate], settings: MatchSettings) -> bool:
    """Low best score or a runner-up too close to call."""
    if not retained:
        return True
    best = retained[0].score
    if best < settings.auto_accept_threshold:
        return True
    if len(retained) > 1 and _is_near_tie(best, retained[1].score, settings):
        return True
    return False


def _is_near_tie(best: float, runner_up: float, settings: MatchSettings) -> bool:
    return round(best - runner_up, SCORE_PRECISION) < settings.near_tie_gap


def match_many(
    candidates: Iterable[Union[ExtractedCandidate, Mapping[str, Any]]],
    inventory: Iterable[InventoryItem],
    threshold: Optional[float] = None,
    config: Optional[Config] = None,
) -> list[MatchResult]:
    """
    Match every extracted invoice line against the inventory.

    Args:
        candidates: ExtractedCandidate objects or dicts with name, quantity,
            unit and optional price_per_unit
        inventory: Inventory snapshot shared by all candidates
        threshold: Minimum score to retain an item (default from settings)
        config: Synonyms and settings (default: shipped config)

    Returns:
        One MatchResult per candidate, in input order
    """
    config = config or default_config()
    if threshold is None:
        threshold = config.settings.inclusion_threshold

    # Inventory is walked once per candidate
    inventory = tuple(inventory)

    results = []
    for raw in candidates:
        candidate = coerce_candidate(raw)
        selection = match_one(candidate.name, inventory, threshold, config)
        result = MatchResult(
            extracted_name=candidate.name,
            quantity=candidate.quantity,
            unit=candidate.unit,
            price_per_unit=candidate.price_per_unit,
            matched_item=selection.best_match,
            alternative_matches=selection.alternatives,
            confidence=selection.confidence,
            needs_confirmation=selection.needs_confirmation,
            is_new_ingredient=selection.best_match is None,
            reason=_explain(selection, threshold, config.settings),
        )
        logger.debug(
            f"{candidate.name!r} -> {result.decision.value} "
            f"({result.confidence:.2f}) {result.reason}"
        )
        results.append(result)

    summary = summarize_results(results)
    logger.info(
        f"Matched {summary['total']} invoice lines: "
        f"{summary['auto_matched']} auto, "
        f"{summary['needs_confirmation']} to confirm, "
        f"{summary['new_ingredients']} new"
    )
    return results


def _explain(selection: MatchSelection, threshold: float, settings: MatchSettings) -> str:
    """Human-readable reason for the decision."""
    if selection.best_match is None:
        return f"No inventory item scored {threshold:.2f} or higher"

    if selection.confidence < settings.auto_accept_threshold:
        return (
            f"Best score {selection.confidence:.2f} is below auto-accept "
            f"{settings.auto_accept_threshold:.2f}"
        )

    if selection.needs_confirmation:
        if selection.alternatives:
            runner_up = selection.alternatives[0]
            return f"'{runner_up.item.name}' scored {runner_up.score:.2f}, too close to call"
        return "Another item scored too close to call"

    return f"Confident match on '{selection.best_match.name}'"


def sort_results_for_review(results: list[MatchResult]) -> list[MatchResult]:
    """
    Sort results for human review.

    Priority order (most actionable first):
    1. NEW_INGREDIENT - will create an inventory row
    2. NEEDS_CONFIRMATION - pick one of the suggestions
    3. AUTO_MATCH - no action needed
    Within a group, invoice order is kept.
    """
    decision_order = {
        MatchDecision.NEW_INGREDIENT: 0,
        MatchDecision.NEEDS_CONFIRMATION: 1,
        MatchDecision.AUTO_MATCH: 2,
    }
    return sorted(results, key=lambda r: decision_order.get(r.decision, 99))


def filter_needs_review(results: list[MatchResult]) -> list[MatchResult]:
    """Filter to results a person has to look at (exclude AUTO_MATCH)."""
    return [r for r in results if r.decision != MatchDecision.AUTO_MATCH]


def group_results_by_decision(results: list[MatchResult]) -> dict[MatchDecision, list[MatchResult]]:
    """Group match results by decision, keeping invoice order in each group."""
    grouped: dict[MatchDecision, list[MatchResult]] = {d: [] for d in MatchDecision}
    for result in results:
        grouped[result.decision].append(result)
    return grouped


def summarize_results(results: list[MatchResult]) -> dict:
    """Generate summary statistics for results."""
    counts = {
        "total": len(results),
        "auto_matched": 0,
        "needs_confirmation": 0,
        "new_ingredients": 0,
    }

    for result in results:
        if result.decision == MatchDecision.AUTO_MATCH:
            counts["auto_matched"] += 1
        elif result.decision == MatchDecision.NEEDS_CONFIRMATION:
            counts["needs_confirmation"] += 1
        elif result.decision == MatchDecision.NEW_INGREDIENT:
            counts["new_ingredients"] += 1

    counts["actionable"] = counts["needs_confirmation"] + counts["new_ingredients"]
    return counts
