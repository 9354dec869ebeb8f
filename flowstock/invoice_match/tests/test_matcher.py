"""
Tests for the match selector and batch matcher.

Decision policy:
- nothing >= threshold          = NEW_INGREDIENT
- best < 0.9 or runner-up close = NEEDS_CONFIRMATION
- otherwise                     = AUTO_MATCH

Run with: pytest flowstock/invoice_match/tests/test_matcher.py -v
"""

import pytest
from decimal import Decimal

from flowstock.invoice_match.config import Config, MatchSettings, default_config
from flowstock.invoice_match.models import (
    ExtractedCandidate,
    InventoryItem,
    MatchDecision,
)
from flowstock.invoice_match.matcher import (
    filter_needs_review,
    group_results_by_decision,
    match_many,
    match_one,
    sort_results_for_review,
    summarize_results,
)


@pytest.fixture
def inventory():
    """Sample restaurant inventory."""
    return [
        InventoryItem(id="ing-1", name="Tomate", quantity=Decimal("5"), unit="kg"),
        InventoryItem(id="ing-2", name="Tomate cherry", quantity=Decimal("2"), unit="kg"),
        InventoryItem(id="ing-3", name="Brânză tare", quantity=Decimal("3"), unit="kg"),
        InventoryItem(id="ing-4", name="Lapte", quantity=Decimal("10"), unit="l"),
        InventoryItem(id="ing-5", name="Făină albă", quantity=Decimal("25"), unit="kg"),
        InventoryItem(id="ing-6", name="Mozzarella", quantity=Decimal("4"), unit="kg"),
        InventoryItem(id="ing-7", name="Brânză maturată vacă", quantity=Decimal("1.5"), unit="kg"),
    ]


def item(item_id, name):
    return InventoryItem(id=item_id, name=name, quantity=Decimal("1"), unit="kg")


class TestMatchOneScenarios:

    def test_exact_match_beats_more_specific_variant(self, inventory):
        selection = match_one("tomate", inventory)

        assert selection.best_match.id == "ing-1"
        assert selection.confidence == 1.0
        assert [m.item.id for m in selection.matches] == ["ing-1", "ing-2"]
        assert selection.matches[1].score == pytest.approx(0.9)
        # A 0.1 gap is not a near-tie
        assert selection.needs_confirmation is False

    def test_percentage_in_name(self, inventory):
        selection = match_one("Mozzarella 45%", inventory)

        assert selection.best_match.id == "ing-6"
        assert selection.confidence >= 0.9
        assert selection.needs_confirmation is False

    def test_synonym_match(self, inventory):
        selection = match_one("cascaval", inventory)

        assert selection.best_match.id == "ing-3"
        assert selection.confidence == 0.95
        assert selection.needs_confirmation is False

    def test_unknown_ingredient(self, inventory):
        selection = match_one("Unknown Exotic Fruit XYZ", inventory)

        assert selection.best_match is None
        assert selection.matches == []
        assert selection.confidence == 0.0
        assert selection.needs_confirmation is True

    def test_low_confidence_needs_confirmation(self, inventory):
        selection = match_one("Brânză maturată oaie", inventory)

        assert selection.best_match.id == "ing-7"
        assert 0.75 <= selection.confidence < 0.9
        assert selection.needs_confirmation is True

    def test_empty_name(self, inventory):
        selection = match_one("", inventory)
        assert selection.best_match is None

    @pytest.mark.parametrize("name", ["", "!!!", "  "])
    def test_blank_name_unmatched_at_zero_threshold(self, inventory, name):
        selection = match_one(name, inventory, threshold=0.0)

        assert selection.best_match is None
        assert selection.matches == []

    def test_blank_name_is_new_at_zero_threshold(self):
        results = match_many(
            [{"name": "!!!", "quantity": 1, "unit": "kg"}],
            [item("a", "Lapte")],
            threshold=0.0,
        )
        assert results[0].is_new_ingredient is True
        assert results[0].matched_item is None

    def test_zero_threshold_keeps_any_positive_score(self, inventory):
        selection = match_one("tomate", inventory, threshold=0.0)
        assert all(m.score > 0 for m in selection.matches)
        assert selection.best_match.id == "ing-1"

    def test_empty_inventory(self):
        selection = match_one("tomate", [])
        assert selection.best_match is None
        assert selection.needs_confirmation is True


class TestNearTies:

    def test_equal_scores_keep_inventory_order(self):
        inventory = [item("a", "Mozzarella Galbani"), item("b", "Mozzarella Zott")]

        selection = match_one("mozzarella", inventory)
        assert [m.item.id for m in selection.matches] == ["a", "b"]
        assert selection.needs_confirmation is True

        selection = match_one("mozzarella", list(reversed(inventory)))
        assert [m.item.id for m in selection.matches] == ["b", "a"]

    def test_duplicate_inventory_names(self):
        inventory = [item("a", "Lapte"), item("b", "Lapte")]
        selection = match_one("lapte", inventory)

        assert selection.confidence == 1.0
        assert selection.needs_confirmation is True
        assert [m.item.id for m in selection.alternatives] == ["b"]

    def test_runner_up_within_gap(self):
        inventory = [item("a", "Piept de pui"), item("b", "Piept pui")]
        selection = match_one("piept pui", inventory)

        assert [m.item.id for m in selection.matches] == ["b", "a"]
        assert selection.matches[1].score == pytest.approx(0.925)
        assert selection.needs_confirmation is True


class TestThreshold:

    def test_best_match_never_below_threshold(self, inventory):
        for name in ["tomate", "cascaval", "Brânză maturată oaie", "lapte"]:
            selection = match_one(name, inventory)
            for match in selection.matches:
                assert match.score >= 0.75

    def test_raising_threshold_never_adds_matches(self, inventory):
        for name in ["tomate", "cascaval", "Brânză maturată oaie"]:
            low = match_one(name, inventory, threshold=0.75)
            high = match_one(name, inventory, threshold=0.95)
            assert len(high.matches) <= len(low.matches)

    def test_high_threshold_drops_variant(self, inventory):
        selection = match_one("tomate", inventory, threshold=0.95)
        assert [m.item.id for m in selection.matches] == ["ing-1"]

    def test_low_confidence_becomes_new_above_its_score(self, inventory):
        selection = match_one("Brânză maturată oaie", inventory, threshold=0.8)
        assert selection.best_match is None

    def test_threshold_from_settings(self, inventory):
        config = Config(
            settings=MatchSettings(inclusion_threshold=0.95),
            synonyms=default_config().synonyms,
        )
        selection = match_one("tomate", inventory, config=config)
        assert len(selection.matches) == 1

    def test_top_three_only(self):
        inventory = [item(str(i), "Lapte") for i in range(5)]
        selection = match_one("lapte", inventory)

        assert [m.item.id for m in selection.matches] == ["0", "1", "2"]
        assert len(selection.alternatives) == 2


class TestMatchMany:

    def test_order_preserved(self, inventory):
        candidates = [
            ExtractedCandidate(name="Unknown Exotic Fruit XYZ", quantity=Decimal("1"), unit="kg"),
            ExtractedCandidate(name="tomate", quantity=Decimal("3"), unit="kg"),
            {"name": "cascaval", "quantity": 2, "unit": "kg", "price_per_unit": "31.50"},
            ExtractedCandidate(name="", quantity=Decimal("1"), unit="buc"),
        ]
        results = match_many(candidates, inventory)

        assert [r.extracted_name for r in results] == ["Unknown Exotic Fruit XYZ", "tomate", "cascaval", ""]

    def test_fields_echoed(self, inventory):
        results = match_many(
            [{"name": "cascaval", "quantity": 2, "unit": "kg", "price_per_unit": "31.50"}],
            inventory,
        )
        result = results[0]

        assert result.quantity == Decimal("2")
        assert result.unit == "kg"
        assert result.price_per_unit == Decimal("31.50")
        assert result.matched_item.id == "ing-3"
        assert result.decision == MatchDecision.AUTO_MATCH

    def test_missing_price_passes_through(self, inventory):
        results = match_many([{"name": "tomate", "quantity": 1, "unit": "kg"}], inventory)
        assert results[0].price_per_unit is None

    def test_alternatives_exclude_chosen_item(self, inventory):
        result = match_many([{"name": "tomate", "quantity": 1, "unit": "kg"}], inventory)[0]

        assert result.matched_item.id == "ing-1"
        assert [m.item.id for m in result.alternative_matches] == ["ing-2"]

    def test_exactly_one_of_match_or_new(self, inventory):
        names = ["tomate", "cascaval", "Unknown Exotic Fruit XYZ", "", "Brânză maturată oaie"]
        results = match_many([{"name": n, "quantity": 1, "unit": "kg"} for n in names], inventory)

        for result in results:
            assert (result.matched_item is not None) != result.is_new_ingredient

    def test_new_ingredient(self, inventory):
        result = match_many([{"name": "Unknown Exotic Fruit XYZ", "quantity": 1, "unit": "kg"}], inventory)[0]

        assert result.is_new_ingredient is True
        assert result.matched_item is None
        assert result.confidence == 0
        assert result.needs_confirmation is True
        assert result.decision == MatchDecision.NEW_INGREDIENT
        assert "0.75" in result.reason

    def test_empty_inventory_makes_everything_new(self):
        results = match_many(
            [{"name": "tomate", "quantity": 1, "unit": "kg"}, {"name": "lapte", "quantity": 1, "unit": "l"}],
            [],
        )
        assert all(r.is_new_ingredient for r in results)

    def test_candidates_do_not_claim_items(self, inventory):
        results = match_many(
            [{"name": "tomate", "quantity": 1, "unit": "kg"}, {"name": "Tomate", "quantity": 2, "unit": "kg"}],
            inventory,
        )
        assert [r.matched_item.id for r in results] == ["ing-1", "ing-1"]

    def test_accepts_inventory_generator(self, inventory):
        results = match_many(
            [{"name": "tomate", "quantity": 1, "unit": "kg"}, {"name": "lapte", "quantity": 1, "unit": "l"}],
            (i for i in inventory),
        )
        assert [r.matched_item.id for r in results] == ["ing-1", "ing-4"]

    def test_reasons(self, inventory):
        results = match_many(
            [
                {"name": "tomate", "quantity": 1, "unit": "kg"},
                {"name": "Brânză maturată oaie", "quantity": 1, "unit": "kg"},
            ],
            inventory,
        )
        assert "Confident match" in results[0].reason
        assert "below auto-accept" in results[1].reason

    def test_near_tie_reason_names_runner_up(self):
        inventory = [item("a", "Lapte"), item("b", "Lapte")]
        result = match_many([{"name": "lapte", "quantity": 1, "unit": "l"}], inventory)[0]

        assert result.decision == MatchDecision.NEEDS_CONFIRMATION
        assert "too close to call" in result.reason


class TestHelperFunctions:

    @pytest.fixture
    def results(self, inventory):
        names = ["tomate", "Unknown Exotic Fruit XYZ", "Brânză maturată oaie", "cascaval"]
        return match_many([{"name": n, "quantity": 1, "unit": "kg"} for n in names], inventory)

    def test_summarize_results(self, results):
        summary = summarize_results(results)

        assert summary["total"] == 4
        assert summary["auto_matched"] == 2
        assert summary["needs_confirmation"] == 1
        assert summary["new_ingredients"] == 1
        assert summary["actionable"] == 2

    def test_sort_results_for_review(self, results):
        sorted_results = sort_results_for_review(results)

        assert [r.extracted_name for r in sorted_results] == [
            "Unknown Exotic Fruit XYZ",
            "Brânză maturată oaie",
            "tomate",
            "cascaval",
        ]

    def test_filter_needs_review(self, results):
        actionable = filter_needs_review(results)
        assert {r.extracted_name for r in actionable} == {"Unknown Exotic Fruit XYZ", "Brânză maturată oaie"}

    def test_group_results_by_decision(self, results):
        grouped = group_results_by_decision(results)

        assert set(grouped) == set(MatchDecision)
        assert len(grouped[MatchDecision.AUTO_MATCH]) == 2
        assert len(grouped[MatchDecision.NEW_INGREDIENT]) == 1
