"""
Data models for Invoice Match.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Quantities and money values use Decimal for precision.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class MatchDecision(Enum):
    """
    What the review step should do with an extracted invoice line.
    """
    AUTO_MATCH = "AUTO_MATCH"                  # One confident, unambiguous match
    NEEDS_CONFIRMATION = "NEEDS_CONFIRMATION"  # Matched, but low score or near-tie
    NEW_INGREDIENT = "NEW_INGREDIENT"          # Nothing in inventory is close enough


@dataclass(frozen=True)
class InventoryItem:
    """
    A single ingredient the restaurant already tracks.

    Owned by the inventory layer; the matcher only reads it.
    """
    id: str
    name: str
    quantity: Decimal = Decimal("0")
    unit: str = ""


@dataclass
class ExtractedCandidate:
    """
    One line item extracted from a supplier invoice.

    Quantity, unit and price are echoed into the result untouched.
    """
    name: str
    quantity: Decimal
    unit: str
    price_per_unit: Optional[Decimal] = None


@dataclass(frozen=True)
class MatchCandidate:
    """An inventory item paired with its confidence for one candidate."""
    item: InventoryItem
    score: float


@dataclass
class MatchSelection:
    """
    Ranked matches for one candidate name.

    matches holds at most MAX_MATCHES entries, best first.
    """
    matches: list[MatchCandidate] = field(default_factory=list)
    best_match: Optional[InventoryItem] = None
    confidence: float = 0.0
    needs_confirmation: bool = True

    @property
    def alternatives(self) -> list[MatchCandidate]:
        """Retained matches other than the best one."""
        return self.matches[1:]


@dataclass
class MatchResult:
    """
    Output of the matcher for a single extracted invoice line.

    Exactly one of matched_item / is_new_ingredient is set.
    """
    extracted_name: str
    quantity: Decimal
    unit: str
    price_per_unit: Optional[Decimal] = None
    matched_item: Optional[InventoryItem] = None
    alternative_matches: list[MatchCandidate] = field(default_factory=list)
    confidence: float = 0.0
    needs_confirmation: bool = True
    is_new_ingredient: bool = False
    reason: str = ""  # Human-readable explanation

    def __post_init__(self):
        if (self.matched_item is None) != self.is_new_ingredient:
            raise ValueError(
                f"{self.extracted_name!r}: a result must either match an item "
                f"or be a new ingredient"
            )

    @property
    def decision(self) -> MatchDecision:
        if self.is_new_ingredient:
            return MatchDecision.NEW_INGREDIENT
        if self.needs_confirmation:
            return MatchDecision.NEEDS_CONFIRMATION
        return MatchDecision.AUTO_MATCH
