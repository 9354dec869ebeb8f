"""
Invoice line-item intake.

The AI extraction step returns supplier + line items as JSON. Before the
lines reach the matcher we validate the payload and drop what is not an
ingredient purchase:
- lines with no unit price or no positive quantity
- transport, packaging, tax, discount and total lines
- repeated lines (same name and quantity)
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from .config import Config, default_config
from .models import ExtractedCandidate

logger = logging.getLogger(__name__)

UNKNOWN_SUPPLIER = "Unknown Supplier"


class ExtractionError(ValueError):
    """Extraction payload is malformed or holds no usable line items."""


# ============== Extraction payload ==============

class SupplierInfo(BaseModel):
    name: Optional[str] = None


class ExtractedLineItem(BaseModel):
    name: str
    quantity: Optional[float] = None
    unit: str = ""
    unit_price: Optional[float] = None
    total_price: Optional[float] = None


class InvoiceExtraction(BaseModel):
    supplier: Optional[SupplierInfo] = None
    items: List[ExtractedLineItem] = []


def parse_extraction(payload: Union[str, bytes, Mapping[str, Any]]) -> InvoiceExtraction:
    """
    Validate the extraction result (JSON text or already-decoded dict).

    Raises:
        ExtractionError: payload does not match the expected shape
    """
    try:
        if isinstance(payload, (str, bytes)):
            return InvoiceExtraction.model_validate_json(payload)
        return InvoiceExtraction.model_validate(payload)
    except ValidationError as e:
        raise ExtractionError(f"Invalid extraction payload: {e}") from e


def supplier_name(extraction: InvoiceExtraction) -> str:
    name = extraction.supplier.name if extraction.supplier else None
    return (name or "").strip() or UNKNOWN_SUPPLIER


def _fold_name(name: str) -> str:
    return " ".join(name.lower().split())


def clean_line_items(
    items: Iterable[ExtractedLineItem],
    ignored_keywords: Iterable[str] = (),
) -> list[ExtractedLineItem]:
    """
    Drop non-ingredient and duplicate invoice lines.

    Args:
        items: Line items as extracted
        ignored_keywords: Lowercase fragments marking non-ingredient lines

    Returns:
        Remaining items in invoice order; first occurrence wins for duplicates
    """
    keywords = tuple(k.lower() for k in ignored_keywords)
    kept = []
    seen = set()

    for item in items:
        if not item.unit_price or not item.quantity or item.quantity <= 0:
            logger.warning(f"Filtering out item without price/quantity: {item.name}")
            continue

        name_lower = item.name.lower()
        if any(keyword in name_lower for keyword in keywords):
            logger.info(f"Filtering out irrelevant item: {item.name}")
            continue

        key = (_fold_name(item.name), item.quantity)
        if key in seen:
            logger.info(f"Filtering out duplicate item: {item.name}")
            continue
        seen.add(key)
        kept.append(item)

    return kept


def _to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return default
    if not result.is_finite():
        return default
    return result


def to_candidate(item: ExtractedLineItem) -> ExtractedCandidate:
    """Convert a validated line item into a matcher candidate."""
    return ExtractedCandidate(
        name=item.name,
        quantity=_to_decimal(item.quantity, Decimal("0")),
        unit=item.unit,
        price_per_unit=_to_decimal(item.unit_price),
    )


def coerce_candidate(obj: Union[ExtractedCandidate, Mapping[str, Any]]) -> ExtractedCandidate:
    """
    Accept an ExtractedCandidate or a plain dict from the caller.

    Dicts need name, quantity, unit and optionally price_per_unit. Missing
    or unparseable values degrade to empty name / zero quantity rather than
    failing, the matcher then treats the line as a new ingredient.
    """
    if isinstance(obj, ExtractedCandidate):
        return obj
    if not isinstance(obj, Mapping):
        raise TypeError(f"Expected ExtractedCandidate or mapping, got {type(obj).__name__}")

    return ExtractedCandidate(
        name=str(obj.get("name") or ""),
        quantity=_to_decimal(obj.get("quantity"), Decimal("0")),
        unit=str(obj.get("unit") or ""),
        price_per_unit=_to_decimal(obj.get("price_per_unit")),
    )


def extract_candidates(
    payload: Union[str, bytes, Mapping[str, Any]],
    config: Optional[Config] = None,
) -> list[ExtractedCandidate]:
    """
    Validate and clean an extraction payload into matcher candidates.

    Raises:
        ExtractionError: payload is malformed or no valid line item remains
    """
    config = config or default_config()
    extraction = parse_extraction(payload)
    cleaned = clean_line_items(extraction.items, config.ignored_line_keywords)

    logger.info(
        f"Cleaned items from {supplier_name(extraction)}: "
        f"{len(cleaned)} items (from {len(extraction.items)} original)"
    )

    if not cleaned:
        raise ExtractionError("No valid items found in invoice after filtering")

    return [to_candidate(item) for item in cleaned]
