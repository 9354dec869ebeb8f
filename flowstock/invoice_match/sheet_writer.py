"""
Review Workbook Writer - XLSX export of match results.

One sheet, headers in row 1, one invoice line per row. Lines that need a
person are filled so they stand out when the sheet is shared.
"""

import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from .matcher import sort_results_for_review
from .models import MatchDecision, MatchResult
from .units import stock_adjustment

logger = logging.getLogger(__name__)

REVIEW_COLUMNS = [
    "Decision",
    "Invoice Item",
    "Quantity",
    "Unit",
    "Price / Unit",
    "Matched Item",
    "Matched Id",
    "Confidence",
    "Stock Adjustment",
    "Alternatives",
    "Reason",
]

COLUMN_WIDTHS = [20, 35, 10, 8, 12, 35, 14, 12, 16, 45, 45]

DECISION_FILLS = {
    MatchDecision.NEW_INGREDIENT: PatternFill("solid", fgColor="FFF2CC"),
    MatchDecision.NEEDS_CONFIRMATION: PatternFill("solid", fgColor="FCE4D6"),
}


def extract_review_row(result: MatchResult) -> list:
    """Extract a row for the review sheet."""
    item = result.matched_item
    adjustment = stock_adjustment(result)
    return [
        result.decision.value,
        result.extracted_name,
        float(result.quantity),
        result.unit,
        float(result.price_per_unit) if result.price_per_unit is not None else None,
        item.name if item else None,
        item.id if item else None,
        round(result.confidence, 2),
        float(adjustment) if adjustment is not None else None,
        "; ".join(f"{alt.item.name} ({alt.score:.2f})" for alt in result.alternative_matches),
        result.reason,
    ]


def create_review_workbook(results: list[MatchResult], title: str = "Invoice Review") -> BytesIO:
    """
    Create a review workbook for matched invoice lines.

    Rows are ordered most actionable first (new, confirm, auto).

    Args:
        results: Match results to export
        title: Worksheet title

    Returns:
        BytesIO buffer containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.append(REVIEW_COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for result in sort_results_for_review(results):
        ws.append(extract_review_row(result))
        fill = DECISION_FILLS.get(result.decision)
        if fill is not None:
            for cell in ws[ws.max_row]:
                cell.fill = fill

    for col_idx, width in enumerate(COLUMN_WIDTHS, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width
    ws.freeze_panes = "A2"

    logger.info(f"Built review workbook with {len(results)} rows")

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
