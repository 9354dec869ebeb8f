"""
Report Generator - Format match results for the review step.

Produces console output and CSV export for match results.
"""

import csv
import io
from datetime import datetime
from typing import TextIO

from .matcher import group_results_by_decision, summarize_results
from .models import MatchDecision, MatchResult
from .units import stock_adjustment


def _price(result: MatchResult) -> str:
    return f"{result.price_per_unit}" if result.price_per_unit is not None else "N/A"


def format_console(results: list[MatchResult], show_auto: bool = False) -> str:
    """
    Format results for console display.

    New ingredients first, then lines needing confirmation (with the
    alternative suggestions), then auto-matched lines if requested.

    Args:
        results: Match results to format
        show_auto: Whether to include AUTO_MATCH lines (default False)

    Returns:
        Formatted string for console output
    """
    if not results:
        return "No invoice lines to report.\n"

    lines = []
    grouped = group_results_by_decision(results)
    new = grouped[MatchDecision.NEW_INGREDIENT]
    confirm = grouped[MatchDecision.NEEDS_CONFIRMATION]
    auto = grouped[MatchDecision.AUTO_MATCH] if show_auto else []

    if new:
        lines.append(f"\nNEW INGREDIENTS ({len(new)}) - Will be added to inventory")
        lines.append("-" * 70)
        lines.append(f"{'INVOICE NAME':<30} {'QTY':>10} {'UNIT':<6} {'PRICE':>10}")
        lines.append("-" * 70)
        for r in new:
            lines.append(f"{r.extracted_name[:30]:<30} {str(r.quantity):>10} {r.unit[:6]:<6} {_price(r):>10}")

    if confirm:
        lines.append(f"\nNEEDS CONFIRMATION ({len(confirm)}) - Pick the right inventory item")
        lines.append("-" * 70)
        lines.append(f"{'INVOICE NAME':<30} {'SCORE':>6}   {'SUGGESTED ITEM':<30}")
        lines.append("-" * 70)
        for r in confirm:
            lines.append(f"{r.extracted_name[:30]:<30} {r.confidence:>6.2f} -> {r.matched_item.name[:30]}")
            for alt in r.alternative_matches:
                lines.append(f"{'':<30} {alt.score:>6.2f}    or {alt.item.name[:30]}")

    if auto:
        lines.append(f"\nAUTO-MATCHED ({len(auto)})")
        lines.append("-" * 70)
        for r in auto:
            adjustment = stock_adjustment(r)
            adj_str = f"+{adjustment} {r.matched_item.unit}" if adjustment is not None else "unit mismatch"
            lines.append(f"{r.extracted_name[:30]:<30} -> {r.matched_item.name[:25]:<25} {adj_str}")

    # Summary
    summary = summarize_results(results)
    lines.append("\n" + "=" * 70)
    lines.append("SUMMARY")
    lines.append(f"  Invoice lines:      {summary['total']}")
    lines.append(f"  Auto-matched:       {summary['auto_matched']}")
    lines.append(f"  Needs confirmation: {summary['needs_confirmation']}")
    lines.append(f"  New ingredients:    {summary['new_ingredients']}")
    lines.append(f"  Actionable:         {summary['actionable']}")
    lines.append("=" * 70)

    return "\n".join(lines)


def export_csv(
    results: list[MatchResult],
    output: TextIO | None = None,
    include_auto: bool = True,
) -> str:
    """
    Export results to CSV format.

    Args:
        results: Match results to export
        output: Optional file handle to write to
        include_auto: Whether to include AUTO_MATCH lines (default True)

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow([
        "decision",
        "extracted_name",
        "quantity",
        "unit",
        "price_per_unit",
        "matched_id",
        "matched_name",
        "confidence",
        "stock_adjustment",
        "alternatives",
        "reason",
    ])

    for result in results:
        if not include_auto and result.decision == MatchDecision.AUTO_MATCH:
            continue

        item = result.matched_item
        adjustment = stock_adjustment(result)

        writer.writerow([
            result.decision.value,
            result.extracted_name,
            str(result.quantity),
            result.unit,
            str(result.price_per_unit) if result.price_per_unit is not None else "",
            item.id if item else "",
            item.name if item else "",
            f"{result.confidence:.2f}",
            str(adjustment) if adjustment is not None else "",
            "; ".join(f"{alt.item.name} ({alt.score:.2f})" for alt in result.alternative_matches),
            result.reason,
        ])

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content


def generate_report_filename(supplier: str | None = None, extension: str = "csv") -> str:
    """
    Generate a filename for the report.

    Args:
        supplier: Optional supplier name to include
        extension: File extension (default "csv")

    Returns:
        Filename like "invoice_match_herbalrom_2026-01-08.csv"
    """
    date_str = datetime.now().strftime("%Y-%m-%d")
    if supplier:
        slug = "_".join(supplier.lower().split())
        return f"invoice_match_{slug}_{date_str}.{extension}"
    return f"invoice_match_{date_str}.{extension}"
