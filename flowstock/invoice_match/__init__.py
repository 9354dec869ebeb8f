# Invoice Match: reconcile supplier invoice lines with inventory
# Siloed module - no imports from other FlowStock components

from .models import (
    InventoryItem,
    ExtractedCandidate,
    MatchCandidate,
    MatchSelection,
    MatchResult,
    MatchDecision,
)
from .config import load_config, default_config, Config, MatchSettings
from .normalizer import normalize
from .synonyms import SynonymTable, synonyms_of
from .similarity import edit_similarity, word_overlap, containment
from .scorer import score
from .matcher import match_one, match_many, summarize_results
from .candidates import extract_candidates, parse_extraction, clean_line_items, ExtractionError
from .units import normalize_to_base_unit, compare_quantities, convert_quantity, stock_adjustment, format_quantity
from .adapters import InventoryAdapter, FileInventoryAdapter, InMemoryInventoryAdapter
from .report import format_console, export_csv
from .sheet_writer import create_review_workbook

__version__ = "1.0.0"

__all__ = [
    # Models
    "InventoryItem",
    "ExtractedCandidate",
    "MatchCandidate",
    "MatchSelection",
    "MatchResult",
    "MatchDecision",
    # Config
    "Config",
    "MatchSettings",
    "load_config",
    "default_config",
    # Scoring
    "normalize",
    "SynonymTable",
    "synonyms_of",
    "edit_similarity",
    "word_overlap",
    "containment",
    "score",
    # Matcher
    "match_one",
    "match_many",
    "summarize_results",
    # Invoice intake
    "extract_candidates",
    "parse_extraction",
    "clean_line_items",
    "ExtractionError",
    # Units
    "normalize_to_base_unit",
    "compare_quantities",
    "convert_quantity",
    "stock_adjustment",
    "format_quantity",
    # Adapters
    "InventoryAdapter",
    "FileInventoryAdapter",
    "InMemoryInventoryAdapter",
    # Report
    "format_console",
    "export_csv",
    "create_review_workbook",
]
