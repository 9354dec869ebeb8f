"""
Configuration for Invoice Match.

Holds the tuned matching constants, the synonym table and the list of
invoice lines that are not ingredients (transport, packaging, taxes).
Config is declarative JSON - edit the file, not the code.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path

from .synonyms import SynonymTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "match_config.json"

# Minimum score for an inventory item to be offered as a match at all
DEFAULT_THRESHOLD = 0.75
# Best score must reach this to be applied without a human looking at it
AUTO_ACCEPT_THRESHOLD = 0.9
# Runner-up closer than this to the best score makes the match ambiguous
NEAR_TIE_GAP = 0.1
# Containment above this is trusted over the fuzzy blend
CONTAINMENT_ESCALATION = 0.85
# Per-token edit similarity for two words to count as the same word
TOKEN_SIMILARITY_THRESHOLD = 0.8
# Tokens this short or shorter are noise ("de", "cu", "la")
MAX_NOISE_TOKEN_LENGTH = 2

EXACT_MATCH_SCORE = 1.0
SYNONYM_MATCH_SCORE = 0.95
FULL_CONTAINMENT_SCORE = 0.9
TOKEN_CONTAINMENT_WEIGHT = 0.8

# (edit similarity weight, word overlap weight)
EDIT_LED_BLEND = (0.6, 0.4)
OVERLAP_LED_BLEND = (0.3, 0.7)

# Matches surfaced per candidate (best + alternatives)
MAX_MATCHES = 3

# Score gaps are compared at this many decimals so 1.0 vs 0.9 is a 0.1 gap
SCORE_PRECISION = 6


@dataclass(frozen=True)
class MatchSettings:
    """Settings for the matching algorithm."""
    inclusion_threshold: float = DEFAULT_THRESHOLD
    auto_accept_threshold: float = AUTO_ACCEPT_THRESHOLD
    near_tie_gap: float = NEAR_TIE_GAP
    containment_escalation: float = CONTAINMENT_ESCALATION
    token_similarity_threshold: float = TOKEN_SIMILARITY_THRESHOLD
    max_matches: int = MAX_MATCHES

    def __post_init__(self):
        for f in fields(self):
            if f.name == "max_matches":
                continue
            value = getattr(self, f.name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{f.name} must be between 0 and 1, got {value}")
        if self.max_matches < 1:
            raise ValueError(f"max_matches must be at least 1, got {self.max_matches}")


@dataclass
class Config:
    """Full configuration for invoice matching."""
    settings: MatchSettings = field(default_factory=MatchSettings)
    synonyms: SynonymTable = field(default_factory=lambda: SynonymTable({}))
    ignored_line_keywords: tuple[str, ...] = ()


def load_config(config_path: str | Path) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to match_config.json

    Returns:
        Config object with settings, synonym table and ignored keywords

    Raises:
        FileNotFoundError: config file does not exist
        ValueError: settings out of range or a synonym listed in two groups
    """
    path = Path(config_path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    known = {f.name for f in fields(MatchSettings)}
    settings_data = data.get("settings", {})
    unknown = set(settings_data) - known
    if unknown:
        raise ValueError(f"Unknown settings in {path.name}: {', '.join(sorted(unknown))}")

    config = Config(
        settings=MatchSettings(**settings_data),
        synonyms=SynonymTable(data.get("synonyms", {})),
        ignored_line_keywords=tuple(k.lower() for k in data.get("ignored_line_keywords", [])),
    )

    logger.info(
        f"Loaded match config from {path.name}: "
        f"{len(config.synonyms)} synonym groups, "
        f"{len(config.ignored_line_keywords)} ignored keywords"
    )
    return config


@lru_cache
def default_config() -> Config:
    """Get the cached config shipped with the package."""
    return load_config(DEFAULT_CONFIG_PATH)
