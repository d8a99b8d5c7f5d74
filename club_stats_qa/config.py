import os
from dataclasses import dataclass, field
from typing import Dict, List


# =============================================================================
# QUESTION-ANSWERING CONFIGURATION - All tunables with documentation
# =============================================================================

@dataclass
class SpellingConfig:
    """
    Dictionary-based spelling correction configuration.

    Question words and common verbs are short, high-frequency tokens that
    sit close to unrelated dictionary entries ("has" vs "bass", "got" vs
    "goal"). They must clear a much higher bar before being rewritten.

    strict_words is a tuning parameter, not a correctness guarantee: a short
    team nickname colliding with one of these verbs will simply never be
    auto-corrected.
    """

    min_similarity: float = 0.7
    strict_similarity: float = 0.95
    min_token_length: int = 3

    strict_words: List[str] = field(default_factory=lambda: [
        # Question words
        "how", "what", "which", "who", "where", "when", "why",
        # Common verbs
        "played", "play", "plays", "has", "have", "had", "got", "get", "gets",
        "made", "make", "makes", "did", "does", "won", "win", "kept", "keep",
        "received", "take", "taken", "been", "was", "were", "are", "is",
    ])


@dataclass
class ResolverConfig:
    """
    Entity name resolution configuration.

    Combined fuzzy score = jaro_winkler * 0.4 + levenshtein * 0.4 + dice * 0.2.
    Only candidates scoring >= min_confidence survive.
    """

    cache_ttl_seconds: int = 300          # 5 minutes
    min_confidence: float = 0.6
    max_matches: int = 3
    max_suggestions: int = 3

    jaro_winkler_weight: float = 0.4
    levenshtein_weight: float = 0.4
    dice_weight: float = 0.2

    # A lone fuzzy match above this is accepted silently
    auto_accept_confidence: float = 0.8
    # Two fuzzy matches within this margin are "comparable" -> ambiguity
    ambiguity_margin: float = 0.05


@dataclass
class TemplateConfig:
    """Rendered-template LRU configuration."""

    cache_capacity: int = 500
    cache_enabled: bool = True


@dataclass
class FantasyConfig:
    """
    Fantasy points ruleset.

    Position classes: GK, DEF, MID, FWD. Goals (open play + penalties) are
    worth more for defensive positions. Goals conceded only penalise GK/DEF
    and are NOT rounded per match - rounding happens once at aggregation.
    """

    minutes_full_threshold: int = 60
    minutes_full_points: int = 2
    minutes_partial_points: int = 1

    man_of_match_points: int = 3

    goal_points: Dict[str, int] = field(default_factory=lambda: {
        "GK": 6, "DEF": 6, "MID": 5, "FWD": 4,
    })

    assist_points: int = 3

    clean_sheet_points: Dict[str, int] = field(default_factory=lambda: {
        "GK": 4, "DEF": 4, "MID": 1, "FWD": 0,
    })

    # Per goal conceded, GK/DEF only
    conceded_points: Dict[str, float] = field(default_factory=lambda: {
        "GK": -0.5, "DEF": -0.5,
    })

    yellow_card_points: int = -1
    red_card_points: int = -3
    own_goal_points: int = -2
    saves_per_point: int = 3

    penalty_missed_points: int = -2
    penalty_conceded_points: int = 0
    penalty_saved_points: int = 5


@dataclass
class AnalysisConfig:
    """Question analysis limits."""

    max_entities: int = 3
    max_metrics: int = 3


@dataclass
class GraphConfig:
    """
    Graph store connection (Neo4j HTTP transactional endpoint).

    Values come from the environment so the same build runs against
    dev/prod databases.
    """

    http_url: str = field(default_factory=lambda: os.environ.get("NEO4J_HTTP_URL", "http://localhost:7474"))
    database: str = field(default_factory=lambda: os.environ.get("NEO4J_DATABASE", "neo4j"))
    user: str = field(default_factory=lambda: os.environ.get("NEO4J_USER", "neo4j"))
    password: str = field(default_factory=lambda: os.environ.get("NEO4J_PASSWORD", ""))
    graph_label: str = field(default_factory=lambda: os.environ.get("GRAPH_LABEL", "dorkiniansWebsite"))

    timeout: float = 30.0
    max_retries: int = 3
    base_delay: float = 0.5


# Initialize global config
QA_CONFIG = {
    "spelling": SpellingConfig(),
    "resolver": ResolverConfig(),
    "templates": TemplateConfig(),
    "fantasy": FantasyConfig(),
    "analysis": AnalysisConfig(),
    "graph": GraphConfig(),
}
