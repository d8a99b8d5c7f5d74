"""
Club Stats QA - Constants Module

Static catalogs the question-answering pipeline matches against: stat
types, metric display configuration, keyword pseudonyms, team aliases,
the spelling dictionary's static terms, and the response template
catalog. Small lookup helpers live alongside the tables they read.
"""

import re
from typing import Optional, List, Dict, Tuple


# =============================================================================
# ENTITY TYPES & STAT TYPES
# =============================================================================

ENTITY_TYPES = ("player", "team", "opposition", "league", "stat_type")

# Human-readable stat type names. Served as the "stat_type" corpus without
# touching the graph store.
STAT_TYPE_NAMES = [
    "Apps",
    "Minutes",
    "Man of the Match",
    "Goals",
    "Open Play Goals",
    "Assists",
    "Yellow Cards",
    "Red Cards",
    "Saves",
    "Own Goals",
    "Goals Conceded",
    "Clean Sheets",
    "Penalties Scored",
    "Penalties Missed",
    "Penalties Conceded",
    "Penalties Saved",
    "Fantasy Points",
    "Goal Involvements",
    "Goals Per Appearance",
    "Conceded Per Appearance",
    "Minutes Per Goal",
    "Penalty Conversion Rate",
    "Home",
    "Away",
]

POSITION_CLASSES = ("GK", "DEF", "MID", "FWD")


# =============================================================================
# METRIC CATALOG
# key -> display wording + formatting. decimal_places drives answer format.
# =============================================================================

METRIC_CONFIGS: Dict[str, Dict] = {
    "APP": {
        "display_name": "appearances", "singular": "appearance", "plural": "appearances",
        "stat_type": "Apps", "decimal_places": 0, "stat_format": "Integer",
    },
    "MIN": {
        "display_name": "minutes", "singular": "minute played", "plural": "minutes played",
        "stat_type": "Minutes", "decimal_places": 0, "stat_format": "Integer",
    },
    "MOM": {
        "display_name": "man of the match", "singular": "man of the match award",
        "plural": "man of the match awards",
        "stat_type": "Man of the Match", "decimal_places": 0, "stat_format": "Integer",
    },
    "G": {
        "display_name": "goals", "singular": "goal", "plural": "goals",
        "stat_type": "Goals", "decimal_places": 0, "stat_format": "Integer",
    },
    "OPENPLAYGOALS": {
        "display_name": "open play goals", "singular": "open play goal", "plural": "open play goals",
        "stat_type": "Open Play Goals", "decimal_places": 0, "stat_format": "Integer",
    },
    "A": {
        "display_name": "assists", "singular": "assist", "plural": "assists",
        "stat_type": "Assists", "decimal_places": 0, "stat_format": "Integer",
    },
    "Y": {
        "display_name": "yellow cards", "singular": "yellow card", "plural": "yellow cards",
        "stat_type": "Yellow Cards", "decimal_places": 0, "stat_format": "Integer",
    },
    "R": {
        "display_name": "red cards", "singular": "red card", "plural": "red cards",
        "stat_type": "Red Cards", "decimal_places": 0, "stat_format": "Integer",
    },
    "SAVES": {
        "display_name": "saves", "singular": "save", "plural": "saves",
        "stat_type": "Saves", "decimal_places": 0, "stat_format": "Integer",
    },
    "OG": {
        "display_name": "own goals", "singular": "own goal", "plural": "own goals",
        "stat_type": "Own Goals", "decimal_places": 0, "stat_format": "Integer",
    },
    "C": {
        "display_name": "conceded goals", "singular": "goal conceded", "plural": "goals conceded",
        "stat_type": "Goals Conceded", "decimal_places": 0, "stat_format": "Integer",
    },
    "CLS": {
        "display_name": "clean sheets", "singular": "clean sheet", "plural": "clean sheets",
        "stat_type": "Clean Sheets", "decimal_places": 0, "stat_format": "Integer",
    },
    "PSC": {
        "display_name": "penalties scored", "singular": "penalty scored", "plural": "penalties scored",
        "stat_type": "Penalties Scored", "decimal_places": 0, "stat_format": "Integer",
    },
    "PM": {
        "display_name": "penalties missed", "singular": "penalty missed", "plural": "penalties missed",
        "stat_type": "Penalties Missed", "decimal_places": 0, "stat_format": "Integer",
    },
    "PCO": {
        "display_name": "penalties conceded", "singular": "penalty conceded",
        "plural": "penalties conceded",
        "stat_type": "Penalties Conceded", "decimal_places": 0, "stat_format": "Integer",
    },
    "PSV": {
        "display_name": "penalties saved", "singular": "penalty saved", "plural": "penalties saved",
        "stat_type": "Penalties Saved", "decimal_places": 0, "stat_format": "Integer",
    },
    "FTP": {
        "display_name": "fantasy points", "singular": "fantasy point", "plural": "fantasy points",
        "stat_type": "Fantasy Points", "decimal_places": 0, "stat_format": "Integer",
    },
    "GI": {
        "display_name": "goal involvements", "singular": "goal involvement",
        "plural": "goal involvements",
        "stat_type": "Goal Involvements", "decimal_places": 0, "stat_format": "Integer",
    },
    "GPERAPP": {
        "display_name": "goals per appearance", "singular": "goals per appearance",
        "plural": "goals per appearance",
        "stat_type": "Goals Per Appearance", "decimal_places": 2, "stat_format": "Decimal2",
    },
    "CPERAPP": {
        "display_name": "goals conceded per appearance", "singular": "goals conceded per appearance",
        "plural": "goals conceded per appearance",
        "stat_type": "Conceded Per Appearance", "decimal_places": 2, "stat_format": "Decimal2",
    },
    "MPERG": {
        "display_name": "minutes per goal", "singular": "minutes per goal",
        "plural": "minutes per goal",
        "stat_type": "Minutes Per Goal", "decimal_places": 0, "stat_format": "Integer",
    },
    "PENALTY_CONVERSION_RATE": {
        "display_name": "penalty conversion rate", "singular": "penalty conversion rate",
        "plural": "penalty conversion rate",
        "stat_type": "Penalty Conversion Rate", "decimal_places": 1, "stat_format": "Percentage",
    },
}

# Metrics answered by arithmetic over several stored sums, not a single counter
DERIVED_METRICS = {"GI", "GPERAPP", "CPERAPP", "MPERG", "PENALTY_CONVERSION_RATE"}

# Metrics recomputed from per-match events on every query
EVENT_SCORED_METRICS = {"FTP"}


# =============================================================================
# KEYWORD PSEUDONYMS
# Matched longest-first so "penalties scored" is never also read as "goals".
# =============================================================================

STAT_TYPE_PSEUDONYMS: Dict[str, List[str]] = {
    "OG": ["own goals scored", "own goal scored", "own goals", "own goal"],
    "C": ["goals conceded", "conceded goals", "goals against", "conceded"],
    "OPENPLAYGOALS": [
        "open play goals", "open play goal", "goals from open play", "goals in open play",
        "non-penalty goals", "non penalty goals",
    ],
    "G": ["goals", "goal", "scoring", "prolific", "strikes", "netted"],
    "A": ["assists made", "assists provided", "assists", "assist", "assisting", "assisted"],
    "APP": ["apps", "appearances", "appearance", "games played", "matches played", "games", "matches"],
    "MIN": ["minutes of football", "minutes played", "playing time", "time played", "minutes", "mins"],
    "Y": ["yellow cards", "yellow card", "yellows", "bookings", "booking", "cautions"],
    "R": ["red cards", "red card", "reds", "dismissals", "sendings off", "sending off"],
    "SAVES": ["goalkeeper saves", "saves made", "saves"],
    "CLS": ["clean sheets", "clean sheet", "shutouts", "shutout"],
    "PSC": ["penalties scored", "penalty scored", "penalty goals", "pens scored"],
    "PM": ["penalties missed", "penalty missed", "missed penalties", "pens missed"],
    "PCO": ["penalties conceded", "penalty conceded", "conceded penalties", "gave away penalties"],
    "PSV": ["penalties saved", "penalty saved", "saved penalties", "pens saved"],
    "GI": ["goal involvements", "goal involvement", "goals and assists", "goal contributions"],
    "MOM": ["man of the match", "player of the match", "moms", "mom"],
    "FTP": ["fantasy points", "fantasy point", "fantasy score", "points", "ftp"],
    "GPERAPP": [
        "goals per appearance", "goals per app", "goals per game", "goals per match",
        "goals on average", "average goals",
    ],
    "CPERAPP": [
        "conceded per appearance", "conceded per app", "conceded per game",
        "conceded per match", "conceded on average", "average conceded",
    ],
    "MPERG": ["minutes per goal", "mins per goal", "time per goal"],
    "PENALTY_CONVERSION_RATE": [
        "penalty conversion rate", "penalty record", "spot kick record", "pen conversion",
    ],
}

# Generic words that only count as a metric when nothing more specific matched
WEAK_PSEUDONYMS = {"games", "matches", "points"}

# "goals ... conceded" asks about conceded goals, not goals scored
METRIC_SUPERSEDES: Dict[str, Tuple[str, ...]] = {
    "C": ("G",),
    "PSV": ("SAVES",),
}

LOCATION_PSEUDONYMS: Dict[str, List[str]] = {
    "home": ["at home", "home games", "home matches", "home ground", "home"],
    "away": ["away from home", "away games", "away matches", "on the road", "away"],
}

TIME_FRAME_PSEUDONYMS: Dict[str, List[str]] = {
    "consecutive": ["consecutive", "in a row", "straight"],
    "between_dates": ["between", "since", "until"],
    "season": ["this season", "last season", "per season", "each season", "season"],
}

POSITION_PSEUDONYMS: Dict[str, List[str]] = {
    "GK": ["goalkeeper", "keeper", "in goal"],
    "DEF": ["defender", "in defence", "in defense"],
    "MID": ["midfielder", "in midfield"],
    "FWD": ["forward", "striker", "up front"],
}

FIRST_PERSON_TOKENS = ("i", "i've", "me", "my", "myself")

QUESTION_WORDS = ("how", "what", "which", "who", "where", "when", "why")


# =============================================================================
# TEAMS
# =============================================================================

TEAM_ORDINALS = {
    1: ("1s", "1st", "first", "firsts"),
    2: ("2s", "2nd", "second", "seconds"),
    3: ("3s", "3rd", "third", "thirds"),
    4: ("4s", "4th", "fourth", "fourths"),
    5: ("5s", "5th", "fifth", "fifths"),
    6: ("6s", "6th", "sixth", "sixths"),
    7: ("7s", "7th", "seventh", "sevenths"),
    8: ("8s", "8th", "eighth", "eighths"),
}

_ORDINAL_SUFFIX = {1: "st", 2: "nd", 3: "rd"}

# "3rd", "third", "3s" -> "3rd XI"
TEAM_ALIASES: Dict[str, str] = {
    alias: f"{n}{_ORDINAL_SUFFIX.get(n, 'th')} XI"
    for n, aliases in TEAM_ORDINALS.items()
    for alias in aliases
}

TEAM_REFERENCE_PATTERN = re.compile(
    r"\b(" + "|".join(sorted(TEAM_ALIASES, key=len, reverse=True)) + r")(\s+(?:team|teams|xi))?\b",
    re.IGNORECASE,
)


# =============================================================================
# SPELLING DICTIONARY - STATIC TERMS
# =============================================================================

COMMON_TERMS = [
    # Stats vocabulary
    "goals", "goal", "assists", "assist", "appearances", "apps", "minutes", "yellow",
    "red", "cards", "card", "saves", "clean", "sheets", "sheet", "penalties",
    "penalty", "scored", "missed", "conceded", "saved", "fantasy", "points",
    "own", "involvements", "average", "per", "appearance", "conversion", "rate",
    "match", "matches", "game", "games", "man",
    # Qualifiers
    "home", "away", "team", "teams", "player", "players", "season", "seasons",
    "league", "cup", "friendly", "against", "versus", "club", "week",
    # Question shapes
    "how", "many", "much", "what", "which", "who", "where", "when", "why",
    "top", "best", "most", "least", "highest", "lowest", "total",
    # Glue words that must never be "corrected"
    "the", "for", "and", "with", "from", "this", "that", "they", "their",
    "all", "any", "did", "does", "there", "been", "since", "between",
    "about", "ever", "career", "year", "years", "time", "times", "number",
    "record", "playing", "scorer", "scorers", "compare", "compared", "than",
    "more", "fewer", "less", "each", "every", "last", "row", "mine",
]


# =============================================================================
# RESPONSE TEMPLATES
# =============================================================================

RESPONSE_TEMPLATES: Dict[str, str] = {
    "player_metric": "{{playerName}} has {{value}} {{metric}}.",
    "player_metric_with_context": "{{playerName}} has {{value}} {{metric}}{{context}}.",
    "player_comparison": "{{playerName}} has {{value}} {{metric}}{{context}}, compared to {{otherValue}} for {{otherPlayerName}}.",
    "player_not_found": "Player not found: I couldn't find a player named \"{{playerName}}\" in the database. Please check the spelling or try a different player name.",
    "team_not_found": "Team not found: I couldn't find the team \"{{teamName}}\". Available teams are: {{availableTeams}}.",
    "ambiguous_entity": "I'm not sure who you mean by \"{{input}}\". Did you mean {{candidates}}?",
    "no_data": "No data found: I couldn't find any {{metric}} information for {{playerName}}.",
    "zero_appearances": "{{playerName}} has made 0 appearances{{context}}.",
    "zero_value": "{{playerName}} {{phrase}}{{context}}.",
    "database_error": "Database connection error: Unable to connect to the club's database. Please try again later.",
    "query_error": "Database error: {{error}}",
    "clarification_needed": "Please clarify your question with more specific details.",
    "too_many_entities": "I can handle questions about up to {{limit}} players or teams at once. Please simplify your question.",
    "too_many_metrics": "I can handle questions about up to {{limit}} different statistics at once. Please simplify your question.",
}

# Zero-value phrasing per metric key. Anything not listed falls back to
# the regular numeric template.
ZERO_STAT_PHRASES: Dict[str, str] = {
    "APP": "has not made an appearance yet",
    "G": "has not scored a goal",
    "OPENPLAYGOALS": "has not scored a goal from open play",
    "A": "has not recorded an assist",
    "MOM": "has not received a Man of the Match award",
    "Y": "has not received a yellow card",
    "R": "has not received a red card",
    "OG": "has not scored an own goal",
    "CLS": "has not kept a clean sheet",
    "SAVES": "has not made a save",
    "PSC": "has not scored a penalty",
    "PSV": "has not saved a penalty",
    "PM": "has not missed a penalty",
    "PCO": "has not conceded a penalty",
    "C": "has not conceded a goal",
    "MIN": "has not played any minutes yet",
    "FTP": "has not recorded any fantasy points",
    "GI": "has not been involved in a goal",
    "MPERG": "has not scored a goal",
    "PENALTY_CONVERSION_RATE": "has not taken a penalty",
}


# =============================================================================
# FALLBACK PATTERNS - (regex, response, confidence), most specific first
# =============================================================================

FALLBACK_PATTERNS: List[Tuple[str, str, float]] = [
    (
        r"goals",
        "I can help you find information about goals. Could you be more specific? "
        "For example, 'How many goals has [player] scored?'",
        0.6,
    ),
    (
        r"appearances|apps",
        "I can help you find information about appearances. Try asking "
        "'How many appearances has [player] made?'",
        0.6,
    ),
    (
        r"assists",
        "I can help you find information about assists. Try asking "
        "'How many assists has [player] made?'",
        0.6,
    ),
    (
        r"player|who",
        "I can help you find information about players. Try asking "
        "'Who is the top goal scorer?' or 'How many goals has [player] scored?'",
        0.5,
    ),
    (
        r"team",
        "I can help you find information about teams. Try asking "
        "'Which team has scored the most goals?'",
        0.5,
    ),
]

GENERIC_FALLBACK_RESPONSE = (
    "I'm not sure I understand your question. Try asking something like "
    "'How many goals has [player name] scored?' or 'Who is the top goal scorer?'"
)


# =============================================================================
# LOOKUP HELPERS
# =============================================================================

def get_metric_config(key: str) -> Optional[Dict]:
    return METRIC_CONFIGS.get(key.upper()) if key else None


def find_metric_by_alias(alias: str) -> Optional[str]:
    """
    Resolve a metric alias, display name, stat type name or key to its
    canonical metric key. Returns None for unknown aliases.
    """
    lower = alias.lower().strip()
    if lower.upper() in METRIC_CONFIGS:
        return lower.upper()
    for key, config in METRIC_CONFIGS.items():
        if lower in (config["display_name"], config["stat_type"].lower()):
            return key
    for key, pseudonyms in STAT_TYPE_PSEUDONYMS.items():
        if lower in pseudonyms:
            return key
    return None


def get_metric_display_name(key: str, value: float) -> str:
    """Singular wording for exactly 1, plural otherwise."""
    config = get_metric_config(key)
    if not config:
        return key
    return config["singular"] if value == 1 else config["plural"]


def map_team_name(team_reference: str) -> str:
    """
    Map a colloquial team reference to the canonical team name.

    "3rd", "3rd team", "thirds", "3s" -> "3rd XI". Unknown references are
    returned unchanged so the resolver can fuzzy-match them.
    """
    cleaned = re.sub(r"\s+(team|teams|xi)$", "", team_reference.strip(), flags=re.IGNORECASE)
    return TEAM_ALIASES.get(cleaned.lower(), team_reference.strip())


def normalize_season(season: str) -> str:
    """
    Normalize season strings to the stored "YYYY/YY" form.

    Examples: "2019/20", "2019-20", "2019/2020", "201920" -> "2019/20"
    """
    digits = re.sub(r"\D", "", season)
    if len(digits) == 8:
        return f"{digits[:4]}/{digits[6:]}"
    if len(digits) == 6:
        return f"{digits[:4]}/{digits[4:]}"
    return season.strip()
