from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from pydantic import BaseModel, Field


# ============ ENUMS ============

class EntityType(str, Enum):
    PLAYER = "player"
    TEAM = "team"
    OPPOSITION = "opposition"
    LEAGUE = "league"
    STAT_TYPE = "stat_type"


class PositionClass(str, Enum):
    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    FWD = "FWD"


# ============ RESOLUTION & CORRECTION RECORDS ============

@dataclass
class FuzzyMatch:
    """A corpus candidate scored against the user's input."""
    candidate: str
    confidence: float  # combined score in [0, 1]
    entity_type: EntityType


@dataclass
class ResolutionResult:
    """Outcome of resolving one input string against a corpus."""
    input: str
    entity_type: EntityType
    exact_match: Optional[str] = None
    fuzzy_matches: List[FuzzyMatch] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    all_entities: List[str] = field(default_factory=list)

    @property
    def best_match(self) -> Optional[str]:
        if self.exact_match:
            return self.exact_match
        return self.fuzzy_matches[0].candidate if self.fuzzy_matches else None


@dataclass
class Correction:
    original: str
    corrected: str
    confidence: float


@dataclass
class CorrectionResult:
    corrected_text: str
    corrections: List[Correction] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.corrections)


# ============ QUESTION ANALYSIS ============

@dataclass
class Qualifiers:
    """Narrowing filters pulled out of a question. None = not mentioned."""
    team: Optional[str] = None        # canonical team name, e.g. "3rd XI"
    season: Optional[str] = None      # "2019/20"
    location: Optional[str] = None    # "home" | "away"
    time_frame: Optional[str] = None  # "season" | "consecutive" | "between_dates"
    position: Optional[str] = None    # GK/DEF/MID/FWD
    opposition: Optional[str] = None

    def is_empty(self) -> bool:
        return not any((self.team, self.season, self.location, self.position, self.opposition))

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class QuestionAnalysis:
    """Structured intent extracted from one question."""
    question: str
    entities: List[str] = field(default_factory=list)
    metrics: List[str] = field(default_factory=list)
    qualifiers: Qualifiers = field(default_factory=Qualifiers)
    uses_user_context: bool = False
    requires_clarification: bool = False
    clarification_reason: Optional[str] = None  # "too_many_entities" | "too_many_metrics"


# ============ MATCH EVENTS & FANTASY POINTS ============

@dataclass
class MatchEvent:
    """
    One player's record for one fixture.

    team_conceded is the number of goals the player's team conceded in the
    fixture; clean sheets are derived from it, not from the player row.
    """
    minutes: int = 0
    man_of_match: int = 0
    goals: int = 0              # open-play goals, penalties excluded
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    saves: int = 0
    own_goals: int = 0
    penalties_scored: int = 0
    penalties_missed: int = 0
    penalties_conceded: int = 0
    penalties_saved: int = 0
    team_conceded: int = 0
    position: Optional[str] = None
    fixture: Optional[str] = None  # display label, e.g. "2019/20 vs Old Boys"

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MatchEvent":
        """Build from a graph query row; missing or null numeric fields count as 0."""
        def _int(key: str) -> int:
            value = row.get(key)
            return int(value) if value is not None else 0

        return cls(
            minutes=_int("minutes"),
            man_of_match=_int("mom"),
            goals=_int("goals"),
            assists=_int("assists"),
            yellow_cards=_int("yellowCards"),
            red_cards=_int("redCards"),
            saves=_int("saves"),
            own_goals=_int("ownGoals"),
            penalties_scored=_int("penaltiesScored"),
            penalties_missed=_int("penaltiesMissed"),
            penalties_conceded=_int("penaltiesConceded"),
            penalties_saved=_int("penaltiesSaved"),
            team_conceded=_int("teamConceded"),
            position=row.get("class"),
            fixture=row.get("fixture"),
        )


@dataclass
class FantasyBreakdownItem:
    stat_label: str
    count: float
    points_per_unit: float
    points: float  # unrounded
    show: bool = True


# ============ ANSWERS ============

@dataclass
class Answer:
    """Orchestrator output for one question."""
    answer_text: str
    matched_metric: Optional[str] = None
    matched_entities: List[str] = field(default_factory=list)
    value: Optional[float] = None
    template_key: Optional[str] = None


# ============ REQUEST / RESPONSE SCHEMAS ============

class QuestionRequest(BaseModel):
    """Request body for the chatbot endpoint."""
    question: str = Field(..., min_length=1)
    userContext: Optional[str] = None


class AnswerResponse(BaseModel):
    answer: str
    matchedMetric: Optional[str] = None
    matchedEntities: List[str] = []

    class Config:
        extra = "allow"


class FantasyBreakdownResponse(BaseModel):
    """Per-match fantasy breakdown for one player."""
    playerName: str
    totalPoints: int
    matches: List[Dict[str, Any]]


class CacheClearRequest(BaseModel):
    entityType: Optional[str] = None      # None = every corpus
    templatePrefix: Optional[str] = None  # also drop rendered templates with this key prefix


# ============ ERRORS ============
# Raised by collaborators, caught by the orchestrator and mapped to templates.

class QAError(Exception):
    """Base class for every recoverable question-answering failure."""


class EntityNotFound(QAError):
    def __init__(self, entity: str, entity_type: EntityType, suggestions: Optional[List[str]] = None):
        self.entity = entity
        self.entity_type = entity_type
        self.suggestions = suggestions or []
        super().__init__(f"{entity_type.value} not found: {entity}")


class AmbiguousEntity(QAError):
    def __init__(self, entity: str, candidates: List[str]):
        self.entity = entity
        self.candidates = candidates
        super().__init__(f"Ambiguous entity '{entity}': {', '.join(candidates)}")


class MetricNotRecognized(QAError):
    pass


class QueryExecutionFailed(QAError):
    pass


class EmptyResultSet(QAError):
    def __init__(self, entity: str, metric: str):
        self.entity = entity
        self.metric = metric
        super().__init__(f"No {metric} data for {entity}")


class CorpusUnavailable(QAError):
    def __init__(self, entity_type: EntityType, reason: str = ""):
        self.entity_type = entity_type
        super().__init__(f"Corpus unavailable for {entity_type.value}: {reason}")


class ZeroAppearances(QAError):
    def __init__(self, entity: str, metric: str):
        self.entity = entity
        self.metric = metric
        super().__init__(f"{entity} has no appearances to divide {metric} by")
