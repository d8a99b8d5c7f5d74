"""
Club Stats QA - Question Analyzer

Pulls entities, metrics and qualifiers out of (spell-corrected) question
text using the static keyword catalogs. Every recognised phrase is masked
once consumed so later passes cannot read it a second time: a season
string is never part of a name, "penalties scored" is never also "goals".
"""

import re
import logging
from typing import Optional, List, Dict, Tuple

from club_stats_qa.config import QA_CONFIG, AnalysisConfig
from club_stats_qa.constants import (
    STAT_TYPE_PSEUDONYMS, WEAK_PSEUDONYMS, METRIC_SUPERSEDES,
    LOCATION_PSEUDONYMS, TIME_FRAME_PSEUDONYMS, POSITION_PSEUDONYMS,
    TEAM_REFERENCE_PATTERN, FIRST_PERSON_TOKENS, QUESTION_WORDS, COMMON_TERMS,
    map_team_name, normalize_season,
)
from club_stats_qa.models import QuestionAnalysis, Qualifiers

logger = logging.getLogger("club_stats_qa")


SEASON_PATTERN = re.compile(r"\b(20\d{2}\s*[/-]\s*20\d{2}|20\d{2}\s*[/-]\s*\d{2}|20\d{2}\d{2})\b")
OPPOSITION_PATTERN = re.compile(
    r"\b(?:against|vs\.?|versus)\s+(?:the\s+)?([A-Z][\w'&.-]*(?:\s+[A-Z][\w'&.-]*)*)"
)
NAME_PATTERN = re.compile(r"[A-Z][a-zA-Z'\-]+(?:\s+[A-Z][a-zA-Z'\-]+)*")
FIRST_PERSON_PATTERN = re.compile(
    r"(?<![\w'])(" + "|".join(re.escape(t) for t in FIRST_PERSON_TOKENS) + r")(?![\w'])",
    re.IGNORECASE,
)

# Capitalised words that start a question but are never part of a name
_NON_NAME_WORDS = (
    {w for w in COMMON_TERMS}
    | set(QUESTION_WORDS)
    | set(FIRST_PERSON_TOKENS)
    | set(QA_CONFIG["spelling"].strict_words)
    | {"is", "xi", "tell", "show", "give", "list", "name", "can", "could", "please", "in", "at", "on", "of", "to"}
)


def _phrase_table(pseudonyms: Dict[str, List[str]]) -> List[Tuple[str, str]]:
    """(phrase, key) pairs, longest phrase first."""
    pairs = [(phrase, key) for key, phrases in pseudonyms.items() for phrase in phrases]
    return sorted(pairs, key=lambda p: len(p[0]), reverse=True)


_METRIC_PHRASES = _phrase_table(STAT_TYPE_PSEUDONYMS)
_LOCATION_PHRASES = _phrase_table(LOCATION_PSEUDONYMS)
_TIME_FRAME_PHRASES = _phrase_table(TIME_FRAME_PSEUDONYMS)
_POSITION_PHRASES = _phrase_table(POSITION_PSEUDONYMS)


class _MaskedText:
    """Question text with consumed spans blanked out."""

    def __init__(self, text: str):
        self.chars = list(text)

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def consume(self, start: int, end: int):
        for i in range(start, end):
            self.chars[i] = " "

    def find_phrases(self, table: List[Tuple[str, str]], consume: bool = True) -> List[Tuple[int, str, str]]:
        """Longest-first phrase scan. Returns (position, key, phrase) in text order."""
        found = []
        for phrase, key in table:
            pattern = re.compile(r"(?<![\w-])" + re.escape(phrase) + r"(?![\w-])", re.IGNORECASE)
            for match in pattern.finditer(self.text):
                found.append((match.start(), key, phrase))
                if consume:
                    self.consume(match.start(), match.end())
        return sorted(found)


class QuestionAnalyzer:
    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or QA_CONFIG["analysis"]

    def analyze(self, question: str, user_context: Optional[str] = None) -> QuestionAnalysis:
        masked = _MaskedText(question)
        qualifiers = Qualifiers()

        qualifiers.season = self._extract_season(masked)
        qualifiers.team = self._extract_team(masked)
        qualifiers.opposition = self._extract_opposition(masked)

        location = masked.find_phrases(_LOCATION_PHRASES)
        qualifiers.location = location[0][1] if location else None
        position = masked.find_phrases(_POSITION_PHRASES)
        qualifiers.position = position[0][1] if position else None

        metrics = self._extract_metrics(masked)
        # Time frame words ("season") may sit inside consumed metric phrases; read last, never consume
        time_frame = masked.find_phrases(_TIME_FRAME_PHRASES, consume=False)
        qualifiers.time_frame = time_frame[0][1] if time_frame else None

        entities, uses_user_context = self._extract_entities(masked, user_context)
        if not entities and user_context and metrics:
            entities = [user_context]
            uses_user_context = True

        analysis = QuestionAnalysis(
            question=question,
            entities=entities,
            metrics=metrics,
            qualifiers=qualifiers,
            uses_user_context=uses_user_context,
        )

        if len(entities) > self.config.max_entities:
            analysis.requires_clarification = True
            analysis.clarification_reason = "too_many_entities"
        elif len(metrics) > self.config.max_metrics:
            analysis.requires_clarification = True
            analysis.clarification_reason = "too_many_metrics"

        logger.debug(f"Analysis: entities={entities} metrics={metrics} qualifiers={qualifiers.to_dict()}")
        return analysis

    # ============ QUALIFIERS ============

    @staticmethod
    def _extract_season(masked: _MaskedText) -> Optional[str]:
        match = SEASON_PATTERN.search(masked.text)
        if not match:
            return None
        masked.consume(match.start(), match.end())
        return normalize_season(match.group(1))

    @staticmethod
    def _extract_team(masked: _MaskedText) -> Optional[str]:
        for match in TEAM_REFERENCE_PATTERN.finditer(masked.text):
            alias, suffix = match.group(1), match.group(2)
            # "first" / "third" only mean a team when followed by team/xi; "thirds" always does
            if alias.isalpha() and not alias.endswith("s") and not suffix:
                continue
            masked.consume(match.start(), match.end())
            return map_team_name(alias)
        return None

    @staticmethod
    def _extract_opposition(masked: _MaskedText) -> Optional[str]:
        match = OPPOSITION_PATTERN.search(masked.text)
        if not match:
            return None
        masked.consume(match.start(), match.end())
        return match.group(1).strip()

    # ============ METRICS ============

    @staticmethod
    def _extract_metrics(masked: _MaskedText) -> List[str]:
        found = masked.find_phrases(_METRIC_PHRASES)

        strong = [(pos, key) for pos, key, phrase in found if phrase not in WEAK_PSEUDONYMS]
        chosen = strong or [(pos, key) for pos, key, phrase in found]

        metrics: List[str] = []
        for _, key in chosen:
            if key not in metrics:
                metrics.append(key)

        for winner, losers in METRIC_SUPERSEDES.items():
            if winner in metrics:
                metrics = [m for m in metrics if m not in losers]
        return metrics

    # ============ ENTITIES ============

    @staticmethod
    def _extract_entities(masked: _MaskedText, user_context: Optional[str]) -> Tuple[List[str], bool]:
        """Player-name candidates in text order; first-person words map to user_context."""
        found: List[Tuple[int, str]] = []
        uses_user_context = False

        if user_context:
            match = FIRST_PERSON_PATTERN.search(masked.text)
            if match:
                found.append((match.start(), user_context))
                uses_user_context = True
                for m in FIRST_PERSON_PATTERN.finditer(masked.text):
                    masked.consume(m.start(), m.end())

        for match in NAME_PATTERN.finditer(masked.text):
            words = match.group(0).split()
            # Strip non-name words at either end ("How", "Did", "Has")
            while words and words[0].lower() in _NON_NAME_WORDS:
                words = words[1:]
            while words and words[-1].lower() in _NON_NAME_WORDS:
                words = words[:-1]
            if words:
                found.append((match.start(), " ".join(words)))

        entities: List[str] = []
        for _, name in sorted(found):
            if name not in entities:
                entities.append(name)
        return entities, uses_user_context
