import re
import logging
from typing import Optional, List, Tuple

from club_stats_qa.constants import FALLBACK_PATTERNS, GENERIC_FALLBACK_RESPONSE, get_metric_config
from club_stats_qa.models import QuestionAnalysis

logger = logging.getLogger("club_stats_qa")

# Metric keywords are less specific than the whole question
METRIC_MATCH_WEIGHT = 0.8


class FallbackMatcher:
    """Canned guidance for questions the pipeline could not answer directly."""

    def __init__(self, patterns: Optional[List[Tuple[str, str, float]]] = None):
        self.patterns = [
            (re.compile(pattern, re.IGNORECASE), response, confidence)
            for pattern, response, confidence in (FALLBACK_PATTERNS if patterns is None else patterns)
        ]

    def find_match(self, question: str, analysis: Optional[QuestionAnalysis] = None) -> Optional[Tuple[str, float]]:
        """Highest-confidence (response, confidence) over the question and each metric keyword."""
        best: Optional[Tuple[str, float]] = None

        for pattern, response, confidence in self.patterns:
            if pattern.search(question) and (best is None or confidence > best[1]):
                best = (response, confidence)

        for keyword in self._metric_keywords(analysis):
            for pattern, response, confidence in self.patterns:
                weighted = confidence * METRIC_MATCH_WEIGHT
                if pattern.search(keyword) and (best is None or weighted > best[1]):
                    best = (response, weighted)
        return best

    def suggest(self, question: str, analysis: Optional[QuestionAnalysis] = None) -> str:
        match = self.find_match(question, analysis)
        if match:
            logger.debug(f"Fallback pattern matched with confidence {match[1]:.2f}")
            return match[0]

        entities = analysis.entities if analysis else []
        metrics = self._metric_keywords(analysis)
        if entities and not metrics:
            return (
                f"I found {', '.join(entities)} in your question, but I'm not sure what statistic "
                f"you're looking for. Try asking something like 'How many goals has {entities[0]} scored?'"
            )
        if metrics and not entities:
            return (
                f"I found {', '.join(metrics)} in your question, but I'm not sure which player or team "
                f"you're asking about. Try asking something like 'How many {metrics[0]} has [player name] scored?'"
            )
        return GENERIC_FALLBACK_RESPONSE

    @staticmethod
    def _metric_keywords(analysis: Optional[QuestionAnalysis]) -> List[str]:
        if not analysis:
            return []
        keywords = []
        for metric in analysis.metrics:
            config = get_metric_config(metric)
            keywords.append(config["display_name"] if config else metric)
        return keywords
