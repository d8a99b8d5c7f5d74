"""Tests for the fallback matcher's canned guidance."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from main import (
    FallbackMatcher,
    QuestionAnalysis,
    GENERIC_FALLBACK_RESPONSE,
    FALLBACK_PATTERNS,
)


@pytest.fixture
def matcher():
    return FallbackMatcher()


class TestFindMatch:
    def test_question_pattern(self, matcher):
        response, confidence = matcher.find_match("Tell me about goals")
        assert "goals" in response
        assert confidence == pytest.approx(0.6)

    def test_most_confident_pattern_wins(self, matcher):
        response, confidence = matcher.find_match("Which team has the most assists?")
        assert "assists" in response
        assert confidence == pytest.approx(0.6)

    def test_metric_keyword_is_down_weighted(self, matcher):
        analysis = QuestionAnalysis(question="Tell me about Luke", metrics=["A"])
        response, confidence = matcher.find_match("Tell me about Luke", analysis)
        assert "assists" in response
        assert confidence == pytest.approx(0.6 * 0.8)

    def test_no_match(self, matcher):
        assert matcher.find_match("Tell me something interesting") is None


class TestSuggest:
    def test_generic(self, matcher):
        assert matcher.suggest("Tell me something interesting") == GENERIC_FALLBACK_RESPONSE

    def test_entity_without_metric(self, matcher):
        analysis = QuestionAnalysis(question="Tell me about Luke Bangs", entities=["Luke Bangs"])
        text = matcher.suggest("Tell me about Luke Bangs", analysis)
        assert text.startswith("I found Luke Bangs in your question")
        assert "How many goals has Luke Bangs scored?" in text

    def test_metric_without_entity(self):
        matcher = FallbackMatcher(patterns=[])
        analysis = QuestionAnalysis(question="How many saves?", metrics=["SAVES"])
        text = matcher.suggest("How many saves?", analysis)
        assert text.startswith("I found saves in your question")
        assert "which player or team" in text

    def test_pattern_response_preferred(self, matcher):
        analysis = QuestionAnalysis(question="goals?", entities=["Luke Bangs"])
        assert matcher.suggest("goals?", analysis) == FALLBACK_PATTERNS[0][1]

    def test_custom_patterns(self):
        matcher = FallbackMatcher(patterns=[(r"weather", "I only know about football.", 0.9)])
        assert matcher.suggest("What's the weather like?") == "I only know about football."
