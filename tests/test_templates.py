"""Tests for response template rendering, its LRU cache and value formatting."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from main import (
    ResponseTemplateManager,
    TemplateConfig,
    Qualifiers,
    format_metric_value,
    metric_wording,
    zero_stat_phrase,
    build_context,
)


@pytest.fixture
def templates():
    return ResponseTemplateManager()


class TestRender:
    def test_player_metric(self, templates):
        text = templates.render("player_metric", {"playerName": "Luke Bangs", "value": 7, "metric": "goals"})
        assert text == "Luke Bangs has 7 goals."

    def test_missing_variable_stays_literal(self, templates):
        text = templates.render("player_metric", {"playerName": "Luke Bangs", "value": 7})
        assert text == "Luke Bangs has 7 {{metric}}."

    def test_template_without_placeholders(self, templates):
        assert templates.render("clarification_needed") == (
            "Please clarify your question with more specific details."
        )

    def test_unknown_key(self, templates):
        with pytest.raises(KeyError):
            templates.render("no_such_template")

    def test_has_template(self, templates):
        assert templates.has_template("database_error")
        assert not templates.has_template("no_such_template")

    def test_custom_catalog(self):
        manager = ResponseTemplateManager({"hello": "Hello {{name}}!"})
        assert manager.render("hello", {"name": "Joe"}) == "Hello Joe!"


class TestTemplateCache:
    def test_repeat_render_hits_cache(self, templates):
        variables = {"playerName": "Luke Bangs", "value": 7, "metric": "goals"}
        first = templates.render("player_metric", variables)
        assert len(templates.cache) == 1
        second = templates.render("player_metric", dict(reversed(list(variables.items()))))
        assert second == first
        assert len(templates.cache) == 1

    def test_cached_output_matches_uncached(self):
        cached = ResponseTemplateManager()
        uncached = ResponseTemplateManager(config=TemplateConfig(cache_enabled=False))
        variables = {"playerName": "Joe Bloggs", "value": 1, "metric": "assist"}
        for _ in range(2):
            assert cached.render("player_metric", variables) == uncached.render("player_metric", variables)
        assert len(uncached.cache) == 0

    def test_lru_eviction(self):
        manager = ResponseTemplateManager(config=TemplateConfig(cache_capacity=2))
        manager.render("player_metric", {"playerName": "A"})
        manager.render("player_metric", {"playerName": "B"})
        # Touch A so B becomes least recently used
        manager.render("player_metric", {"playerName": "A"})
        manager.render("player_metric", {"playerName": "C"})
        keys = list(manager.cache._data)
        assert len(keys) == 2
        assert not any('"B"' in k for k in keys)

    def test_clear_by_prefix(self, templates):
        templates.render("player_metric", {"playerName": "A"})
        templates.render("player_metric_with_context", {"playerName": "A"})
        templates.render("no_data", {"playerName": "A"})
        assert templates.clear_by_prefix("player_metric") == 2
        assert len(templates.cache) == 1

    def test_clear_cache(self, templates):
        templates.render("no_data", {"playerName": "A"})
        templates.clear_cache()
        assert len(templates.cache) == 0


class TestFormatting:
    @pytest.mark.parametrize("metric, value, expected", [
        ("G", 7, "7"),
        ("G", 7.0, "7"),
        ("FTP", 12.5, "13"),
        ("GPERAPP", 0.75, "0.75"),
        ("GPERAPP", 2, "2.00"),
        ("CPERAPP", 1.333333, "1.33"),
        ("PENALTY_CONVERSION_RATE", 75, "75.0%"),
        ("UNKNOWN", 3, "3"),
    ])
    def test_format_metric_value(self, metric, value, expected):
        assert format_metric_value(metric, value) == expected

    def test_wording_singular_and_plural(self):
        assert metric_wording("G", 1) == "goal"
        assert metric_wording("G", 0) == "goals"
        assert metric_wording("G", 2) == "goals"
        assert metric_wording("C", 1) == "goal conceded"

    def test_zero_stat_phrase(self):
        assert zero_stat_phrase("G") == "has not scored a goal"
        assert zero_stat_phrase("GPERAPP") is None


class TestBuildContext:
    def test_empty(self):
        assert build_context(Qualifiers()) == ""

    def test_team_only(self):
        assert build_context(Qualifiers(team="3rd XI")) == " for the 3rd XI"

    def test_every_qualifier(self):
        qualifiers = Qualifiers(
            team="3rd XI", season="2019/20", location="away", position="GK", opposition="Old Boys",
        )
        assert build_context(qualifiers) == (
            " for the 3rd XI in 2019/20 away from home as a GK against Old Boys"
        )

    def test_time_frame_adds_nothing(self):
        assert build_context(Qualifiers(time_frame="season")) == ""
