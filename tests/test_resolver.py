"""Tests for EntityNameResolver: exact/fuzzy resolution, suggestions, corpus caching."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import datetime, timedelta

import pytest

from main import (
    EntityNameResolver,
    EntityType,
    CorpusCache,
    EntityNotFound,
    AmbiguousEntity,
)
from conftest import FakeCorpusProvider, DEFAULT_CORPORA


class TestExactMatch:
    def test_every_corpus_name_resolves_exactly(self, resolver):
        for entity_type, names in DEFAULT_CORPORA.items():
            for name in names:
                result = asyncio.run(resolver.resolve(name, entity_type))
                assert result.exact_match == name
                assert result.fuzzy_matches == []
                assert result.suggestions == []

    def test_case_insensitive(self, resolver):
        result = asyncio.run(resolver.resolve("luke bangs", EntityType.PLAYER))
        assert result.exact_match == "Luke Bangs"

    def test_normalized_form(self, resolver):
        """Extra whitespace and punctuation still match exactly."""
        result = asyncio.run(resolver.resolve("  Luke   Bangs! ", EntityType.PLAYER))
        assert result.exact_match == "Luke Bangs"


class TestFuzzyMatch:
    def test_typo_fuzzy_matched(self, resolver):
        result = asyncio.run(resolver.resolve("Luke Bnags", EntityType.PLAYER))
        assert result.exact_match is None
        assert result.fuzzy_matches[0].candidate == "Luke Bangs"
        assert result.fuzzy_matches[0].confidence >= 0.8
        assert result.fuzzy_matches[0].entity_type == EntityType.PLAYER

    def test_matches_sorted_and_capped(self):
        names = ["Sam Smith", "Sam Smyth", "Sam Smithe", "Sam Smithy", "Pam Smith"]
        resolver = EntityNameResolver(FakeCorpusProvider({EntityType.PLAYER: names}))
        result = asyncio.run(resolver.resolve("Sam Smit", EntityType.PLAYER))
        confidences = [m.confidence for m in result.fuzzy_matches]
        assert len(result.fuzzy_matches) <= 3
        assert confidences == sorted(confidences, reverse=True)
        assert all(0.6 <= c <= 1.0 for c in confidences)

    def test_nothing_close(self, resolver):
        result = asyncio.run(resolver.resolve("Zzyzx Qwerty", EntityType.PLAYER))
        assert result.fuzzy_matches == []
        assert result.best_match is None


class TestSuggestions:
    def test_prefix_before_substring(self):
        names = ["Old Boys Reserves", "The Old Boys", "Old Boys"]
        resolver = EntityNameResolver(FakeCorpusProvider({EntityType.OPPOSITION: names}))
        result = asyncio.run(resolver.resolve("Old Boy", EntityType.OPPOSITION))
        assert result.suggestions == ["Old Boys Reserves", "Old Boys", "The Old Boys"]

    def test_capped_at_three(self):
        names = [f"Old Boys {n}" for n in range(6)]
        resolver = EntityNameResolver(FakeCorpusProvider({EntityType.OPPOSITION: names}))
        result = asyncio.run(resolver.resolve("Old", EntityType.OPPOSITION))
        assert len(result.suggestions) == 3


class TestResolveEntity:
    def test_exact(self, resolver):
        assert asyncio.run(resolver.resolve_entity("Joe Bloggs", EntityType.PLAYER)) == "Joe Bloggs"

    def test_single_confident_fuzzy_accepted(self, resolver):
        assert asyncio.run(resolver.resolve_entity("Luke Bnags", EntityType.PLAYER)) == "Luke Bangs"

    def test_comparable_matches_are_ambiguous(self, resolver):
        """'Chris Jon' is equally close to Jones and Jonas - ask, don't guess."""
        with pytest.raises(AmbiguousEntity) as exc_info:
            asyncio.run(resolver.resolve_entity("Chris Jon", EntityType.PLAYER))
        assert set(exc_info.value.candidates) >= {"Chris Jones", "Chris Jonas"}

    def test_not_found(self, resolver):
        with pytest.raises(EntityNotFound) as exc_info:
            asyncio.run(resolver.resolve_entity("Zzyzx Qwerty", EntityType.PLAYER))
        assert exc_info.value.entity_type == EntityType.PLAYER

    def test_convenience_helpers(self, resolver):
        assert asyncio.run(resolver.entity_exists("luke bangs", EntityType.PLAYER)) is True
        assert asyncio.run(resolver.entity_exists("Luke Bnags", EntityType.PLAYER)) is False
        assert asyncio.run(resolver.get_best_match("Luke Bnags", EntityType.PLAYER)) == "Luke Bangs"


class TestCorpusCache:
    def test_corpus_fetched_once_within_ttl(self, corpus_provider, resolver):
        asyncio.run(resolver.resolve("Luke Bangs", EntityType.PLAYER))
        asyncio.run(resolver.resolve("Joe Bloggs", EntityType.PLAYER))
        assert corpus_provider.calls.count(EntityType.PLAYER) == 1

    def test_refetched_after_ttl(self):
        now = [datetime(2024, 1, 1, 12, 0, 0)]
        provider = FakeCorpusProvider()
        cache = CorpusCache(cache_duration=300, clock=lambda: now[0])
        resolver = EntityNameResolver(provider, cache=cache)

        asyncio.run(resolver.get_all_entities(EntityType.TEAM))
        now[0] += timedelta(seconds=299)
        asyncio.run(resolver.get_all_entities(EntityType.TEAM))
        assert provider.calls.count(EntityType.TEAM) == 1

        now[0] += timedelta(seconds=2)
        asyncio.run(resolver.get_all_entities(EntityType.TEAM))
        assert provider.calls.count(EntityType.TEAM) == 2

    def test_clear_cache_for_type(self, corpus_provider, resolver):
        asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        asyncio.run(resolver.get_all_entities(EntityType.TEAM))
        resolver.clear_cache_for_type(EntityType.PLAYER)
        asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        asyncio.run(resolver.get_all_entities(EntityType.TEAM))
        assert corpus_provider.calls.count(EntityType.PLAYER) == 2
        assert corpus_provider.calls.count(EntityType.TEAM) == 1

    def test_clear_cache(self, corpus_provider, resolver):
        asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        resolver.clear_cache()
        asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        assert corpus_provider.calls.count(EntityType.PLAYER) == 2


class TestCorpusUnavailable:
    def test_provider_failure_is_empty_corpus(self):
        resolver = EntityNameResolver(FakeCorpusProvider(fail=True))
        result = asyncio.run(resolver.resolve("Luke Bangs", EntityType.PLAYER))
        assert result.exact_match is None
        assert result.fuzzy_matches == []
        assert result.all_entities == []

    def test_failure_not_cached(self):
        provider = FakeCorpusProvider(fail=True)
        resolver = EntityNameResolver(provider)
        asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        provider.fail = False
        names = asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        assert "Luke Bangs" in names

    def test_unexpected_provider_error_is_empty_corpus(self):
        provider = FakeCorpusProvider(error=ConnectionError("store reset"))
        resolver = EntityNameResolver(provider)
        assert asyncio.run(resolver.get_all_entities(EntityType.PLAYER)) == []

        provider.error = None
        names = asyncio.run(resolver.get_all_entities(EntityType.PLAYER))
        assert "Luke Bangs" in names
