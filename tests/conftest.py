"""Shared fixtures for the club stats QA test suite."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from main import (
    EntityType,
    MatchEvent,
    CorpusUnavailable,
    STAT_TYPE_NAMES,
    EntityNameResolver,
    SpellingCorrector,
    QuestionAnsweringOrchestrator,
)


DEFAULT_CORPORA = {
    EntityType.PLAYER: ["Luke Bangs", "Joe Bloggs", "Chris Jones", "Chris Jonas"],
    EntityType.TEAM: ["1st XI", "2nd XI", "3rd XI"],
    EntityType.OPPOSITION: ["Old Boys", "Old Hamptonians"],
    EntityType.LEAGUE: ["Premier Division"],
    EntityType.STAT_TYPE: list(STAT_TYPE_NAMES),
}


class FakeCorpusProvider:
    """In-memory corpus provider. fail=True simulates the store being down; error is raised as-is."""

    def __init__(self, corpora=None, fail=False, error=None):
        self.corpora = DEFAULT_CORPORA if corpora is None else corpora
        self.fail = fail
        self.error = error
        self.calls = []

    async def list_entities(self, entity_type):
        self.calls.append(entity_type)
        if self.fail:
            raise CorpusUnavailable(entity_type, "store down")
        if self.error is not None:
            raise self.error
        return list(self.corpora.get(entity_type, []))


class FakeExecutor:
    """Answers queries from a responder(query, params) callable and records every call."""

    def __init__(self, responder=None, error=None):
        self.responder = responder
        self.error = error
        self.calls = []

    async def execute(self, query, params):
        self.calls.append((query, params))
        if self.error is not None:
            raise self.error
        return self.responder(query, params) if self.responder else []


@pytest.fixture
def make_event():
    """Factory for MatchEvent records; a full 90 minutes by default."""
    def _make(**overrides):
        base = {"minutes": 90, "position": "MID"}
        base.update(overrides)
        return MatchEvent(**base)
    return _make


@pytest.fixture
def corpus_provider():
    return FakeCorpusProvider()


@pytest.fixture
def resolver(corpus_provider):
    return EntityNameResolver(corpus_provider)


@pytest.fixture
def corrector(resolver):
    return SpellingCorrector(resolver)


@pytest.fixture
def make_orchestrator():
    """Factory for an orchestrator wired to in-memory fakes."""
    def _make(responder=None, error=None, corpora=None, corpus_fail=False, corpus_error=None):
        executor = FakeExecutor(responder, error)
        provider = FakeCorpusProvider(corpora, fail=corpus_fail, error=corpus_error)
        orchestrator = QuestionAnsweringOrchestrator(executor, corpus_provider=provider, graph_label="testLabel")
        return orchestrator, executor
    return _make
