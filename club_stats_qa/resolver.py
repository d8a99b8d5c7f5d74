"""
Club Stats QA - Entity Name Resolver

Resolves user-typed proper nouns (players, teams, oppositions, leagues,
stat types) against cached corpora from the graph store: exact match
first, then a weighted fuzzy score, plus prefix/substring suggestions.
"""

import logging
from typing import Optional, List

from club_stats_qa.cache import CorpusCache
from club_stats_qa.config import QA_CONFIG, ResolverConfig
from club_stats_qa.models import (
    EntityType, FuzzyMatch, ResolutionResult,
    EntityNotFound, AmbiguousEntity, CorpusUnavailable,
)
from club_stats_qa.services import CorpusProvider
from club_stats_qa.similarity import normalize_name, combined_similarity

logger = logging.getLogger("club_stats_qa")


class EntityNameResolver:
    def __init__(
        self,
        corpus_provider: CorpusProvider,
        config: Optional[ResolverConfig] = None,
        cache: Optional[CorpusCache] = None,
    ):
        self.corpus_provider = corpus_provider
        self.config = config or QA_CONFIG["resolver"]
        self.cache = cache or CorpusCache(cache_duration=self.config.cache_ttl_seconds)

    # ============ CORPUS ============

    async def get_all_entities(self, entity_type: EntityType) -> List[str]:
        """
        Cached corpus for an entity type, refetched after the TTL.

        A provider failure yields an empty corpus and is not cached, so the
        next call tries the store again.
        """
        cached = self.cache.get(entity_type)
        if cached is not None:
            return cached

        try:
            names = await self.corpus_provider.list_entities(entity_type)
        except CorpusUnavailable as e:
            logger.warning(f"{e} - resolving {entity_type.value} names against an empty corpus")
            return []
        except Exception as e:
            logger.warning(
                f"Corpus fetch for {entity_type.value} failed ({type(e).__name__}: {e}) - "
                f"resolving against an empty corpus"
            )
            return []

        self.cache.set(entity_type, names)
        logger.info(f"Corpus refreshed for {entity_type.value}: {len(names)} names")
        return names

    def clear_cache(self):
        self.cache.clear()

    def clear_cache_for_type(self, entity_type: EntityType):
        self.cache.clear_type(entity_type)

    # ============ RESOLUTION ============

    async def resolve(self, input_text: str, entity_type: EntityType) -> ResolutionResult:
        entities = await self.get_all_entities(entity_type)
        result = ResolutionResult(input=input_text, entity_type=entity_type, all_entities=entities)

        normalized = normalize_name(input_text)
        if not normalized or not entities:
            return result

        exact = self._find_exact_match(input_text, normalized, entities)
        if exact:
            result.exact_match = exact
            return result

        result.fuzzy_matches = self._find_fuzzy_matches(input_text, entities, entity_type)
        result.suggestions = self._find_suggestions(normalized, entities)
        return result

    @staticmethod
    def _find_exact_match(input_text: str, normalized: str, entities: List[str]) -> Optional[str]:
        lower = input_text.strip().lower()
        for entity in entities:
            if entity.lower() == lower:
                return entity
        for entity in entities:
            if normalize_name(entity) == normalized:
                return entity
        return None

    def _find_fuzzy_matches(self, input_text: str, entities: List[str], entity_type: EntityType) -> List[FuzzyMatch]:
        matches = []
        for entity in entities:
            confidence = combined_similarity(input_text, entity, self.config)
            if confidence >= self.config.min_confidence:
                matches.append(FuzzyMatch(candidate=entity, confidence=confidence, entity_type=entity_type))
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches[:self.config.max_matches]

    def _find_suggestions(self, normalized: str, entities: List[str]) -> List[str]:
        """Prefix matches in either direction first, then substring matches."""
        prefix, substring = [], []
        for entity in entities:
            candidate = normalize_name(entity)
            if not candidate:
                continue
            if candidate.startswith(normalized) or normalized.startswith(candidate):
                prefix.append(entity)
            elif normalized in candidate or candidate in normalized:
                substring.append(entity)
        return list(dict.fromkeys(prefix + substring))[:self.config.max_suggestions]

    # ============ CONVENIENCE ============

    async def get_best_match(self, input_text: str, entity_type: EntityType) -> Optional[str]:
        result = await self.resolve(input_text, entity_type)
        return result.best_match

    async def entity_exists(self, input_text: str, entity_type: EntityType) -> bool:
        result = await self.resolve(input_text, entity_type)
        return result.exact_match is not None

    async def resolve_entity(self, input_text: str, entity_type: EntityType) -> str:
        """
        Resolve to exactly one canonical name or raise.

        An exact match wins. A fuzzy match is accepted silently only when it
        clears auto_accept_confidence and leads the runner-up by more than
        ambiguity_margin; anything weaker raises AmbiguousEntity so the
        caller asks rather than guesses.
        """
        result = await self.resolve(input_text, entity_type)
        if result.exact_match:
            return result.exact_match

        matches = result.fuzzy_matches
        if not matches:
            logger.debug(f"No {entity_type.value} match for '{input_text}'")
            raise EntityNotFound(input_text, entity_type, result.suggestions)

        top = matches[0]
        runner_up = matches[1].confidence if len(matches) > 1 else 0.0
        if top.confidence >= self.config.auto_accept_confidence and top.confidence - runner_up > self.config.ambiguity_margin:
            logger.debug(f"Fuzzy-resolved '{input_text}' -> '{top.candidate}' ({top.confidence:.2f})")
            return top.candidate

        logger.debug(f"Ambiguous {entity_type.value} '{input_text}': {[(m.candidate, round(m.confidence, 2)) for m in matches]}")
        raise AmbiguousEntity(input_text, [m.candidate for m in matches])
