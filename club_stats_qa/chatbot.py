"""
Club Stats QA - Question Answering Orchestrator

Runs one question through the pipeline:
    correct -> analyze -> resolve -> build & execute query -> derive -> format

Every recoverable failure is mapped to a template sentence; the caller
always gets an Answer, never an exception.
"""

import asyncio
import logging
from typing import Optional, List, Dict, Any

from club_stats_qa.analyzer import QuestionAnalyzer
from club_stats_qa.calculators import FantasyPointsCalculator, compute_derived_metric
from club_stats_qa.config import QA_CONFIG
from club_stats_qa.constants import DERIVED_METRICS, EVENT_SCORED_METRICS, get_metric_config
from club_stats_qa.fallback import FallbackMatcher
from club_stats_qa.models import (
    Answer, EntityType, MatchEvent, Qualifiers, QuestionAnalysis,
    QAError, EntityNotFound, AmbiguousEntity, MetricNotRecognized,
    QueryExecutionFailed, EmptyResultSet, CorpusUnavailable, ZeroAppearances,
)
from club_stats_qa.query_builder import build_counter_query, build_derived_query, build_match_events_query
from club_stats_qa.resolver import EntityNameResolver
from club_stats_qa.services import QueryExecutor, CorpusProvider, GraphCorpusProvider
from club_stats_qa.spelling import SpellingCorrector
from club_stats_qa.templates import (
    ResponseTemplateManager, format_metric_value, metric_wording, zero_stat_phrase, build_context,
)

logger = logging.getLogger("club_stats_qa")


def _join_names(names: List[str]) -> str:
    """Comma-join with a final "or": "A, B or C"."""
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} or {names[-1]}"


class QuestionAnsweringOrchestrator:
    def __init__(
        self,
        executor: QueryExecutor,
        corpus_provider: Optional[CorpusProvider] = None,
        resolver: Optional[EntityNameResolver] = None,
        corrector: Optional[SpellingCorrector] = None,
        analyzer: Optional[QuestionAnalyzer] = None,
        templates: Optional[ResponseTemplateManager] = None,
        fallback: Optional[FallbackMatcher] = None,
        fantasy: Optional[FantasyPointsCalculator] = None,
        graph_label: Optional[str] = None,
    ):
        self.executor = executor
        self.graph_label = graph_label or QA_CONFIG["graph"].graph_label
        corpus_provider = corpus_provider or GraphCorpusProvider(executor, self.graph_label)
        self.resolver = resolver or EntityNameResolver(corpus_provider)
        self.corrector = corrector or SpellingCorrector(self.resolver)
        self.analyzer = analyzer or QuestionAnalyzer()
        self.templates = templates or ResponseTemplateManager()
        self.fallback = fallback or FallbackMatcher()
        self.fantasy = fantasy or FantasyPointsCalculator()

    # ============ ENTRY POINT ============

    async def answer(self, question: str, user_context: Optional[str] = None) -> Answer:
        logger.info(f"Question received: {question!r} (userContext={user_context!r})")
        text = question
        analysis: Optional[QuestionAnalysis] = None

        try:
            correction = await self.corrector.correct(question)
            text = correction.corrected_text
            analysis = self.analyzer.analyze(text, user_context)
            result = await self._answer_analysis(text, analysis)
        except QAError as e:
            result = self._answer_error(e, text, analysis)
        except Exception as e:
            logger.error(f"Unexpected error answering {question!r}: {e}", exc_info=True)
            result = self._render("database_error")

        logger.info(f"Answer produced ({result.template_key}): {result.answer_text!r}")
        return result

    # ============ PIPELINE ============

    async def _answer_analysis(self, text: str, analysis: QuestionAnalysis) -> Answer:
        if analysis.requires_clarification:
            limit = self.analyzer.config.max_entities if analysis.clarification_reason == "too_many_entities" \
                else self.analyzer.config.max_metrics
            return self._render(analysis.clarification_reason, {"limit": limit})

        if not analysis.metrics:
            raise MetricNotRecognized(text)
        if not analysis.entities:
            return Answer(
                answer_text=self.fallback.suggest(text, analysis),
                matched_metric=analysis.metrics[0],
                template_key="fallback",
            )

        qualifiers = await self._resolve_qualifiers(analysis.qualifiers)
        players = await self._resolve_players(analysis.entities)
        context = build_context(qualifiers)

        if len(players) == 2 and len(analysis.metrics) == 1:
            return await self._answer_comparison(players, analysis.metrics[0], qualifiers, context)

        sentences = []
        first: Optional[Answer] = None
        for player in players:
            for metric in analysis.metrics:
                value = await self.metric_value(player, metric, qualifiers)
                single = self._format_value(player, metric, value, context)
                sentences.append(single.answer_text)
                first = first or single

        return Answer(
            answer_text=" ".join(sentences),
            matched_metric=analysis.metrics[0],
            matched_entities=players,
            value=first.value,
            template_key=first.template_key,
        )

    async def _resolve_players(self, entities: List[str]) -> List[str]:
        """Resolve independent player names concurrently, keeping question order."""
        resolved = await asyncio.gather(
            *(self.resolver.resolve_entity(name, EntityType.PLAYER) for name in entities)
        )
        return list(dict.fromkeys(resolved))

    async def _resolve_qualifiers(self, qualifiers: Qualifiers) -> Qualifiers:
        resolved = Qualifiers(**qualifiers.__dict__)

        if qualifiers.team:
            result = await self.resolver.resolve(qualifiers.team, EntityType.TEAM)
            # An empty corpus means the store is unavailable; keep the alias-mapped name
            if result.all_entities:
                if not result.exact_match:
                    raise EntityNotFound(qualifiers.team, EntityType.TEAM, result.all_entities)
                resolved.team = result.exact_match

        if qualifiers.opposition:
            best = await self.resolver.get_best_match(qualifiers.opposition, EntityType.OPPOSITION)
            if best:
                resolved.opposition = best

        return resolved

    async def _execute(self, query: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self.executor.execute(query, params)

    async def metric_value(self, player: str, metric: str, qualifiers: Qualifiers) -> float:
        """
        Numeric value of one metric for one resolved player.

        Fantasy points are recomputed from match events, derived metrics from
        raw sums, and plain counters are read straight from the store.
        """
        if metric in EVENT_SCORED_METRICS:
            events = await self.match_events(player, qualifiers)
            return self.fantasy.total(events)

        if metric in DERIVED_METRICS:
            query, params = build_derived_query(player, qualifiers, self.graph_label)
            rows = await self._execute(query, params)
            return compute_derived_metric(metric, rows[0] if rows else {}, player)

        query, params = build_counter_query(player, metric, qualifiers, self.graph_label)
        rows = await self._execute(query, params)
        if not rows or rows[0].get("value") is None:
            raise EmptyResultSet(player, metric)
        return rows[0]["value"]

    async def match_events(self, player: str, qualifiers: Optional[Qualifiers] = None) -> List[MatchEvent]:
        query, params = build_match_events_query(player, qualifiers or Qualifiers(), self.graph_label)
        rows = await self._execute(query, params)
        return [MatchEvent.from_row(row) for row in rows]

    # ============ FORMATTING ============

    def _render(self, key: str, variables: Optional[Dict[str, Any]] = None, **fields) -> Answer:
        return Answer(answer_text=self.templates.render(key, variables), template_key=key, **fields)

    def _format_value(self, player: str, metric: str, value: float, context: str) -> Answer:
        fields = {"matched_metric": metric, "matched_entities": [player], "value": value}
        phrase = zero_stat_phrase(metric)
        if value == 0 and phrase:
            return self._render("zero_value", {"playerName": player, "phrase": phrase, "context": context}, **fields)

        variables = {
            "playerName": player,
            "value": format_metric_value(metric, value),
            "metric": metric_wording(metric, value),
        }
        if context:
            variables["context"] = context
            return self._render("player_metric_with_context", variables, **fields)
        return self._render("player_metric", variables, **fields)

    async def _answer_comparison(self, players: List[str], metric: str, qualifiers: Qualifiers, context: str) -> Answer:
        first, second = players
        value = await self.metric_value(first, metric, qualifiers)
        other = await self.metric_value(second, metric, qualifiers)
        return self._render(
            "player_comparison",
            {
                "playerName": first,
                "value": format_metric_value(metric, value),
                "metric": metric_wording(metric, value),
                "context": context,
                "otherValue": format_metric_value(metric, other),
                "otherPlayerName": second,
            },
            matched_metric=metric,
            matched_entities=players,
            value=value,
        )

    def _answer_error(self, error: QAError, text: str, analysis: Optional[QuestionAnalysis]) -> Answer:
        fields = {
            "matched_metric": analysis.metrics[0] if analysis and analysis.metrics else None,
            "matched_entities": list(analysis.entities) if analysis else [],
        }

        if isinstance(error, MetricNotRecognized):
            return Answer(answer_text=self.fallback.suggest(text, analysis), template_key="fallback", **fields)

        if isinstance(error, EntityNotFound):
            if error.entity_type == EntityType.TEAM:
                return self._render(
                    "team_not_found",
                    {"teamName": error.entity, "availableTeams": ", ".join(error.suggestions)},
                    **fields,
                )
            return self._render("player_not_found", {"playerName": error.entity}, **fields)

        if isinstance(error, AmbiguousEntity):
            return self._render(
                "ambiguous_entity", {"input": error.entity, "candidates": _join_names(error.candidates)}, **fields
            )

        if isinstance(error, ZeroAppearances):
            context = build_context(analysis.qualifiers) if analysis else ""
            return self._render("zero_appearances", {"playerName": error.entity, "context": context}, **fields)

        if isinstance(error, EmptyResultSet):
            config = get_metric_config(error.metric) or {}
            return self._render(
                "no_data",
                {"metric": config.get("display_name", error.metric), "playerName": error.entity},
                **fields,
            )

        if isinstance(error, (QueryExecutionFailed, CorpusUnavailable)):
            logger.error(f"Query execution failed: {error}")
            return self._render("database_error", **fields)

        logger.error(f"Unhandled question-answering error: {error}")
        return self._render("clarification_needed", **fields)

    # ============ FANTASY BREAKDOWN & CACHE ADMIN ============

    async def fantasy_breakdown(self, player_name: str) -> Dict[str, Any]:
        """
        Per-match fantasy breakdown for one player plus the rounded total.

        Raises:
            EntityNotFound, AmbiguousEntity: the name does not resolve
            QueryExecutionFailed: the store is unreachable
        """
        player = await self.resolver.resolve_entity(player_name, EntityType.PLAYER)
        events = await self.match_events(player)
        matches = []
        for event in events:
            items = self.fantasy.breakdown(event)
            matches.append({
                "fixture": event.fixture,
                "points": sum(item.points for item in items),
                "breakdown": [
                    {"stat": i.stat_label, "value": i.count, "points": i.points}
                    for i in items if i.show
                ],
            })
        return {"playerName": player, "totalPoints": self.fantasy.total(events), "matches": matches}

    def clear_caches(self, entity_type: Optional[EntityType] = None, template_prefix: Optional[str] = None) -> Dict[str, Any]:
        """Drop cached corpora (one type or all) and rendered templates."""
        if entity_type is None:
            self.resolver.clear_cache()
        else:
            self.resolver.clear_cache_for_type(entity_type)
        self.corrector.reset_dictionary()

        if template_prefix:
            removed = self.templates.clear_by_prefix(template_prefix)
        else:
            removed = self.templates.cache.size
            self.templates.clear_cache()
        return {"corpus": entity_type.value if entity_type else "all", "templatesRemoved": removed}
