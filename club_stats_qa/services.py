"""
Club Stats QA - Services Module

Collaborator interfaces (query executor, corpus provider) and their
graph-store implementations: an httpx client for the Neo4j HTTP
transactional endpoint with retry and circuit breaker, and a corpus
provider that lists entity names through it.
"""

import asyncio
import random
import logging
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any, Protocol

import httpx

from club_stats_qa.config import QA_CONFIG, GraphConfig
from club_stats_qa.constants import STAT_TYPE_NAMES
from club_stats_qa.models import EntityType, QueryExecutionFailed, CorpusUnavailable
from club_stats_qa.query_builder import build_corpus_query


logger = logging.getLogger("club_stats_qa")


# ============ COLLABORATOR INTERFACES ============

class QueryExecutor(Protocol):
    async def execute(self, query: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        ...


class CorpusProvider(Protocol):
    async def list_entities(self, entity_type: EntityType) -> List[str]:
        ...


# ============ NEO4J HTTP EXECUTOR ============

def _retry_after_seconds(response: httpx.Response, default: float) -> float:
    """Retry-After in seconds; the HTTP-date form falls back to the backoff delay."""
    try:
        return float(response.headers.get("Retry-After", default))
    except ValueError:
        return default


class Neo4jHttpExecutor:
    """
    Runs parameterized Cypher through POST {url}/db/{database}/tx/commit.

    Transport failures (timeouts, connection errors, 5xx, 429) are retried
    with exponential backoff. After `breaker_threshold` consecutive exhausted
    calls the breaker opens and calls fail fast for `breaker_cooldown` seconds.
    Every failure surfaces as QueryExecutionFailed.
    """

    def __init__(
        self,
        config: Optional[GraphConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        breaker_threshold: int = 3,
        breaker_cooldown: int = 60,
    ):
        self.config = config or QA_CONFIG["graph"]
        self._client = client
        self._owns_client = client is None
        self.breaker_threshold = breaker_threshold
        self.breaker_cooldown = breaker_cooldown
        self.consecutive_failures = 0
        self.open_until: Optional[datetime] = None

    @property
    def endpoint(self) -> str:
        return f"{self.config.http_url.rstrip('/')}/db/{self.config.database}/tx/commit"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=(self.config.user, self.config.password),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
                headers={"Accept": "application/json;charset=UTF-8"},
            )
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def execute(self, query: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        now = datetime.now()
        if self.open_until and now < self.open_until:
            remaining = (self.open_until - now).seconds
            raise QueryExecutionFailed(f"Graph store circuit breaker open, retrying in {remaining}s")

        client = await self._get_client()
        payload = {"statements": [{"statement": query, "parameters": params}]}
        base_delay = self.config.base_delay
        last_error: Optional[Exception] = None

        for attempt in range(self.config.max_retries):
            try:
                response = await client.post(self.endpoint, json=payload)

                if response.status_code == 429:
                    retry_after = _retry_after_seconds(response, base_delay * (2 ** attempt))
                    logger.warning(f"Rate limited by graph store, waiting {retry_after}s")
                    await asyncio.sleep(retry_after)
                    last_error = QueryExecutionFailed("rate limited")
                    continue

                response.raise_for_status()
                self.consecutive_failures = 0
                self.open_until = None
                try:
                    body = response.json()
                except ValueError as e:
                    raise QueryExecutionFailed("Graph store returned a non-JSON response") from e
                return self._parse_rows(body)

            except httpx.HTTPStatusError as e:
                if e.response.status_code in (500, 502, 503, 504):
                    delay = base_delay * (2 ** attempt) + random.uniform(0, base_delay)
                    logger.warning(f"Graph store error {e.response.status_code}, retry in {delay:.1f}s")
                    await asyncio.sleep(delay)
                    last_error = e
                    continue
                raise QueryExecutionFailed(f"Graph store rejected request: HTTP {e.response.status_code}") from e
            except httpx.TransportError as e:
                delay = base_delay * (2 ** attempt) + random.uniform(0, base_delay)
                logger.warning(f"Connection error to graph store, retry in {delay:.1f}s: {e}")
                await asyncio.sleep(delay)
                last_error = e
                continue

        self.consecutive_failures += 1
        if self.consecutive_failures >= self.breaker_threshold:
            self.open_until = now + timedelta(seconds=self.breaker_cooldown)
            logger.error(
                f"Circuit breaker OPEN after {self.consecutive_failures} consecutive failures. "
                f"Cooldown {self.breaker_cooldown}s."
            )
        raise QueryExecutionFailed(f"Graph store unreachable after {self.config.max_retries} attempts: {last_error}")

    @staticmethod
    def _parse_rows(body: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Flatten the transactional response into a list of column->value dicts."""
        errors = body.get("errors") or []
        if errors:
            first = errors[0]
            raise QueryExecutionFailed(f"{first.get('code', 'Neo.Error')}: {first.get('message', '')}")

        results = body.get("results") or []
        if not results:
            return []
        columns = results[0].get("columns", [])
        return [dict(zip(columns, item.get("row", []))) for item in results[0].get("data", [])]


# ============ CORPUS PROVIDER ============

class GraphCorpusProvider:
    """Lists known entity names from the graph store. Stat types are static."""

    def __init__(self, executor: QueryExecutor, graph_label: Optional[str] = None):
        self.executor = executor
        self.graph_label = graph_label or QA_CONFIG["graph"].graph_label

    async def list_entities(self, entity_type: EntityType) -> List[str]:
        if entity_type == EntityType.STAT_TYPE:
            return list(STAT_TYPE_NAMES)

        query, params = build_corpus_query(entity_type, self.graph_label)
        try:
            rows = await self.executor.execute(query, params)
        except QueryExecutionFailed as e:
            raise CorpusUnavailable(entity_type, str(e)) from e

        names = [row.get("entityName") for row in rows]
        # Dedupe, keep store order
        unique = list(dict.fromkeys(n for n in names if n))
        logger.info(f"Fetched {len(unique)} {entity_type.value} names")
        return unique
