"""
Club Stats QA Backend - entry point and re-exports.

Code lives in club_stats_qa/ modules:
- config.py:        QA_CONFIG + dataclass configs
- constants.py:     Stat catalogs, pseudonyms, team aliases, templates
- models.py:        Enums, dataclass records, pydantic schemas, errors
- cache.py:         CorpusCache (TTL) and LRUCache
- similarity.py:    Levenshtein / Jaro-Winkler / Dice scoring
- resolver.py:      EntityNameResolver
- spelling.py:      SpellingCorrector
- analyzer.py:      QuestionAnalyzer
- calculators.py:   FantasyPointsCalculator + derived metrics
- templates.py:     ResponseTemplateManager + value formatting
- fallback.py:      FallbackMatcher
- query_builder.py: Cypher query shapes
- services.py:      Neo4j HTTP executor, graph corpus provider
- chatbot.py:       QuestionAnsweringOrchestrator
- endpoints.py:     FastAPI app

Tests import from `main` - star-imports re-export everything.
"""

import logging

from club_stats_qa.config import *         # noqa: F401,F403
from club_stats_qa.constants import *      # noqa: F401,F403
from club_stats_qa.models import *         # noqa: F401,F403
from club_stats_qa.cache import *          # noqa: F401,F403
from club_stats_qa.similarity import *     # noqa: F401,F403
from club_stats_qa.resolver import *       # noqa: F401,F403
from club_stats_qa.spelling import *       # noqa: F401,F403
from club_stats_qa.analyzer import *       # noqa: F401,F403
from club_stats_qa.calculators import *    # noqa: F401,F403
from club_stats_qa.templates import *      # noqa: F401,F403
from club_stats_qa.fallback import *       # noqa: F401,F403
from club_stats_qa.query_builder import *  # noqa: F401,F403
from club_stats_qa.services import *       # noqa: F401,F403
from club_stats_qa.chatbot import *        # noqa: F401,F403
from club_stats_qa.endpoints import app    # noqa: F401

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
