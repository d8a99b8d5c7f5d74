"""
Club Stats QA - Endpoints Module

FastAPI app, CORS middleware, lifespan handler and the thin HTTP shell
around the question-answering orchestrator.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from club_stats_qa.chatbot import QuestionAnsweringOrchestrator
from club_stats_qa.constants import RESPONSE_TEMPLATES
from club_stats_qa.models import (
    EntityType, QuestionRequest, AnswerResponse, FantasyBreakdownResponse, CacheClearRequest,
    EntityNotFound, AmbiguousEntity, QueryExecutionFailed,
)
from club_stats_qa.services import Neo4jHttpExecutor


logger = logging.getLogger("club_stats_qa")


# Shared orchestrator (initialized in lifespan)
orchestrator: Optional[QuestionAnsweringOrchestrator] = None
_executor: Optional[Neo4jHttpExecutor] = None


def get_orchestrator() -> QuestionAnsweringOrchestrator:
    """Get the shared orchestrator, creating one if needed."""
    global orchestrator, _executor
    if orchestrator is None:
        _executor = Neo4jHttpExecutor()
        orchestrator = QuestionAnsweringOrchestrator(_executor)
    return orchestrator


# ============ LIFESPAN ============

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    get_orchestrator()
    logger.info("Question-answering orchestrator ready")

    yield

    # Shutdown - close the graph store client
    if _executor is not None:
        await _executor.close()


# ============ APP INITIALIZATION ============

app = FastAPI(title="Club Stats QA API", version="1.0.0", lifespan=lifespan)

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============ CHATBOT ENDPOINTS ============

@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.post("/api/chatbot", response_model=AnswerResponse)
async def ask_question(request: QuestionRequest):
    """Answer a free-text question. Always responds 200 with a sentence."""
    try:
        result = await get_orchestrator().answer(request.question, request.userContext)
    except Exception as e:
        logger.error(f"Chatbot endpoint failed: {e}", exc_info=True)
        return AnswerResponse(answer=RESPONSE_TEMPLATES["database_error"])

    return AnswerResponse(
        answer=result.answer_text,
        matchedMetric=result.matched_metric,
        matchedEntities=result.matched_entities,
    )


@app.get("/api/player-fantasy-breakdown", response_model=FantasyBreakdownResponse)
async def player_fantasy_breakdown(playerName: str = Query(..., min_length=1, description="Player name")):
    """Per-match fantasy points breakdown and season total for one player."""
    try:
        data = await get_orchestrator().fantasy_breakdown(playerName)
    except EntityNotFound as e:
        raise HTTPException(status_code=404, detail=f"Player not found: {e.entity}")
    except AmbiguousEntity as e:
        raise HTTPException(status_code=400, detail=f"Ambiguous player name, candidates: {', '.join(e.candidates)}")
    except QueryExecutionFailed as e:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {e}")
    return FantasyBreakdownResponse(**data)


# ============ CACHE ADMIN ============

@app.post("/api/cache/clear")
async def clear_cache(request: CacheClearRequest):
    """Drop cached entity corpora (one type or all) and rendered templates."""
    entity_type = None
    if request.entityType:
        try:
            entity_type = EntityType(request.entityType)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown entity type: {request.entityType}")

    result = get_orchestrator().clear_caches(entity_type, request.templatePrefix)
    return {"status": "ok", **result}
