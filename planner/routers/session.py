"""
Session endpoints.

POST /session/get                      → session snapshot + conversation history
POST /session/reset                    → drop a session
GET  /sessions                         → active session ids
POST /sessions/prune                   → evict sessions idle longer than maxAgeHours
GET  /session/{id}/documents/{kind}    → generated markdown as a file download
GET  /models                           → list available LLM models
"""
from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from planner.config import settings
from planner.errors import SessionNotFoundError
from planner.graph.nodes import MODEL_REGISTRY
from planner.schemas.api import (
    ModelInfo,
    ModelsResponse,
    PruneRequest,
    PruneResponse,
    SessionListResponse,
    SessionRequest,
    SessionSnapshot,
)
from planner.services.documents import document_filename
from planner.services.orchestrator import PlanningOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


def _orchestrator(request: Request) -> PlanningOrchestrator:
    return request.app.state.orchestrator


# ---------------------------------------------------------------------------
# GET /models
# ---------------------------------------------------------------------------


@router.get("/models", response_model=ModelsResponse)
async def list_models():
    """Return all available LLM models."""
    models = [
        ModelInfo(id=mid, label=entry["label"], provider=entry["provider"])
        for mid, entry in MODEL_REGISTRY.items()
    ]
    return ModelsResponse(models=models)


# ---------------------------------------------------------------------------
# POST /session/get
# ---------------------------------------------------------------------------


@router.post("/session/get", response_model=SessionSnapshot)
async def get_session(body: SessionRequest, request: Request):
    orchestrator = _orchestrator(request)
    try:
        session = orchestrator.store.require(body.sessionId)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)

    return SessionSnapshot(
        sessionId=session.session_id,
        messages=session.conversation_history,
        messageCount=session.message_count,
        projectSession=session.project_session,
        summary=orchestrator.log.summarize(session.session_id),
        createdAt=session.created_at.isoformat(),
        updatedAt=session.updated_at.isoformat(),
    )


# ---------------------------------------------------------------------------
# POST /session/reset
# ---------------------------------------------------------------------------


@router.post("/session/reset")
async def reset_session(body: SessionRequest, request: Request):
    store = _orchestrator(request).store
    try:
        store.require(body.sessionId)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    store.remove(body.sessionId)
    logger.info("Reset session %s", body.sessionId)
    return {"status": "reset"}


# ---------------------------------------------------------------------------
# Session housekeeping
# ---------------------------------------------------------------------------


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(request: Request):
    return SessionListResponse(sessions=_orchestrator(request).store.list_active_keys())


@router.post("/sessions/prune", response_model=PruneResponse)
async def prune_sessions(request: Request, body: PruneRequest | None = None):
    max_age = (body.maxAgeHours if body else None) or settings.session_max_age_hours
    evicted = _orchestrator(request).store.evict_older_than(max_age)
    return PruneResponse(evicted=evicted)


# ---------------------------------------------------------------------------
# GET /session/{session_id}/documents/{kind}
# ---------------------------------------------------------------------------


@router.get("/session/{session_id}/documents/{kind}", response_class=PlainTextResponse)
async def download_document(
    session_id: str,
    kind: Literal["requirements", "design", "tasks"],
    request: Request,
):
    orchestrator = _orchestrator(request)
    doc = orchestrator.registry.latest(session_id, kind)
    if doc is None or not doc.content:
        raise HTTPException(status_code=404, detail=f"No {kind} document for this session")

    project = orchestrator.phases.get(session_id)
    filename = document_filename(project.project_name, kind)
    return PlainTextResponse(
        doc.content,
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
