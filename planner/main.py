"""
FastAPI application entrypoint.

Lifecycle:
  startup  → build the session store, chat agent, document generator and orchestrator
  shutdown → drop all in-memory sessions
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import APIKeyHeader

from planner.config import settings
from planner.memory.store import SessionStore
from planner.routers import chat as chat_router
from planner.routers import session as session_router
from planner.services.agent import PlannerAgent
from planner.services.documents import DocumentGenerator
from planner.services.orchestrator import PlanningOrchestrator

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────────────────
    store = SessionStore()
    logger.info("Compiling LangGraph graph…")
    app.state.orchestrator = PlanningOrchestrator(
        store=store,
        agent=PlannerAgent(),
        documents=DocumentGenerator(),
    )
    logger.info(
        "Planner ready (max %d messages per session, model=%s).",
        settings.max_messages_per_session, settings.default_model,
    )
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    logger.info("Dropping %d in-memory session(s)…", len(store.list_active_keys()))
    store.clear_all()


app = FastAPI(
    title="Planning Assistant",
    version="0.1.0",
    description="Requirements → Design → Tasks planning assistant backed by LangGraph.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API key authentication (when PLANNER_API_KEY is set in env)
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def _verify_api_key(api_key: str | None = Depends(_api_key_header)):
    if settings.planner_api_key and api_key != settings.planner_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


_auth = [Depends(_verify_api_key)]

app.include_router(chat_router.router, dependencies=_auth)
app.include_router(session_router.router, dependencies=_auth)


@app.get("/health")
async def health():
    return {"status": "ok"}
