"""
Shared test fixtures.

Provides: a controllable clock, an in-memory store, fake chat agent and
document generator, the orchestrator wired to them, and a FastAPI TestClient.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from planner.errors import DocumentGenerationError
from planner.memory.store import SessionStore
from planner.routers import chat as chat_router
from planner.routers import session as session_router
from planner.services.agent import AgentTurn
from planner.services.orchestrator import PlanningOrchestrator


class FakeClock:
    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, hours: float) -> None:
        self.current += timedelta(hours=hours)


class FakeAgent:
    """Chat agent double. Queue AgentTurns (or exceptions) to be returned in order."""

    def __init__(self) -> None:
        self.turns: list = []
        self.calls: list[dict] = []
        self.config_error: Exception | None = None

    def queue(self, *turns) -> None:
        self.turns.extend(turns)

    def ensure_configured(self, model_id=None) -> None:
        if self.config_error is not None:
            raise self.config_error

    async def chat(self, **kwargs) -> AgentTurn:
        self.calls.append(kwargs)
        turn = self.turns.pop(0) if self.turns else AgentTurn(reply="Tell me more.")
        if isinstance(turn, Exception):
            raise turn
        return turn


class FakeDocumentGenerator:
    """Document generator double. Records which kinds were rendered; can be told to fail."""

    def __init__(self) -> None:
        self.generated: list[str] = []
        self.inputs: list = []
        self.fail_on: set[str] = set()
        self.model_ids: list = []

    async def generate(self, kind, project, model_id=None) -> str:
        self.inputs.append((kind, project.model_copy(deep=True)))
        self.model_ids.append(model_id)
        if kind in self.fail_on:
            raise DocumentGenerationError(f"{kind} generation exploded", {"capability": "documents"})
        self.generated.append(kind)
        return f"# {kind.capitalize()}\n\nGenerated for {project.project_name}."


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock the test can move forward."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> SessionStore:
    """Provide a fresh session store on the fake clock."""
    return SessionStore(clock=clock)


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def fake_documents() -> FakeDocumentGenerator:
    return FakeDocumentGenerator()


@pytest.fixture
def orchestrator(
    store: SessionStore, fake_agent: FakeAgent, fake_documents: FakeDocumentGenerator
) -> PlanningOrchestrator:
    """Provide an orchestrator wired to the fakes, with a log cap of 50."""
    return PlanningOrchestrator(store=store, agent=fake_agent, documents=fake_documents, max_messages=50)


@pytest.fixture
def app(orchestrator: PlanningOrchestrator) -> FastAPI:
    """Create a FastAPI test application with the planner routers."""
    app = FastAPI()
    app.include_router(chat_router.router)
    app.include_router(session_router.router)
    app.state.orchestrator = orchestrator
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
