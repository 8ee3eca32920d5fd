"""
Project phase state machine.

requirements → design → tasks → complete, forward only. A phase counts as
complete once its document payload exists; that check reads the payloads, not
`current_phase`, so the two can briefly disagree inside a turn.
"""
from __future__ import annotations

import logging

from planner.errors import PhaseTransitionError
from planner.memory.store import SessionStore
from planner.schemas.project import Phase, ProjectSession

logger = logging.getLogger(__name__)

TRANSITIONS: dict[str, str] = {
    "requirements": "design",
    "design": "tasks",
    "tasks": "complete",
}

DEFAULT_PROJECT_NAME = "New Project"


def next_phase(phase: str) -> str | None:
    return TRANSITIONS.get(phase)


class PhaseMachine:
    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def initialize(self, session_id: str, project_name: str = DEFAULT_PROJECT_NAME) -> ProjectSession:
        """Attach a project session in the requirements phase. An existing one is returned untouched."""
        session = self.store.get_or_create(session_id)
        if session.project_session is not None:
            logger.warning(
                "Project session already exists for %s (phase=%s); not reinitializing",
                session_id, session.project_session.current_phase,
            )
            return session.project_session

        now = self.store.now()
        session.project_session = ProjectSession(
            session_id=session_id,
            project_name=project_name,
            current_phase="requirements",
            created_at=now,
            updated_at=now,
            last_phase_change=now,
        )
        self.store.touch(session)
        logger.info("Initialized project %r for session %s", project_name, session_id)
        return session.project_session

    def get(self, session_id: str) -> ProjectSession | None:
        session = self.store.get(session_id)
        return session.project_session if session else None

    def current_phase(self, session_id: str) -> Phase | None:
        project = self.get(session_id)
        return project.current_phase if project else None

    def advance_phase(self, session_id: str, target: str) -> None:
        project = self.get(session_id)
        current = project.current_phase if project else None
        if project is None or TRANSITIONS.get(current) != target:
            raise PhaseTransitionError(session_id, current, target)

        now = self.store.now()
        project.current_phase = target
        project.updated_at = now
        project.last_phase_change = now
        logger.info("Session %s moved %s → %s", session_id, current, target)

    def is_phase_complete(self, session_id: str, phase: str) -> bool:
        project = self.get(session_id)
        if project is None:
            return False
        if phase == "requirements":
            return project.requirements is not None
        if phase == "design":
            return project.design is not None
        if phase == "tasks":
            return project.tasks is not None
        if phase == "complete":
            return all((project.requirements, project.design, project.tasks))
        return False

    def record_question(self, session_id: str, question: str) -> None:
        project = self.get(session_id)
        if project is not None:
            project.questions_asked.append(question)

    def record_answer(self, session_id: str, question: str, answer: str) -> None:
        project = self.get(session_id)
        if project is not None:
            project.user_answers[question] = answer
