"""
Document registry: versioned requirements/design/tasks payloads per project.

Every set_* call appends a new version instead of overwriting; the project's
`requirements` / `design` / `tasks` fields point at the newest one. Design
records which requirements version it was built from, tasks which design
version. The registry does not check that those upstream versions exist.
"""
from __future__ import annotations

import logging

from planner.memory.store import SessionStore
from planner.schemas.project import (
    DesignData,
    DesignDocument,
    DOCUMENT_KINDS,
    DocumentPayload,
    ProjectSession,
    RequirementsData,
    RequirementsDocument,
    TasksData,
    TasksDocument,
)

logger = logging.getLogger(__name__)


class DocumentRegistry:
    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def _project(self, session_id: str) -> ProjectSession | None:
        session = self.store.get(session_id)
        if session is None or session.project_session is None:
            logger.warning("No project session for %s; document not stored", session_id)
            return None
        return session.project_session

    def _next_version(self, project: ProjectSession, kind: str) -> int:
        history = project.document_history.setdefault(kind, [])
        return history[-1].version + 1 if history else 1

    def _store(self, project: ProjectSession, doc: DocumentPayload) -> DocumentPayload:
        project.document_history.setdefault(doc.kind, []).append(doc)
        setattr(project, doc.kind, doc)
        project.updated_at = doc.created_at
        logger.info(
            "Stored %s v%d for session %s (based on v%s)",
            doc.kind, doc.version, project.session_id, doc.based_on_version,
        )
        return doc

    def set_requirements(self, session_id: str, data: RequirementsData) -> RequirementsDocument | None:
        project = self._project(session_id)
        if project is None:
            return None
        doc = RequirementsDocument(
            data=data,
            version=self._next_version(project, "requirements"),
            created_at=self.store.now(),
        )
        return self._store(project, doc)

    def set_design(self, session_id: str, data: DesignData) -> DesignDocument | None:
        project = self._project(session_id)
        if project is None:
            return None
        doc = DesignDocument(
            data=data,
            version=self._next_version(project, "design"),
            based_on_version=project.requirements.version if project.requirements else None,
            created_at=self.store.now(),
        )
        return self._store(project, doc)

    def set_tasks(self, session_id: str, data: TasksData) -> TasksDocument | None:
        project = self._project(session_id)
        if project is None:
            return None
        doc = TasksDocument(
            data=data,
            version=self._next_version(project, "tasks"),
            based_on_version=project.design.version if project.design else None,
            created_at=self.store.now(),
        )
        return self._store(project, doc)

    def set(self, session_id: str, kind: str, data) -> DocumentPayload | None:
        setter = {
            "requirements": self.set_requirements,
            "design": self.set_design,
            "tasks": self.set_tasks,
        }.get(kind)
        if setter is None:
            raise ValueError(f"Unknown document kind: {kind}")
        return setter(session_id, data)

    def attach_content(self, session_id: str, kind: str, markdown: str) -> DocumentPayload | None:
        """Record the rendered markdown on the newest version of `kind`."""
        if kind not in DOCUMENT_KINDS:
            raise ValueError(f"Unknown document kind: {kind}")
        project = self._project(session_id)
        doc = getattr(project, kind, None) if project else None
        if doc is None:
            return None
        rendered = doc.model_copy(update={"content": markdown})
        project.document_history[kind][-1] = rendered
        setattr(project, kind, rendered)
        project.updated_at = self.store.now()
        return rendered

    def latest(self, session_id: str, kind: str) -> DocumentPayload | None:
        session = self.store.get(session_id)
        if kind not in DOCUMENT_KINDS or session is None or session.project_session is None:
            return None
        return getattr(session.project_session, kind, None)

    def history(self, session_id: str, kind: str) -> list[DocumentPayload]:
        session = self.store.get(session_id)
        if session is None or session.project_session is None:
            return []
        return list(session.project_session.document_history.get(kind, []))
