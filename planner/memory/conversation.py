"""
Bounded conversation log.

A sliding window: once a session holds more than `max_messages` entries the
oldest are dropped for good. `message_count` keeps counting past the window.
"""
from __future__ import annotations

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from planner.config import settings
from planner.memory.store import SessionStore
from planner.schemas.project import ConversationEntry, PhaseConversationEntry

_MESSAGE_TYPES = {
    "user": HumanMessage,
    "assistant": AIMessage,
    "system": SystemMessage,
}


def to_messages(entries: list[ConversationEntry]) -> list[BaseMessage]:
    """Convert log entries to LangChain messages for a model call."""
    return [_MESSAGE_TYPES[e.role](content=e.content) for e in entries]


class ConversationLog:
    def __init__(self, store: SessionStore, max_messages: int | None = None) -> None:
        self.store = store
        self.max_messages = max_messages or settings.max_messages_per_session

    def append(self, session_id: str, role: str, content: str) -> ConversationEntry:
        session = self.store.get_or_create(session_id)
        now = self.store.now()
        entry = ConversationEntry(role=role, content=content, timestamp=now)

        session.conversation_history.append(entry)
        if len(session.conversation_history) > self.max_messages:
            session.conversation_history = session.conversation_history[-self.max_messages:]

        # Mirror into the project's phase-tagged log
        project = session.project_session
        if project is not None:
            project.conversation_history.append(
                PhaseConversationEntry(
                    role=role, content=content, timestamp=now, phase=project.current_phase
                )
            )
            if len(project.conversation_history) > self.max_messages:
                project.conversation_history = project.conversation_history[-self.max_messages:]

        session.message_count += 1
        session.updated_at = now
        return entry

    def get_all(self, session_id: str) -> list[ConversationEntry]:
        session = self.store.get(session_id)
        return list(session.conversation_history) if session else []

    def summarize(self, session_id: str) -> str:
        session = self.store.get(session_id)
        if session is None:
            return "No context available"

        lines = [
            f"Session: {session_id}",
            f"Messages: {session.message_count}",
        ]
        project = session.project_session
        if project is not None:
            lines.append(f"Project: {project.project_name}")
            lines.append(f"Phase: {project.current_phase}")
            lines.append(f"Questions Asked: {len(project.questions_asked)}")
            for kind in ("requirements", "design", "tasks"):
                doc = getattr(project, kind)
                if doc is not None:
                    lines.append(f"  ✓ {kind.capitalize()} v{doc.version} recorded")
        return "\n".join(lines) + "\n"
