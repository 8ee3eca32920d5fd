"""
Orchestration entry point: one inbound chat message → one reply.

  validate → resolve session → init project (new session) → log user text
  → assistant reply → record phase data → phase complete? render document,
  advance phase → log assistant text → Reply | ReplyWithDocument

A failed assistant reply fails the request (the user entry stays logged).
A failed document render is logged and swallowed: the phase stays put and the
next message retries the render.
"""
from __future__ import annotations

import logging
import uuid
from typing import Literal, Union

from pydantic import BaseModel, ValidationError

from planner.errors import DocumentGenerationError, EmptyRequestError, GenerationError
from planner.memory.conversation import ConversationLog
from planner.memory.documents import DocumentRegistry
from planner.memory.phases import DEFAULT_PROJECT_NAME, PhaseMachine, next_phase
from planner.memory.store import SessionStore
from planner.schemas.api import UIMessage
from planner.schemas.project import DATA_MODELS, DocumentPayload, ProjectSession
from planner.services.documents import document_filename

logger = logging.getLogger(__name__)

TRANSITION_NOTES = {
    "requirements": (
        "\n\n✅ **Requirements.md generated!** You can download it below.\n\n"
        "Now let's move to the design phase. I'll help you create a system architecture."
    ),
    "design": (
        "\n\n✅ **Design.md generated!** You can download it below.\n\n"
        "Now let's break this down into tasks. I'll create a detailed task list."
    ),
    "tasks": (
        "\n\n✅ **Tasks.md generated!** You can download it below.\n\n"
        "🎉 All three documents are ready! You can now hand them to an AI coding agent "
        "for implementation."
    ),
}


class Reply(BaseModel):
    kind: Literal["reply"] = "reply"
    session_id: str
    content: str


class ReplyWithDocument(BaseModel):
    kind: Literal["reply_with_document"] = "reply_with_document"
    session_id: str
    content: str
    document: DocumentPayload
    filename: str
    project_session: ProjectSession


TurnResult = Union[Reply, ReplyWithDocument]


def new_session_id() -> str:
    return f"session-{uuid.uuid4().hex}"


class PlanningOrchestrator:
    def __init__(self, store: SessionStore, agent, documents, max_messages: int | None = None) -> None:
        self.store = store
        self.agent = agent
        self.documents = documents
        self.phases = PhaseMachine(store)
        self.log = ConversationLog(store, max_messages)
        self.registry = DocumentRegistry(store)

    async def handle_message(
        self,
        messages: list[UIMessage],
        session_id: str | None = None,
        project_name: str | None = None,
        model_id: str | None = None,
    ) -> TurnResult:
        if not messages:
            raise EmptyRequestError()
        self.agent.ensure_configured(model_id)

        session_id = session_id or new_session_id()
        async with self.store.lock(session_id):
            return await self._run_turn(messages, session_id, project_name, model_id)

    async def _run_turn(
        self,
        messages: list[UIMessage],
        session_id: str,
        project_name: str | None,
        model_id: str | None,
    ) -> TurnResult:
        session = self.store.get_or_create(session_id)
        logger.info(
            "Processing request for session %s (%d message(s) in memory)",
            session_id, len(session.conversation_history),
        )

        # A brand-new session gets its project before the first entry is logged,
        # so the opening message lands in the phase-tagged log too
        if session.project_session is None and session.message_count == 0:
            self.phases.initialize(session_id, project_name or DEFAULT_PROJECT_NAME)

        user_text = messages[-1].text()
        self.log.append(session_id, "user", user_text)
        project = session.project_session

        context_summary = self.log.summarize(session_id)
        logger.debug("Conversation context:\n%s", context_summary)

        try:
            turn = await self.agent.chat(
                session_id=session_id,
                history=self.log.get_all(session_id),
                context_summary=context_summary,
                phase=project.current_phase if project else None,
                project_name=project.project_name if project else "",
                model_id=model_id,
            )
        except GenerationError:
            raise
        except Exception as exc:
            logger.exception("Chat generation failed for session %s", session_id)
            raise GenerationError(
                f"Assistant reply failed: {exc}",
                {"session_id": session_id, "capability": "chat"},
            ) from exc

        reply = turn.reply
        generated: DocumentPayload | None = None

        if project is not None:
            for question in turn.questions:
                self.phases.record_question(session_id, question)
            for question, answer in turn.answers.items():
                self.phases.record_answer(session_id, question, answer)
            if turn.phase_data is not None:
                self._record_phase_data(session_id, project.current_phase, turn.phase_data)

            generated = await self._maybe_generate_document(session_id, project, model_id)
            if generated is not None:
                reply += TRANSITION_NOTES[generated.kind]

        self.log.append(session_id, "assistant", reply)

        if generated is None:
            return Reply(session_id=session_id, content=reply)
        return ReplyWithDocument(
            session_id=session_id,
            content=reply,
            document=generated,
            filename=document_filename(project.project_name, generated.kind),
            project_session=project.model_copy(deep=True),
        )

    def _record_phase_data(self, session_id: str, phase: str, raw: dict) -> None:
        model = DATA_MODELS.get(phase)
        if model is None:
            logger.info("Ignoring phase data for session %s in phase %s", session_id, phase)
            return
        try:
            data = model.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding invalid %s data for session %s: %s", phase, session_id, exc
            )
            return
        self.registry.set(session_id, phase, data)

    async def _maybe_generate_document(
        self, session_id: str, project: ProjectSession, model_id: str | None = None
    ) -> DocumentPayload | None:
        phase = project.current_phase
        target = next_phase(phase)
        if target is None or not self.phases.is_phase_complete(session_id, phase):
            return None

        logger.info("%s phase complete for session %s, generating document", phase, session_id)
        try:
            markdown = await self.documents.generate(phase, project, model_id)
            doc = self.registry.attach_content(session_id, phase, markdown)
            self.phases.advance_phase(session_id, target)
        except DocumentGenerationError as exc:
            logger.error("Document generation failed: %s", exc)
            return None
        except Exception:
            logger.exception(
                "Failed to record %s document for session %s (capability=documents)",
                phase, session_id,
            )
            return None
        return doc
