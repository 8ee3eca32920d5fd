"""
Chat agent: runs one turn of the LangGraph graph and normalizes what the model
handed back through finalize_turn.
"""
from __future__ import annotations

import asyncio
import json
import logging

from pydantic import BaseModel, Field

from planner.config import settings
from planner.errors import GenerationError
from planner.graph.graph import build_graph, extract_finalize_args
from planner.graph.nodes import ensure_credentials
from planner.memory.conversation import to_messages
from planner.schemas.project import ConversationEntry

logger = logging.getLogger(__name__)


class AgentTurn(BaseModel):
    reply: str
    phase_data: dict | None = None
    questions: list[str] = Field(default_factory=list)
    answers: dict[str, str] = Field(default_factory=dict)


def _message_text(msg) -> str:
    content = getattr(msg, "content", str(msg))
    if isinstance(content, list):
        # Anthropic-style content blocks
        return "".join(
            b.get("text", "") if isinstance(b, dict) else str(b) for b in content
        )
    return content


def _parse_json_arg(value, expected: type, name: str):
    """Some models return tool args as JSON strings; parse them back."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Could not parse %s string: %r", name, value[:200])
            return None
    return value if isinstance(value, expected) else None


def normalize_finalize_args(args: dict) -> AgentTurn:
    reply = args.get("reply") or ""
    if not isinstance(reply, str):
        reply = str(reply)
    # LLMs often return literal \n instead of real newlines in tool args
    if "\\n" in reply:
        reply = reply.replace("\\n", "\n")

    questions = _parse_json_arg(args.get("questions"), list, "questions") or []
    answers = _parse_json_arg(args.get("answers"), dict, "answers") or {}
    return AgentTurn(
        reply=reply,
        phase_data=_parse_json_arg(args.get("phase_data"), dict, "phase_data"),
        questions=[str(q) for q in questions],
        answers={str(k): str(v) for k, v in answers.items()},
    )


# Limit concurrent agent runs to prevent resource exhaustion
_agent_semaphore: asyncio.Semaphore | None = None


def _get_semaphore() -> asyncio.Semaphore:
    global _agent_semaphore
    if _agent_semaphore is None:
        _agent_semaphore = asyncio.Semaphore(settings.max_concurrent_agent_runs)
    return _agent_semaphore


class PlannerAgent:
    def __init__(self, graph=None) -> None:
        self.graph = graph or build_graph()

    def ensure_configured(self, model_id: str | None = None) -> None:
        ensure_credentials(model_id)

    async def chat(
        self,
        *,
        session_id: str,
        history: list[ConversationEntry],
        context_summary: str,
        phase: str | None,
        project_name: str = "",
        model_id: str | None = None,
    ) -> AgentTurn:
        """Run one turn. Any model failure is raised as GenerationError."""
        graph_input = {
            "messages": to_messages(history),
            "session_id": session_id,
            "project_name": project_name,
            "phase": phase or "requirements",
            "context_summary": context_summary,
        }
        config = {"configurable": {"model_id": model_id}}

        async with _get_semaphore():
            try:
                final_state = await self.graph.ainvoke(graph_input, config)
            except Exception as exc:
                logger.exception("Chat generation failed for session %s", session_id)
                raise GenerationError(
                    f"Assistant reply failed: {exc}",
                    {"session_id": session_id, "phase": phase, "capability": "chat"},
                ) from exc

        finalize_args = extract_finalize_args(final_state)
        if finalize_args is None:
            text = _message_text(final_state["messages"][-1])
            logger.info("Model did not call finalize_turn — using plain text fallback")
            return AgentTurn(reply=text)

        logger.info("finalize_turn args: %s", json.dumps(finalize_args, default=str)[:2000])
        return normalize_finalize_args(finalize_args)
