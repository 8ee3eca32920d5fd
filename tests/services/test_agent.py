"""
Test suite for PlannerAgent and the graph/model plumbing behind it.

The compiled graph is exercised with a stub model patched in for get_llm, so
no provider is contacted.
"""
from unittest.mock import AsyncMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda

from planner.config import settings
from planner.errors import ConfigurationError, GenerationError
from planner.graph import nodes
from planner.graph.graph import build_graph, extract_finalize_args
from planner.schemas.project import ConversationEntry
from planner.services.agent import PlannerAgent, normalize_finalize_args


def _finalize_message(args: dict) -> AIMessage:
    return AIMessage(
        content="",
        tool_calls=[{"name": "finalize_turn", "args": args, "id": "call_1"}],
    )


def _history(*texts: str) -> list[ConversationEntry]:
    return [ConversationEntry(role="user", content=t) for t in texts]


class TestNormalizeFinalizeArgs:
    def test_plain_args(self) -> None:
        turn = normalize_finalize_args({
            "reply": "What stack?",
            "questions": ["What stack?"],
            "answers": {"Who?": "Teams"},
        })

        assert turn.reply == "What stack?"
        assert turn.phase_data is None
        assert turn.questions == ["What stack?"]
        assert turn.answers == {"Who?": "Teams"}

    def test_json_string_args_are_parsed(self) -> None:
        turn = normalize_finalize_args({
            "reply": "Line one\\nLine two",
            "phase_data": '{"features": ["boards"]}',
            "questions": '["Q1"]',
        })

        assert turn.reply == "Line one\nLine two"
        assert turn.phase_data == {"features": ["boards"]}
        assert turn.questions == ["Q1"]

    def test_unparseable_args_are_dropped(self) -> None:
        turn = normalize_finalize_args({"reply": "hi", "phase_data": "{not json", "answers": "[]"})

        assert turn.phase_data is None
        assert turn.answers == {}


class TestExtractFinalizeArgs:
    def test_ignores_previous_turns(self) -> None:
        state = {"messages": [
            _finalize_message({"reply": "old"}),
            HumanMessage(content="next"),
            AIMessage(content="plain answer"),
        ]}

        assert extract_finalize_args(state) is None

    def test_finds_current_turn_call(self) -> None:
        state = {"messages": [HumanMessage(content="hi"), _finalize_message({"reply": "new"})]}

        assert extract_finalize_args(state) == {"reply": "new"}


class TestPlannerAgentChat:
    @pytest.mark.asyncio
    async def test_returns_finalize_turn_payload(self) -> None:
        graph = AsyncMock()
        graph.ainvoke.return_value = {"messages": [
            HumanMessage(content="hi"),
            _finalize_message({"reply": "Hello!", "phase_data": {"features": []}}),
        ]}
        agent = PlannerAgent(graph=graph)

        turn = await agent.chat(
            session_id="s1", history=_history("hi"), context_summary="", phase="requirements"
        )

        assert turn.reply == "Hello!"
        assert turn.phase_data == {"features": []}
        graph_input = graph.ainvoke.call_args.args[0]
        assert graph_input["phase"] == "requirements"
        assert isinstance(graph_input["messages"][0], HumanMessage)

    @pytest.mark.asyncio
    async def test_plain_text_fallback(self) -> None:
        graph = AsyncMock()
        graph.ainvoke.return_value = {"messages": [
            HumanMessage(content="hi"),
            AIMessage(content=[{"type": "text", "text": "Plain "}, {"type": "text", "text": "reply"}]),
        ]}
        agent = PlannerAgent(graph=graph)

        turn = await agent.chat(session_id="s1", history=_history("hi"), context_summary="", phase=None)

        assert turn.reply == "Plain reply"
        assert turn.phase_data is None

    @pytest.mark.asyncio
    async def test_model_failure_becomes_generation_error(self) -> None:
        graph = AsyncMock()
        graph.ainvoke.side_effect = RuntimeError("rate limited")
        agent = PlannerAgent(graph=graph)

        with pytest.raises(GenerationError) as exc_info:
            await agent.chat(
                session_id="s1", history=_history("hi"), context_summary="", phase="design"
            )

        assert exc_info.value.details == {"session_id": "s1", "phase": "design", "capability": "chat"}

    @pytest.mark.asyncio
    async def test_compiled_graph_sends_phase_prompt(self, monkeypatch) -> None:
        seen = []

        def fake_model(messages):
            seen.extend(messages)
            return _finalize_message({"reply": "Let's design it."})

        monkeypatch.setattr(nodes, "get_llm", lambda model_id: RunnableLambda(fake_model))
        agent = PlannerAgent(graph=build_graph())

        turn = await agent.chat(
            session_id="s1",
            history=_history("We agreed on requirements"),
            context_summary="Session: s1\nPhase: design\n",
            phase="design",
            project_name="TaskFlow",
        )

        assert turn.reply == "Let's design it."
        assert isinstance(seen[0], SystemMessage)
        assert "DESIGN phase" in seen[0].content
        assert "Project: TaskFlow" in seen[0].content
        assert seen[1].content == "We agreed on requirements"


class TestCredentials:
    def test_missing_key_raises_configuration_error(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "openrouter_api_key", "")

        with pytest.raises(ConfigurationError) as exc_info:
            PlannerAgent(graph=AsyncMock()).ensure_configured("deepseek-chat")

        assert "OPENROUTER_API_KEY" in exc_info.value.message

    def test_provider_specific_key(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "openrouter_api_key", "sk-or-test-key")
        monkeypatch.setattr(settings, "anthropic_api_key", "")

        assert nodes.ensure_credentials("deepseek-chat") == "deepseek-chat"
        with pytest.raises(ConfigurationError):
            nodes.ensure_credentials("claude-sonnet-4-6")

    def test_unknown_model_falls_back_to_default(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "openrouter_api_key", "sk-or-test-key")

        assert nodes.ensure_credentials("gpt-9000") == nodes.DEFAULT_MODEL
