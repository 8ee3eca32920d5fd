"""
LangGraph node functions and the chat model factory.

Graph topology:
  START → agent → END
The agent node answers with a finalize_turn tool call (or plain text).
"""
from __future__ import annotations

import logging
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import AIMessage, SystemMessage
from langchain_core.runnables import RunnableConfig
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from planner.config import settings
from planner.errors import ConfigurationError
from planner.graph.prompts import build_system_prompt
from planner.graph.state import PlannerState
from planner.graph.tools import AGENT_TOOLS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Model registry & factory
# ---------------------------------------------------------------------------

MODEL_REGISTRY: dict[str, dict[str, str]] = {
    "deepseek-chat": {
        "provider": "openrouter",
        "model": "deepseek/deepseek-chat",
        "label": "DeepSeek Chat (OpenRouter)",
    },
    "claude-sonnet-4-6": {
        "provider": "anthropic",
        "model": "claude-sonnet-4-6",
        "label": "Claude Sonnet 4.6",
    },
    "gemini-2.5-flash": {
        "provider": "google",
        "model": "gemini-2.5-flash",
        "label": "Gemini 2.5 Flash",
    },
}

DEFAULT_MODEL = "deepseek-chat"

_PROVIDER_KEYS = {
    "openrouter": ("openrouter_api_key", "OPENROUTER_API_KEY"),
    "anthropic": ("anthropic_api_key", "ANTHROPIC_API_KEY"),
    "google": ("google_api_key", "GOOGLE_API_KEY"),
}

# Cache LLM instances so we don't re-create them on every call
_llm_cache: dict[tuple[str, str], Any] = {}


def resolve_model_id(model_id: str | None) -> str:
    model_id = model_id or settings.default_model
    if model_id not in MODEL_REGISTRY:
        logger.warning("Unknown model_id %r, falling back to %s", model_id, DEFAULT_MODEL)
        return DEFAULT_MODEL
    return model_id


def ensure_credentials(model_id: str | None) -> str:
    """Raise ConfigurationError if the provider behind `model_id` has no API key."""
    model_id = resolve_model_id(model_id)
    provider = MODEL_REGISTRY[model_id]["provider"]
    attr, env_name = _PROVIDER_KEYS[provider]
    if not getattr(settings, attr):
        raise ConfigurationError(
            f"API key not configured. Please add {env_name} to your .env file.",
            {"model_id": model_id, "provider": provider},
        )
    return model_id


def get_llm(model_id: str | None, purpose: str = "chat"):
    """
    Return a cached chat model. purpose="chat" binds the agent tools at the
    conversational temperature; purpose="document" is a plain model at the
    lower document temperature.
    """
    model_id = ensure_credentials(model_id)
    cache_key = (model_id, purpose)
    if cache_key in _llm_cache:
        return _llm_cache[cache_key]

    entry = MODEL_REGISTRY[model_id]
    temperature = settings.chat_temperature if purpose == "chat" else settings.document_temperature

    if entry["provider"] == "openrouter":
        llm = ChatOpenAI(
            model=entry["model"],
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            temperature=temperature,
            timeout=settings.llm_timeout_seconds,
            max_tokens=8192,
        )
    elif entry["provider"] == "anthropic":
        llm = ChatAnthropic(
            model=entry["model"],
            anthropic_api_key=settings.anthropic_api_key,
            temperature=temperature,
            default_request_timeout=settings.llm_timeout_seconds,
            max_tokens=8192,
        )
    elif entry["provider"] == "google":
        llm = ChatGoogleGenerativeAI(
            model=entry["model"],
            google_api_key=settings.google_api_key,
            temperature=temperature,
            timeout=settings.llm_timeout_seconds,
            max_output_tokens=8192,
        )
    else:
        raise ValueError(f"Unknown provider: {entry['provider']}")

    if purpose == "chat":
        llm = llm.bind_tools(AGENT_TOOLS)

    _llm_cache[cache_key] = llm
    return llm


async def agent_node(state: PlannerState, config: RunnableConfig) -> dict:
    """Call the LLM with the current conversation + dynamic system prompt."""
    model_id = config.get("configurable", {}).get("model_id", DEFAULT_MODEL)
    llm = get_llm(model_id)

    system_prompt = build_system_prompt(state)
    messages_with_system = [SystemMessage(content=system_prompt)] + list(state["messages"])
    response: AIMessage = await llm.ainvoke(messages_with_system)
    return {"messages": [response]}
