"""
LangGraph agent state.

`messages` is the conversation handed to the model for this turn, rebuilt from
the session's conversation log on every request (no checkpointer). The other
keys feed the system prompt.
"""
from __future__ import annotations

from typing import Annotated
from typing_extensions import TypedDict
from langgraph.graph.message import add_messages


class PlannerState(TypedDict):
    messages: Annotated[list, add_messages]

    session_id: str
    project_name: str
    phase: str  # "requirements" | "design" | "tasks" | "complete"
    context_summary: str
