"""
Compiled LangGraph agent graph.

build_graph() → compiled graph. There is no checkpointer: the session store
owns the conversation, and each turn passes the whole (bounded) history in.
"""
from __future__ import annotations

from langchain_core.messages import AIMessage, HumanMessage
from langgraph.graph import END, START, StateGraph

from planner.graph.nodes import agent_node
from planner.graph.state import PlannerState


def build_graph():
    builder = StateGraph(PlannerState)
    builder.add_node("agent", agent_node)
    builder.add_edge(START, "agent")
    builder.add_edge("agent", END)
    return builder.compile()


def extract_finalize_args(state: PlannerState) -> dict | None:
    """
    Find the finalize_turn tool call in the current turn's AI messages (after
    the last HumanMessage). Returns None if the model answered in plain text.
    """
    for msg in reversed(state["messages"]):
        if isinstance(msg, HumanMessage):
            break
        if not isinstance(msg, AIMessage):
            continue
        for tc in (msg.tool_calls or []):
            if tc["name"] == "finalize_turn":
                return tc["args"]
    return None
