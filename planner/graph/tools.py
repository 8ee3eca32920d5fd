"""
Agent tools.

finalize_turn is an "output" tool: the model calls it to hand back its reply
together with whatever structured project data it has gathered. It is never
executed; extract_finalize_args reads its arguments after the graph finishes.
"""
from __future__ import annotations

from langchain_core.tools import tool


@tool
def finalize_turn(
    reply: str,
    phase_data: dict | None = None,
    questions: list[str] | None = None,
    answers: dict[str, str] | None = None,
) -> str:
    """
    ALWAYS call this tool last to deliver your response to the user.

    Args:
        reply: The conversational message shown to the user (markdown allowed).

        phase_data: Structured data for the CURRENT phase. Only provide it once
            you have gathered enough information to write that phase's document;
            leave it out while you are still asking questions.

            requirements phase:
            {
              "project_name": "TaskFlow",
              "description": "...",
              "tech_stack": {"frontend": ["React"], "backend": ["FastAPI"],
                             "database": ["PostgreSQL"], "deployment": [], "other": []},
              "features": ["..."],
              "target_audience": "...",
              "constraints": ["..."],
              "theme": {"style": "...", "colors": ["..."], "preferences": "..."},
              "usage": {"expected_users": "...", "scalability": "...", "performance": "..."},
              "timeline": "...",
              "budget": "..."
            }

            design phase:
            {
              "architecture": {"overview": "...", "data_flow": "...",
                               "components": [{"name": "...", "responsibility": "...",
                                               "dependencies": ["..."]}]},
              "data_models": [{"name": "...", "relationships": ["..."],
                               "fields": [{"name": "...", "type": "...", "description": "..."}]}],
              "api_design": {"endpoints": [{"method": "GET", "path": "/...",
                                            "description": "...", "response": "..."}],
                             "authentication": "...", "rate_limit": "..."},
              "technology_choices": {"frontend": "...", "backend": "...", "database": "...",
                                     "deployment": "...", "rationale": "..."},
              "deployment_strategy": {"environment": "...", "cicd": "...", "monitoring": "..."}
            }

            tasks phase:
            {
              "tasks": [{"id": "T1", "title": "...", "description": "...",
                         "category": "setup" | "feature" | "testing" | "deployment" | "documentation",
                         "dependencies": ["..."], "estimated_time": "...",
                         "acceptance_criteria": ["..."], "technical_details": "...", "order": 1}],
              "total_estimate": "...",
              "phases": [{"name": "...", "task_ids": ["T1"], "description": "..."}]
            }

        questions: Questions you asked the user in this reply.

        answers: Answers the user gave in their last message, keyed by the
            question they answer.
    """
    # Never called; the graph ends as soon as the model emits this tool call.
    return "finalize_turn detected"


AGENT_TOOLS = [finalize_turn]
