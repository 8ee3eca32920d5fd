"""
Prompt text: the chat system prompt (assembled fresh each turn from state) and
the three document templates used by the document generator.
"""
from __future__ import annotations

from langchain_core.prompts import ChatPromptTemplate

from planner.graph.state import PlannerState

_BASE_PROMPT = """You are a project planning assistant. You help developers turn a project idea into \
three documents, one per phase:

1. Requirements: what is being built, for whom, with which stack and constraints.
2. Design: architecture, components, data models, API, technology rationale, deployment.
3. Tasks: an ordered implementation plan an AI coding agent can follow.

How to behave:
- Be conversational. Ask one question at a time unless questions naturally group.
- Acknowledge answers and explain suggestions briefly.
- Say which phase you are in and what is still missing.
- Finish every turn by calling finalize_turn with your reply."""

_PHASE_INSTRUCTIONS = {
    "requirements": (
        "You are in the REQUIREMENTS phase. "
        "Ask about the idea, target users, key features, tech stack preferences, "
        "design/theme style, constraints, expected usage and scale, timeline and budget. "
        "Ask follow-up questions based on the answers. "
        "When you understand the project well enough to write Requirements.md, "
        "include phase_data with the requirements structure in finalize_turn."
    ),
    "design": (
        "You are in the DESIGN phase. Requirements.md has been generated. "
        "Propose an architecture, components, data models, API endpoints and a deployment "
        "strategy, and ask whether changes are needed. "
        "Once the user agrees with the design, include phase_data with the design structure."
    ),
    "tasks": (
        "You are in the TASKS phase. Design.md has been generated. "
        "Break the design into concrete, ordered tasks with dependencies and acceptance criteria. "
        "Once the plan is settled, include phase_data with the tasks structure."
    ),
    "complete": (
        "All three documents are done. Answer follow-up questions about them. "
        "Do not include phase_data."
    ),
}


def build_system_prompt(state: PlannerState) -> str:
    phase: str = state.get("phase", "requirements")
    project_name: str = state.get("project_name", "")
    context_summary: str = state.get("context_summary", "")

    parts = [_BASE_PROMPT, "", _PHASE_INSTRUCTIONS.get(phase, _PHASE_INSTRUCTIONS["requirements"])]
    if project_name:
        parts += ["", f"Project: {project_name}"]
    if context_summary:
        parts += ["", "## Session Context", context_summary]
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Document templates
# ---------------------------------------------------------------------------

_DOCUMENT_SYSTEM = "You write precise, well-structured project documentation in Markdown."

REQUIREMENTS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", _DOCUMENT_SYSTEM),
    ("human", """Write Requirements.md for this project from the information below.

Project information:
{project_info}

Gathered requirements data:
{requirements_data}

Conversation during the requirements phase:
{conversation_history}

User answers:
{user_answers}

Sections:
1. Project Overview
2. Target Audience
3. Core Features
4. Technical Stack
5. Design & Theme Preferences
6. Constraints & Requirements
7. Success Criteria

Return only the Markdown document. Be specific and include everything that was gathered."""),
])

DESIGN_PROMPT = ChatPromptTemplate.from_messages([
    ("system", _DOCUMENT_SYSTEM),
    ("human", """Write Design.md for this project.

Requirements.md:
{requirements}

Agreed design data:
{design_data}

Sections:
1. Architecture Overview
2. Component Structure
3. Data Models
4. API Design
5. Technology Stack Rationale
6. Security Considerations
7. Scalability & Performance Strategy
8. Deployment Architecture

Use Mermaid diagrams where they help. Return only the Markdown document."""),
])

TASKS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", _DOCUMENT_SYSTEM),
    ("human", """Write Tasks.md: a chronological implementation plan.

Design.md:
{design}

Requirements.md:
{requirements}

Agreed task data:
{tasks_data}

Group tasks into phases (setup, infrastructure, data models, API, frontend, integration,
testing, deployment, documentation). For every task use this layout:

### Task N: [Category] Title
**Description:** ...
**Dependencies:** ...
**Estimated Time:** ...
**Acceptance Criteria:**
- ...
**Technical Details:**
- ...

Each task must be specific enough for an AI coding agent to execute and ordered so that
dependencies come first. Return only the Markdown document."""),
])
