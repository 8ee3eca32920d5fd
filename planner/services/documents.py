"""
Document generator — renders Requirements.md, Design.md and Tasks.md.

Each document is an LCEL chain: prompt template → chat model → string parser,
run at the (lower) document temperature. Design is built from the full
Requirements markdown and Tasks from the full Design and Requirements markdown.
"""
from __future__ import annotations

import json
import logging
import re

from langchain_core.output_parsers import StrOutputParser

from planner.errors import DocumentGenerationError
from planner.graph.nodes import get_llm
from planner.graph.prompts import DESIGN_PROMPT, REQUIREMENTS_PROMPT, TASKS_PROMPT
from planner.schemas.project import ProjectSession

logger = logging.getLogger(__name__)


def document_filename(project_name: str, kind: str) -> str:
    """Download name for a phase document, e.g. "My App!" → "my-app--requirements.md"."""
    sanitized = re.sub(r"[^a-z0-9]", "-", project_name, flags=re.IGNORECASE).lower()
    return f"{sanitized}-{kind}.md"


def _dump(model) -> str:
    if model is None:
        return "{}"
    return json.dumps(model.model_dump(mode="json"), indent=2)


def _upstream_markdown(doc) -> str:
    """Full upstream document text; structured data when it was never rendered."""
    if doc is None:
        return "Not available"
    return doc.content or _dump(doc.data)


class DocumentGenerator:
    def __init__(self, model_id: str | None = None) -> None:
        self.model_id = model_id

    def _chain(self, prompt, model_id: str | None = None):
        llm = get_llm(model_id or self.model_id, purpose="document")
        return prompt | llm | StrOutputParser()

    async def generate_requirements(self, project: ProjectSession, model_id: str | None = None) -> str:
        project_info = json.dumps(
            {"project_name": project.project_name, "phase": project.current_phase}, indent=2
        )
        conversation = "\n\n".join(
            f"{m.role}: {m.content}"
            for m in project.conversation_history
            if m.phase == "requirements"
        )
        return await self._chain(REQUIREMENTS_PROMPT, model_id).ainvoke({
            "project_info": project_info,
            "requirements_data": _dump(project.requirements.data if project.requirements else None),
            "conversation_history": conversation,
            "user_answers": json.dumps(project.user_answers, indent=2),
        })

    async def generate_design(self, project: ProjectSession, model_id: str | None = None) -> str:
        return await self._chain(DESIGN_PROMPT, model_id).ainvoke({
            "requirements": _upstream_markdown(project.requirements),
            "design_data": _dump(project.design.data if project.design else None),
        })

    async def generate_tasks(self, project: ProjectSession, model_id: str | None = None) -> str:
        return await self._chain(TASKS_PROMPT, model_id).ainvoke({
            "design": _upstream_markdown(project.design),
            "requirements": _upstream_markdown(project.requirements),
            "tasks_data": _dump(project.tasks.data if project.tasks else None),
        })

    async def generate(
        self, kind: str, project: ProjectSession, model_id: str | None = None
    ) -> str:
        """Render the `kind` document with the model the chat turn used (or the generator default)."""
        generators = {
            "requirements": self.generate_requirements,
            "design": self.generate_design,
            "tasks": self.generate_tasks,
        }
        try:
            return await generators[kind](project, model_id)
        except Exception as exc:
            raise DocumentGenerationError(
                f"{kind} document generation failed: {exc}",
                {"session_id": project.session_id, "phase": kind, "capability": "documents"},
            ) from exc
