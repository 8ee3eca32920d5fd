"""
Domain models for sessions, project phases and generated documents.

These are held in process memory by the session store; `model_dump(mode="json")`
gives the snapshot shape returned to clients and used by export/import.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

Phase = Literal["requirements", "design", "tasks", "complete"]
DocumentKind = Literal["requirements", "design", "tasks"]
Role = Literal["user", "assistant", "system"]

PHASE_ORDER: tuple[str, ...] = ("requirements", "design", "tasks", "complete")
DOCUMENT_KINDS: tuple[str, ...] = ("requirements", "design", "tasks")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


class ConversationEntry(BaseModel):
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class PhaseConversationEntry(ConversationEntry):
    phase: Phase


# ---------------------------------------------------------------------------
# Phase data
# ---------------------------------------------------------------------------


class TechStack(BaseModel):
    frontend: list[str] = Field(default_factory=list)
    backend: list[str] = Field(default_factory=list)
    database: list[str] = Field(default_factory=list)
    deployment: list[str] = Field(default_factory=list)
    other: list[str] = Field(default_factory=list)


class ThemePreferences(BaseModel):
    style: str | None = None
    colors: list[str] = Field(default_factory=list)
    preferences: str | None = None


class UsageProfile(BaseModel):
    expected_users: str | None = None
    scalability: str | None = None
    performance: str | None = None


class RequirementsData(BaseModel):
    project_name: str = ""
    description: str = ""
    tech_stack: TechStack = Field(default_factory=TechStack)
    features: list[str] = Field(default_factory=list)
    target_audience: str = ""
    constraints: list[str] = Field(default_factory=list)
    theme: ThemePreferences = Field(default_factory=ThemePreferences)
    usage: UsageProfile = Field(default_factory=UsageProfile)
    timeline: str | None = None
    budget: str | None = None


class Component(BaseModel):
    name: str
    responsibility: str = ""
    dependencies: list[str] = Field(default_factory=list)


class Architecture(BaseModel):
    overview: str = ""
    components: list[Component] = Field(default_factory=list)
    data_flow: str = ""


class ModelField(BaseModel):
    name: str
    type: str = ""
    description: str = ""


class DataModel(BaseModel):
    name: str
    fields: list[ModelField] = Field(default_factory=list)
    relationships: list[str] = Field(default_factory=list)


class Endpoint(BaseModel):
    method: str
    path: str
    description: str = ""
    request_body: str | None = None
    response: str = ""


class ApiDesign(BaseModel):
    endpoints: list[Endpoint] = Field(default_factory=list)
    authentication: str | None = None
    rate_limit: str | None = None


class TechnologyChoices(BaseModel):
    frontend: str = ""
    backend: str = ""
    database: str = ""
    deployment: str = ""
    rationale: str = ""


class DeploymentStrategy(BaseModel):
    environment: str = ""
    cicd: str = ""
    monitoring: str = ""


class DesignData(BaseModel):
    architecture: Architecture = Field(default_factory=Architecture)
    data_models: list[DataModel] = Field(default_factory=list)
    api_design: ApiDesign = Field(default_factory=ApiDesign)
    technology_choices: TechnologyChoices = Field(default_factory=TechnologyChoices)
    deployment_strategy: DeploymentStrategy = Field(default_factory=DeploymentStrategy)


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    category: Literal["setup", "feature", "testing", "deployment", "documentation"] = "feature"
    dependencies: list[str] = Field(default_factory=list)  # ids of tasks that must finish first
    estimated_time: str | None = None
    acceptance_criteria: list[str] = Field(default_factory=list)
    technical_details: str | None = None
    order: int = 0


class TaskGroup(BaseModel):
    name: str
    task_ids: list[str] = Field(default_factory=list)
    description: str = ""


class TasksData(BaseModel):
    tasks: list[Task] = Field(default_factory=list)
    total_estimate: str | None = None
    phases: list[TaskGroup] = Field(default_factory=list)


PhaseData = Union[RequirementsData, DesignData, TasksData]

DATA_MODELS: dict[str, type[BaseModel]] = {
    "requirements": RequirementsData,
    "design": DesignData,
    "tasks": TasksData,
}


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class RequirementsDocument(BaseModel):
    kind: Literal["requirements"] = "requirements"
    data: RequirementsData
    content: str = ""  # generated markdown, empty until rendered
    version: int
    based_on_version: int | None = None
    created_at: datetime = Field(default_factory=utcnow)


class DesignDocument(BaseModel):
    kind: Literal["design"] = "design"
    data: DesignData
    content: str = ""
    version: int
    based_on_version: int | None = None  # requirements version
    created_at: datetime = Field(default_factory=utcnow)


class TasksDocument(BaseModel):
    kind: Literal["tasks"] = "tasks"
    data: TasksData
    content: str = ""
    version: int
    based_on_version: int | None = None  # design version
    created_at: datetime = Field(default_factory=utcnow)


DocumentPayload = Annotated[
    Union[RequirementsDocument, DesignDocument, TasksDocument], Field(discriminator="kind")
]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class ProjectSession(BaseModel):
    session_id: str
    project_name: str = Field(frozen=True)
    current_phase: Phase = "requirements"
    requirements: RequirementsDocument | None = None
    design: DesignDocument | None = None
    tasks: TasksDocument | None = None
    # Full version chain per kind; the fields above always hold the last entry
    document_history: dict[str, list[DocumentPayload]] = Field(
        default_factory=lambda: {kind: [] for kind in DOCUMENT_KINDS}
    )
    conversation_history: list[PhaseConversationEntry] = Field(default_factory=list)
    questions_asked: list[str] = Field(default_factory=list)
    user_answers: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_phase_change: datetime = Field(default_factory=utcnow)


class Session(BaseModel):
    session_id: str
    conversation_history: list[ConversationEntry] = Field(default_factory=list)
    project_session: ProjectSession | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    message_count: int = 0
