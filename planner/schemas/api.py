"""
Pydantic models for the HTTP contract the chat frontend expects.
Inbound messages follow the UI message shape (role + typed parts).
"""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from planner.schemas.project import ConversationEntry, DocumentKind, ProjectSession


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class MessagePart(BaseModel):
    type: str
    text: str | None = None


class UIMessage(BaseModel):
    id: str | None = None
    role: Literal["user", "assistant", "system"] = "user"
    parts: list[MessagePart] = Field(default_factory=list)
    content: str | None = None  # plain-content clients

    def text(self) -> str:
        for part in self.parts:
            if part.type == "text" and part.text is not None:
                return part.text
        return self.content or ""


class ChatRequest(BaseModel):
    messages: list[UIMessage] = Field(default_factory=list)
    sessionId: str | None = Field(default=None, max_length=200)
    projectName: str | None = Field(default=None, max_length=200)
    model: str | None = Field(default=None, max_length=100)


class SessionRequest(BaseModel):
    sessionId: str = Field(..., max_length=200)


class PruneRequest(BaseModel):
    maxAgeHours: float | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Response bodies
# ---------------------------------------------------------------------------


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class GeneratedDocument(BaseModel):
    type: DocumentKind
    content: str
    filename: str
    version: int


class ChatReply(BaseModel):
    kind: Literal["reply"] = "reply"
    id: str
    role: Literal["assistant"] = "assistant"
    content: str
    parts: list[TextPart]
    sessionId: str


class ChatReplyWithDocument(BaseModel):
    kind: Literal["reply_with_document"] = "reply_with_document"
    id: str
    role: Literal["assistant"] = "assistant"
    content: str
    parts: list[TextPart]
    sessionId: str
    document: GeneratedDocument
    projectSession: ProjectSession


ChatResponse = Annotated[Union[ChatReply, ChatReplyWithDocument], Field(discriminator="kind")]


class SessionSnapshot(BaseModel):
    sessionId: str
    messages: list[ConversationEntry]
    messageCount: int
    projectSession: ProjectSession | None = None
    summary: str
    createdAt: str
    updatedAt: str


class SessionListResponse(BaseModel):
    sessions: list[str]


class PruneResponse(BaseModel):
    evicted: int


class ModelInfo(BaseModel):
    id: str
    label: str
    provider: str


class ModelsResponse(BaseModel):
    models: list[ModelInfo]
