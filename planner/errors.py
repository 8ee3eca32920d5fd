"""
Exception hierarchy for the planning assistant.

Routers translate these into HTTP errors; `details` carries the context
(session id, phase, capability) that gets logged alongside the message.
"""
from __future__ import annotations

from typing import Any


class PlannerError(Exception):
    """Base exception for all planner errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PlannerError):
    """The text-generation capability has no usable credential."""


class EmptyRequestError(PlannerError):
    """The inbound request carried no messages."""

    def __init__(self) -> None:
        super().__init__("No messages provided")


class SessionNotFoundError(PlannerError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}", {"session_id": session_id})


class PhaseTransitionError(PlannerError):
    """An out-of-order phase transition was requested."""

    def __init__(self, session_id: str, current: str | None, requested: str) -> None:
        super().__init__(
            f"Cannot move from {current!r} to {requested!r}",
            {"session_id": session_id, "current_phase": current, "requested_phase": requested},
        )


class GenerationError(PlannerError):
    """The assistant reply could not be generated. Fatal for the request."""


class DocumentGenerationError(PlannerError):
    """A phase document could not be rendered. Recovered by the orchestrator."""
