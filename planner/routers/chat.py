"""
Chat endpoint.

POST /api/chat → run one planning turn, return the reply (plus the generated
                 document and project snapshot when a phase just completed)
"""
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, HTTPException, Request

from planner.errors import ConfigurationError, EmptyRequestError, GenerationError
from planner.schemas.api import (
    ChatReply,
    ChatReplyWithDocument,
    ChatRequest,
    ChatResponse,
    GeneratedDocument,
    TextPart,
)
from planner.services.orchestrator import PlanningOrchestrator, ReplyWithDocument

logger = logging.getLogger(__name__)
router = APIRouter()


def _orchestrator(request: Request) -> PlanningOrchestrator:
    """Retrieve the orchestrator built at startup from app state."""
    return request.app.state.orchestrator


@router.post("/api/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request):
    try:
        result = await _orchestrator(request).handle_message(
            body.messages,
            session_id=body.sessionId,
            project_name=body.projectName,
            model_id=body.model,
        )
    except EmptyRequestError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except ConfigurationError as exc:
        logger.error("Chat API configuration error: %s", exc)
        raise HTTPException(status_code=500, detail=exc.message)
    except GenerationError as exc:
        logger.error("Chat API error: %s", exc)
        raise HTTPException(
            status_code=500,
            detail={"error": exc.message, "details": exc.details},
        )

    message_id = f"msg-{uuid.uuid4().hex[:12]}"
    parts = [TextPart(text=result.content)]
    if isinstance(result, ReplyWithDocument):
        return ChatReplyWithDocument(
            id=message_id,
            content=result.content,
            parts=parts,
            sessionId=result.session_id,
            document=GeneratedDocument(
                type=result.document.kind,
                content=result.document.content,
                filename=result.filename,
                version=result.document.version,
            ),
            projectSession=result.project_session,
        )
    return ChatReply(
        id=message_id,
        content=result.content,
        parts=parts,
        sessionId=result.session_id,
    )
