"""
Message API endpoints.

The candidate's chat with the debugging assistant. Every transcript turn is
persisted; the transcript is what the analysis later scores.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hirehiker.api.v1.sessions import (
    MessageResponse,
    get_ordered_messages,
    get_session_or_404,
    to_message_response,
)
from hirehiker.core.config import settings
from hirehiker.db.session import get_db
from hirehiker.models import CandidateSession, Message, MessageRole, SessionStatus
from hirehiker.services.assistant import AssistantError, ProblemContext, chat, chat_with_files
from hirehiker.services.workspace import Workspace, get_language_from_path, get_workspace_registry

logger = logging.getLogger("messages")

router = APIRouter()


# ============== Pydantic Schemas ==============


class SendMessageRequest(BaseModel):
    """Schema for a candidate question."""

    content: str = Field(min_length=1)


class SendMessageResponse(BaseModel):
    """Both turns produced by one send."""

    user_message: MessageResponse
    assistant_message: MessageResponse


# ============== Helper Functions ==============


def get_session_workspace(session: CandidateSession) -> Workspace:
    """The session's workspace, seeded from the problem's files on first use."""
    project_files = session.problem.project_files if session.problem else None
    return get_workspace_registry().get_or_create(session.id, project_files)


def generate_reply(session: CandidateSession, transcript: list[dict[str, str]]) -> str:
    problem = session.problem
    if problem is None:
        raise AssistantError("Session has no problem")

    workspace = get_session_workspace(session)

    if settings.ASSISTANT_FILE_ACCESS == "inline":
        project_files = [
            {"path": path, "language": get_language_from_path(path), "content": content}
            for path, content in sorted(workspace.get_all_files().items())
        ]
        return chat_with_files(
            transcript,
            description=problem.description,
            bug_tickets=problem.bug_tickets,
            project_files=project_files,
            swagger_spec=problem.swagger_spec,
        )

    context = ProblemContext(
        description=problem.description,
        file_tree=workspace.get_file_tree(),
        bug_tickets=problem.bug_tickets,
        swagger_spec=problem.swagger_spec,
    )
    return chat(transcript, context, workspace.read_file)


# ============== API Endpoints ==============


@router.get("/{session_id}/messages", response_model=list[MessageResponse])
async def get_messages(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Get the session transcript in order."""
    get_session_or_404(db, session_id)
    return [to_message_response(message) for message in get_ordered_messages(db, session_id)]


@router.post("/{session_id}/messages", response_model=SendMessageResponse)
def send_message(
    session_id: uuid.UUID,
    message_data: SendMessageRequest,
    db: Session = Depends(get_db),
):
    """
    Send a candidate question and get the assistant's reply.

    The question is stored before the assistant is called, so it stays in
    the transcript even if the reply fails.
    """
    session = get_session_or_404(db, session_id)

    if session.status != SessionStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session is not active",
        )

    next_sequence = db.query(Message).filter(Message.session_id == session_id).count()

    user_message = Message(
        session_id=session_id,
        role=MessageRole.USER,
        content=message_data.content,
        sequence=next_sequence,
    )
    db.add(user_message)
    db.commit()
    db.refresh(user_message)

    transcript = [
        {"role": message.role.value, "content": message.content}
        for message in get_ordered_messages(db, session_id)
    ]

    try:
        reply = generate_reply(session, transcript)
    except AssistantError as e:
        logger.error(f"Assistant failed for session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate response",
        )

    assistant_message = Message(
        session_id=session_id,
        role=MessageRole.ASSISTANT,
        content=reply,
        sequence=next_sequence + 1,
    )
    db.add(assistant_message)
    db.commit()
    db.refresh(assistant_message)

    return SendMessageResponse(
        user_message=to_message_response(user_message),
        assistant_message=to_message_response(assistant_message),
    )
