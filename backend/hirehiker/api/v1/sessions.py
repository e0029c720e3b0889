"""
Session API endpoints.

Lifecycle of a candidate attempt: created by a recruiter (pending), opened
by the candidate (active), submitted (completed), optionally deleted.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hirehiker.api.v1.problems import ProblemResponse, get_problem_or_404
from hirehiker.db.base import utc_now
from hirehiker.db.session import get_db
from hirehiker.models import Analysis, CandidateSession, Difficulty, Message, SessionStatus
from hirehiker.services.code_blocks import CodeSegment, extract_code_blocks
from hirehiker.services.evaluation_config import EvaluationSettings
from hirehiker.services.workspace import get_workspace_registry

logger = logging.getLogger("sessions")

router = APIRouter()


# ============== Pydantic Schemas ==============


class SessionCreate(BaseModel):
    """Schema for creating a session (recruiter invites a candidate)."""

    candidate_name: str = Field(min_length=1)
    candidate_email: str = Field(min_length=1)
    problem_id: uuid.UUID
    evaluation_settings: Optional[EvaluationSettings] = None  # None = defaults


class SessionCompleteRequest(BaseModel):
    """Schema for completing a session."""

    solution: Optional[str] = None


class ProblemSummary(BaseModel):
    """Problem columns shown in the session list."""

    id: uuid.UUID
    title: str
    difficulty: Difficulty
    category: str
    github_repo_url: Optional[str]

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    """Bare session row."""

    id: uuid.UUID
    candidate_name: str
    candidate_email: str
    problem_id: uuid.UUID
    status: SessionStatus
    solution: Optional[str]
    evaluation_settings: Optional[dict]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class SessionListItem(BaseModel):
    """Schema for session list item on the recruiter dashboard."""

    id: uuid.UUID
    candidate_name: str
    candidate_email: str
    status: SessionStatus
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    problem: Optional[ProblemSummary]

    class Config:
        from_attributes = True


class SessionWithProblem(BaseModel):
    """Session plus the full problem (candidate page)."""

    id: uuid.UUID
    candidate_name: str
    candidate_email: str
    status: SessionStatus
    solution: Optional[str]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: datetime
    problem: Optional[ProblemResponse]

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """A chat turn; assistant turns carry the code blocks parsed from them."""

    id: uuid.UUID
    session_id: uuid.UUID
    role: str
    content: str
    sequence: int
    created_at: datetime
    code_blocks: list[CodeSegment] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    summary: str
    question_count: int
    quality_score: int
    dimension_scores: dict[str, float]
    strengths: list[str]
    improvements: list[str]
    created_at: datetime

    class Config:
        from_attributes = True


class SessionDetailResponse(SessionWithProblem):
    """Everything the recruiter's session review page needs."""

    evaluation_settings: Optional[dict]
    messages: list[MessageResponse]
    analysis: Optional[AnalysisResponse]


# ============== Helper Functions ==============


def get_session_or_404(db: Session, session_id: uuid.UUID) -> CandidateSession:
    session = db.query(CandidateSession).filter(CandidateSession.id == session_id).first()
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


def get_ordered_messages(db: Session, session_id: uuid.UUID) -> list[Message]:
    return (
        db.query(Message)
        .filter(Message.session_id == session_id)
        .order_by(Message.sequence.asc())
        .all()
    )


def to_message_response(message: Message) -> MessageResponse:
    role = message.role.value if hasattr(message.role, "value") else message.role
    return MessageResponse(
        id=message.id,
        session_id=message.session_id,
        role=role,
        content=message.content,
        sequence=message.sequence,
        created_at=message.created_at,
        code_blocks=extract_code_blocks(message.content) if role == "assistant" else [],
    )


# ============== API Endpoints ==============


@router.get("", response_model=list[SessionListItem])
async def list_sessions(db: Session = Depends(get_db)):
    """List all sessions, newest first, with a summary of their problem."""
    return db.query(CandidateSession).order_by(CandidateSession.created_at.desc()).all()


@router.get("/{session_id}", response_model=SessionWithProblem)
async def get_session(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Get a session with its full problem."""
    return get_session_or_404(db, session_id)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(session_data: SessionCreate, db: Session = Depends(get_db)):
    """
    Create a pending session for a candidate.

    Custom evaluation settings are validated here (weights must sum to 100)
    so a bad rubric cannot surface later during analysis.
    """
    get_problem_or_404(db, session_data.problem_id)

    evaluation_settings = None
    if session_data.evaluation_settings is not None:
        evaluation_settings = session_data.evaluation_settings.model_dump()

    session = CandidateSession(
        candidate_name=session_data.candidate_name,
        candidate_email=session_data.candidate_email,
        problem_id=session_data.problem_id,
        status=SessionStatus.PENDING,
        evaluation_settings=evaluation_settings,
    )

    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(f"Created session {session.id} for {session.candidate_email}")
    return session


@router.post("/{session_id}/start", response_model=SessionResponse)
async def start_session(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Start a session (pending -> active).

    Re-opening an active session returns it unchanged.
    """
    session = get_session_or_404(db, session_id)

    if session.status == SessionStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session already completed",
        )

    if session.status == SessionStatus.PENDING:
        session.status = SessionStatus.ACTIVE
        session.started_at = utc_now()
        db.commit()
        db.refresh(session)
        logger.info(f"Session {session.id} started")

    return session


@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: uuid.UUID,
    completion: Optional[SessionCompleteRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Complete a session (active -> completed).

    Completing an already completed session returns it unchanged.
    """
    session = get_session_or_404(db, session_id)

    if session.status == SessionStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session has not been started",
        )

    if session.status == SessionStatus.ACTIVE:
        session.status = SessionStatus.COMPLETED
        session.completed_at = utc_now()
        if completion is not None and completion.solution is not None:
            session.solution = completion.solution
        db.commit()
        db.refresh(session)
        logger.info(f"Session {session.id} completed")

    return session


@router.delete("/{session_id}")
async def delete_session(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Delete a session; its analysis and messages are removed first."""
    session = get_session_or_404(db, session_id)

    db.query(Analysis).filter(Analysis.session_id == session_id).delete(synchronize_session=False)
    db.query(Message).filter(Message.session_id == session_id).delete(synchronize_session=False)
    db.delete(session)
    db.commit()

    get_workspace_registry().discard(session_id)

    return {"message": "Session deleted", "session_id": str(session_id)}


@router.get("/{session_id}/details", response_model=SessionDetailResponse)
async def get_session_details(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Get a session with problem, messages and analysis.

    Powers the recruiter's review page.
    """
    session = get_session_or_404(db, session_id)

    analysis = db.query(Analysis).filter(Analysis.session_id == session_id).first()
    messages = get_ordered_messages(db, session_id)

    return SessionDetailResponse(
        id=session.id,
        candidate_name=session.candidate_name,
        candidate_email=session.candidate_email,
        status=session.status,
        solution=session.solution,
        started_at=session.started_at,
        completed_at=session.completed_at,
        created_at=session.created_at,
        problem=ProblemResponse.model_validate(session.problem) if session.problem else None,
        evaluation_settings=session.evaluation_settings,
        messages=[to_message_response(message) for message in messages],
        analysis=AnalysisResponse.model_validate(analysis) if analysis else None,
    )
