"""
Analysis API endpoints.

Generates and serves the AI scoring of a session transcript for the
recruiter dashboard.
"""

import logging
import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from hirehiker.api.v1.sessions import AnalysisResponse, get_ordered_messages
from hirehiker.db.session import get_db
from hirehiker.models import Analysis, CandidateSession
from hirehiker.services.analysis import AnalysisError, analyze_session
from hirehiker.services.evaluation_config import resolve_evaluation_settings

logger = logging.getLogger("analysis_api")

router = APIRouter()


@router.get("/{session_id}/analysis", response_model=Optional[AnalysisResponse])
async def get_analysis(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Get the stored analysis of a session, or null if none was generated."""
    return db.query(Analysis).filter(Analysis.session_id == session_id).first()


@router.post("/{session_id}/analysis", response_model=AnalysisResponse)
def generate_analysis(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Score the session transcript and store the result.

    Uses the session's evaluation settings (defaults when none were set).
    Regenerating replaces the previous analysis.
    """
    session = db.query(CandidateSession).filter(CandidateSession.id == session_id).first()
    if not session or not session.problem or not session.problem.description:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session or problem not found",
        )

    try:
        evaluation = resolve_evaluation_settings(session.evaluation_settings)
    except ValidationError as e:
        logger.error(f"Stored evaluation settings of session {session_id} are invalid: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Session evaluation settings are invalid",
        )

    transcript = [
        {"role": message.role.value, "content": message.content}
        for message in get_ordered_messages(db, session_id)
    ]

    try:
        result = analyze_session(session.problem.description, transcript, evaluation)
    except AnalysisError as e:
        logger.error(f"Analysis failed for session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate analysis",
        )

    # quality_score is an integer column; round half up
    values = {
        "summary": result.summary,
        "question_count": result.questionCount,
        "quality_score": math.floor(result.qualityScore + 0.5),
        "dimension_scores": result.dimensionScores,
        "strengths": result.strengths,
        "improvements": result.improvements,
    }

    analysis = db.query(Analysis).filter(Analysis.session_id == session_id).first()
    if analysis:
        for key, value in values.items():
            setattr(analysis, key, value)
    else:
        analysis = Analysis(session_id=session_id, **values)
        db.add(analysis)

    db.commit()
    db.refresh(analysis)

    logger.info(f"Stored analysis for session {session_id}: score {analysis.quality_score}")
    return analysis
