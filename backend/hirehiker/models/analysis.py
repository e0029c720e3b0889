import uuid

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from hirehiker.db.base import Base, utc_now


class Analysis(Base):
    """
    AI-generated scoring of a session transcript.

    Stores the question-quality verdict shown on the recruiter dashboard.
    Exactly one row per session; regenerating overwrites it.
    """

    __tablename__ = "analyses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid, ForeignKey("sessions.id"), nullable=False, unique=True)

    summary = Column(Text, nullable=False)
    question_count = Column(Integer, nullable=False)
    quality_score = Column(Integer, nullable=False)  # 0-10, rounded

    # Format: { "questionIntelligence": 7, "domainUnderstanding": 6, ... }
    dimension_scores = Column(JSON, nullable=False, default=dict)
    strengths = Column(JSON, nullable=False, default=list)
    improvements = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships
    session = relationship("CandidateSession", back_populates="analysis")
