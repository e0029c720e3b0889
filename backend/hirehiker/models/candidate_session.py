import uuid

from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from hirehiker.db.base import Base, utc_now
from hirehiker.models.enums import SessionStatus, enum_values


class CandidateSession(Base):
    """One candidate's attempt at one problem (pending -> active -> completed)."""

    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    candidate_name = Column(String, nullable=False)
    candidate_email = Column(String, nullable=False)
    problem_id = Column(Uuid, ForeignKey("problems.id"), nullable=False, index=True)

    status = Column(
        Enum(SessionStatus, name="session_status", values_callable=enum_values),
        nullable=False,
        default=SessionStatus.PENDING,
    )
    solution = Column(Text, nullable=True)

    # Custom scoring rubric; NULL means the default evaluation settings
    evaluation_settings = Column(JSON, nullable=True)

    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships
    problem = relationship("Problem", back_populates="sessions")
    messages = relationship(
        "Message", back_populates="session", order_by="Message.sequence"
    )
    analysis = relationship("Analysis", back_populates="session", uselist=False)
