import uuid

from sqlalchemy import Column, Integer, Text, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from hirehiker.db.base import Base, utc_now
from hirehiker.models.enums import MessageRole, enum_values


class Message(Base):
    """A single chat turn between the candidate and the assistant."""

    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid, ForeignKey("sessions.id"), nullable=False, index=True)
    role = Column(
        Enum(MessageRole, name="message_role", values_callable=enum_values),
        nullable=False,
    )
    content = Column(Text, nullable=False)

    # 0-based position within the session; transcripts are ordered by it
    sequence = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships
    session = relationship("CandidateSession", back_populates="messages")
