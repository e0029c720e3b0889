import uuid

from sqlalchemy import Column, String, Text, DateTime, Enum, JSON, Uuid
from sqlalchemy.orm import relationship

from hirehiker.db.base import Base, utc_now
from hirehiker.models.enums import Difficulty, enum_values


class Problem(Base):
    """
    A debugging exercise handed to candidates.

    The project the candidate investigates is embedded as JSON:
    project files, a swagger-style API description and bug tickets.
    """

    __tablename__ = "problems"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)  # Markdown
    codebase_context = Column(Text, nullable=True)
    difficulty = Column(
        Enum(Difficulty, name="difficulty", values_callable=enum_values),
        nullable=False,
        default=Difficulty.MEDIUM,
    )
    category = Column(String, nullable=False, default="javascript-basics")

    # Format: [{ "path": "src/api/user.ts", "language": "typescript", "content": "..." }, ...]
    project_files = Column(JSON, nullable=True)

    # Format: { "title", "version", "baseUrl", "endpoints": [...] }
    swagger_spec = Column(JSON, nullable=True)

    # Format: [{ "id": "#201", "title", "description", "relatedFiles": [...] }, ...]
    bug_tickets = Column(JSON, nullable=True)

    # Alternative project source, loaded into the workspace on demand
    github_repo_url = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)

    # Relationships
    sessions = relationship("CandidateSession", back_populates="problem")
