"""
Problem API endpoints.

CRUD for debugging exercises: description, difficulty, embedded project
files, API documentation and bug tickets.
"""

import logging
import uuid
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from hirehiker.db.session import get_db
from hirehiker.models import Analysis, CandidateSession, Difficulty, Message, Problem
from hirehiker.services.workspace import get_workspace_registry

logger = logging.getLogger("problems")

router = APIRouter()


# ============== Pydantic Schemas ==============


class ProjectFile(BaseModel):
    """A single source file of the sample project."""

    path: str = Field(min_length=1)  # e.g. "src/hooks/useUserStats.ts"
    language: str = "plaintext"
    content: str


class SwaggerParameter(BaseModel):
    name: str
    in_: Literal["path", "query", "body"] = Field(alias="in")
    type: str
    required: Optional[bool] = None
    description: Optional[str] = None

    model_config = {"populate_by_name": True}


class SwaggerProperty(BaseModel):
    type: str
    description: Optional[str] = None


class SwaggerResponseSchema(BaseModel):
    type: str
    properties: Optional[dict[str, SwaggerProperty]] = None


class SwaggerEndpoint(BaseModel):
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
    path: str
    summary: str
    description: Optional[str] = None
    parameters: Optional[list[SwaggerParameter]] = None
    responseSchema: Optional[SwaggerResponseSchema] = None


class SwaggerSpec(BaseModel):
    """Hand-written API documentation shown next to the bug tickets."""

    title: str
    version: str
    baseUrl: str
    endpoints: list[SwaggerEndpoint] = Field(default_factory=list)


class BugTicket(BaseModel):
    id: str  # e.g. "#201"
    title: str
    description: str
    relatedFiles: Optional[list[str]] = None


class ProblemCreate(BaseModel):
    """Schema for creating a problem."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    codebase_context: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    category: str = "javascript-basics"
    project_files: Optional[list[ProjectFile]] = None
    swagger_spec: Optional[SwaggerSpec] = None
    bug_tickets: Optional[list[BugTicket]] = None
    github_repo_url: Optional[str] = None


class ProblemUpdate(BaseModel):
    """Schema for partially updating a problem."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    codebase_context: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    category: Optional[str] = None
    project_files: Optional[list[ProjectFile]] = None
    swagger_spec: Optional[SwaggerSpec] = None
    bug_tickets: Optional[list[BugTicket]] = None
    github_repo_url: Optional[str] = None

    @field_validator("title", "description", "difficulty", "category")
    @classmethod
    def reject_null(cls, value):
        # Omit the field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ProblemResponse(BaseModel):
    """Full problem, as handed to the candidate page."""

    id: uuid.UUID
    title: str
    description: str
    codebase_context: Optional[str]
    difficulty: Difficulty
    category: str
    project_files: Optional[list[dict]]
    swagger_spec: Optional[dict]
    bug_tickets: Optional[list[dict]]
    github_repo_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


# ============== Helper Functions ==============


def get_problem_or_404(db: Session, problem_id: uuid.UUID) -> Problem:
    problem = db.query(Problem).filter(Problem.id == problem_id).first()
    if not problem:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Problem not found",
        )
    return problem


def _dump_embedded(data: dict) -> dict:
    """Serialize nested models back to the camelCase JSON stored in the row."""
    dumped = {}
    for key, value in data.items():
        if key in ("project_files", "bug_tickets") and value is not None:
            dumped[key] = [item.model_dump(by_alias=True, exclude_none=True) for item in value]
        elif key == "swagger_spec" and value is not None:
            dumped[key] = value.model_dump(by_alias=True, exclude_none=True)
        else:
            dumped[key] = value
    return dumped


# ============== API Endpoints ==============


@router.get("", response_model=list[ProblemResponse])
async def list_problems(db: Session = Depends(get_db)):
    """List all problems, oldest first."""
    return db.query(Problem).order_by(Problem.created_at.asc()).all()


@router.get("/{problem_id}", response_model=ProblemResponse)
async def get_problem(problem_id: uuid.UUID, db: Session = Depends(get_db)):
    """Get a single problem."""
    return get_problem_or_404(db, problem_id)


@router.post("", response_model=ProblemResponse, status_code=status.HTTP_201_CREATED)
async def create_problem(problem_data: ProblemCreate, db: Session = Depends(get_db)):
    """Create a new debugging exercise."""
    values = {
        key: getattr(problem_data, key)
        for key in ProblemCreate.model_fields
    }
    problem = Problem(**_dump_embedded(values))

    db.add(problem)
    db.commit()
    db.refresh(problem)

    logger.info(f"Created problem {problem.id} ({problem.title})")
    return problem


@router.patch("/{problem_id}", response_model=ProblemResponse)
async def update_problem(
    problem_id: uuid.UUID,
    problem_data: ProblemUpdate,
    db: Session = Depends(get_db),
):
    """
    Update a problem.

    Only fields present in the request body are changed. Existing sessions
    keep whatever files their workspaces were seeded with.
    """
    problem = get_problem_or_404(db, problem_id)

    changes = {key: getattr(problem_data, key) for key in problem_data.model_fields_set}
    for key, value in _dump_embedded(changes).items():
        setattr(problem, key, value)

    db.commit()
    db.refresh(problem)
    return problem


@router.delete("/{problem_id}")
async def delete_problem(problem_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Delete a problem together with its sessions.

    Dependents are removed by hand in foreign-key order:
    analyses -> messages -> sessions -> problem.
    """
    problem = get_problem_or_404(db, problem_id)

    session_ids = [
        row.id
        for row in db.query(CandidateSession.id).filter(CandidateSession.problem_id == problem_id).all()
    ]

    if session_ids:
        db.query(Analysis).filter(Analysis.session_id.in_(session_ids)).delete(
            synchronize_session=False
        )
        db.query(Message).filter(Message.session_id.in_(session_ids)).delete(
            synchronize_session=False
        )
        db.query(CandidateSession).filter(CandidateSession.id.in_(session_ids)).delete(
            synchronize_session=False
        )

    db.delete(problem)
    db.commit()

    registry = get_workspace_registry()
    for session_id in session_ids:
        registry.discard(session_id)

    return {
        "message": "Problem deleted",
        "problem_id": str(problem_id),
        "deleted_sessions": len(session_ids),
    }
