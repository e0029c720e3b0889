import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hirehiker.db.base import Base
from hirehiker.db.session import get_db
from hirehiker.main import app
from hirehiker.models import CandidateSession, Difficulty, Problem, SessionStatus
from hirehiker.services.llm import set_openai_client
from hirehiker.services.workspace import get_workspace_registry


PROJECT_FILES = [
    {
        "path": "src/api/user.ts",
        "language": "typescript",
        "content": "export async function updateUserProfile() {\n  fetch('/api/users/me');\n}",
    },
    {
        "path": "src/hooks/useUserStats.ts",
        "language": "typescript",
        "content": "export function useUserStats() {}",
    },
]

BUG_TICKETS = [
    {
        "id": "#201",
        "title": "Profile changes are lost",
        "description": "Saving shows success but nothing is persisted.",
        "relatedFiles": ["src/api/user.ts"],
    },
]

SWAGGER_SPEC = {
    "title": "User Dashboard API",
    "version": "1.0.0",
    "baseUrl": "/api",
    "endpoints": [
        {
            "method": "PATCH",
            "path": "/users/me",
            "summary": "Update profile",
            "parameters": [
                {"name": "name", "in": "body", "type": "string", "required": True},
            ],
        },
    ],
}


# ============== Fake OpenAI ==============


class FakeCompletions:
    """Replays scripted chat completions and records every request."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def create(self, **kwargs):
        # The assistant keeps appending to its conversation list; snapshot it
        self.calls.append({**kwargs, "messages": list(kwargs.get("messages", []))})
        if not self.responses:
            raise RuntimeError("No scripted completion left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_tool_call(call_id, name, arguments):
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=json.dumps(arguments)),
    )


@pytest.fixture(autouse=True)
def fake_openai():
    completions = FakeCompletions()
    set_openai_client(SimpleNamespace(chat=SimpleNamespace(completions=completions)))
    yield completions
    set_openai_client(None)


@pytest.fixture(autouse=True)
def clear_workspaces():
    registry = get_workspace_registry()
    registry.clear()
    yield registry
    registry.clear()


# ============== Database ==============


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(db_sessionmaker):
    session = db_sessionmaker()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_sessionmaker):
    def override_get_db():
        session = db_sessionmaker()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============== Factories ==============


@pytest.fixture
def problem(db):
    problem = Problem(
        title="User Dashboard Bugs",
        description="## Task\nFind out why profile changes are lost.",
        difficulty=Difficulty.MEDIUM,
        category="debugging",
        project_files=PROJECT_FILES,
        swagger_spec=SWAGGER_SPEC,
        bug_tickets=BUG_TICKETS,
    )
    db.add(problem)
    db.commit()
    db.refresh(problem)
    return problem


@pytest.fixture
def make_session(db, problem):
    created = []

    def _make(status=SessionStatus.PENDING, evaluation_settings=None, name="Ada Lovelace"):
        now = datetime.now(timezone.utc) + timedelta(seconds=len(created))
        session = CandidateSession(
            candidate_name=name,
            candidate_email=f"{name.split()[0].lower()}@example.com",
            problem_id=problem.id,
            status=status,
            evaluation_settings=evaluation_settings,
            started_at=now if status != SessionStatus.PENDING else None,
            completed_at=now if status == SessionStatus.COMPLETED else None,
            created_at=now,
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        created.append(session)
        return session

    return _make


@pytest.fixture
def active_session(make_session):
    return make_session(status=SessionStatus.ACTIVE)
