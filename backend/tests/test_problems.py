import uuid

import pytest

from hirehiker.models import Analysis, CandidateSession, Message, MessageRole, Problem, SessionStatus

from conftest import BUG_TICKETS, PROJECT_FILES, SWAGGER_SPEC


def create_payload(**overrides):
    payload = {
        "title": "Stale dashboard",
        "description": "Stats never refresh.",
        "difficulty": "hard",
        "category": "debugging",
        "project_files": PROJECT_FILES,
        "swagger_spec": SWAGGER_SPEC,
        "bug_tickets": BUG_TICKETS,
    }
    payload.update(overrides)
    return payload


def test_create_problem_keeps_embedded_json(client):
    response = client.post("/api/v1/problems", json=create_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Stale dashboard"
    assert body["difficulty"] == "hard"
    assert body["project_files"][0]["path"] == "src/api/user.ts"
    assert body["bug_tickets"][0]["relatedFiles"] == ["src/api/user.ts"]
    parameter = body["swagger_spec"]["endpoints"][0]["parameters"][0]
    assert parameter["in"] == "body"
    assert parameter["required"] is True


def test_create_problem_defaults(client):
    response = client.post(
        "/api/v1/problems",
        json={"title": "Minimal", "description": "Only the basics."},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["difficulty"] == "medium"
    assert body["category"] == "javascript-basics"
    assert body["project_files"] is None
    assert body["github_repo_url"] is None


def test_create_problem_rejects_empty_title(client):
    response = client.post("/api/v1/problems", json=create_payload(title=""))
    assert response.status_code == 422


def test_create_problem_rejects_unknown_parameter_location(client):
    swagger = {
        **SWAGGER_SPEC,
        "endpoints": [
            {
                "method": "GET",
                "path": "/x",
                "summary": "x",
                "parameters": [{"name": "a", "in": "header", "type": "string"}],
            }
        ],
    }
    response = client.post("/api/v1/problems", json=create_payload(swagger_spec=swagger))
    assert response.status_code == 422


def test_list_and_get_problem(client, problem):
    response = client.get("/api/v1/problems")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [str(problem.id)]

    response = client.get(f"/api/v1/problems/{problem.id}")
    assert response.status_code == 200
    assert response.json()["bug_tickets"][0]["id"] == "#201"


def test_get_missing_problem(client):
    response = client.get(f"/api/v1/problems/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Problem not found"


def test_update_problem_only_touches_sent_fields(client, problem):
    response = client.patch(
        f"/api/v1/problems/{problem.id}",
        json={"title": "Renamed", "github_repo_url": "https://github.com/acme/dashboard"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Renamed"
    assert body["github_repo_url"] == "https://github.com/acme/dashboard"
    assert body["description"] == problem.description
    assert body["project_files"][0]["path"] == "src/api/user.ts"


def test_update_problem_can_clear_nullable_field(client, problem):
    response = client.patch(f"/api/v1/problems/{problem.id}", json={"bug_tickets": None})

    assert response.status_code == 200
    assert response.json()["bug_tickets"] is None


def test_delete_problem_removes_dependents(client, db, problem, active_session, clear_workspaces):
    db.add(Message(session_id=active_session.id, role=MessageRole.USER, content="Why?", sequence=0))
    db.add(
        Analysis(
            session_id=active_session.id,
            summary="ok",
            question_count=1,
            quality_score=5,
            dimension_scores={},
            strengths=[],
            improvements=[],
        )
    )
    db.commit()
    session_id = active_session.id
    clear_workspaces.get_or_create(session_id, PROJECT_FILES)

    response = client.delete(f"/api/v1/problems/{problem.id}")

    assert response.status_code == 200
    assert response.json()["deleted_sessions"] == 1

    db.expire_all()
    assert db.query(Problem).count() == 0
    assert db.query(CandidateSession).count() == 0
    assert db.query(Message).count() == 0
    assert db.query(Analysis).count() == 0
    assert clear_workspaces.get(session_id) is None


def test_delete_problem_leaves_other_problems(client, db, problem, make_session):
    other = Problem(title="Other", description="Untouched")
    db.add(other)
    db.commit()
    make_session(status=SessionStatus.PENDING)

    response = client.delete(f"/api/v1/problems/{problem.id}")

    assert response.status_code == 200
    assert [p["title"] for p in client.get("/api/v1/problems").json()] == ["Other"]


@pytest.mark.parametrize("field", ["title", "description", "difficulty", "category"])
def test_update_problem_rejects_null_required_field(client, problem, field):
    response = client.patch(f"/api/v1/problems/{problem.id}", json={field: None})

    assert response.status_code == 422
    assert client.get(f"/api/v1/problems/{problem.id}").json()["title"] == "User Dashboard Bugs"
