import json
import uuid

import pytest

from hirehiker.models import Analysis, Message, MessageRole
from hirehiker.services.analysis import build_analysis_prompt, parse_analysis_response
from hirehiker.services.evaluation_config import DEFAULT_EVALUATION_SETTINGS, EvaluationSettings

from conftest import make_completion


VERDICT = {
    "summary": "Asked targeted questions about the save flow.",
    "questionCount": 2,
    "qualityScore": 7.5,
    "dimensionScores": {"questionIntelligence": 8, "domainUnderstanding": 7},
    "strengths": ["Targeted questions"],
    "improvements": ["Check edge cases"],
}

TRANSCRIPT = [
    {"role": "user", "content": "Why is the profile not saved?"},
    {"role": "assistant", "content": "The fetch is not awaited."},
    {"role": "user", "content": "What happens on a double click?"},
]


def add_transcript(db, session_id):
    for sequence, turn in enumerate(TRANSCRIPT):
        db.add(
            Message(
                session_id=session_id,
                role=MessageRole(turn["role"]),
                content=turn["content"],
                sequence=sequence,
            )
        )
    db.commit()


def test_no_analysis_yet(client, active_session):
    response = client.get(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.status_code == 200
    assert response.json() is None


def test_generate_analysis(client, db, active_session, fake_openai):
    add_transcript(db, active_session.id)
    fake_openai.responses.append(make_completion(json.dumps(VERDICT)))

    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.status_code == 200
    body = response.json()
    assert body["quality_score"] == 8
    assert body["question_count"] == 2
    assert body["dimension_scores"] == {"questionIntelligence": 8, "domainUnderstanding": 7}
    assert body["strengths"] == ["Targeted questions"]

    request = fake_openai.calls[0]
    assert request["temperature"] == 0.3
    assert request["max_tokens"] == 1500
    user_prompt = request["messages"][1]["content"]
    assert user_prompt.startswith("PROBLEM DESCRIPTION:\n## Task")
    assert "USER: Why is the profile not saved?\n\nASSISTANT: The fetch is not awaited." in user_prompt

    stored = client.get(f"/api/v1/sessions/{active_session.id}/analysis").json()
    assert stored["id"] == body["id"]


def test_regenerating_replaces_analysis(client, db, active_session, fake_openai):
    fake_openai.responses.extend(
        [
            make_completion(json.dumps(VERDICT)),
            make_completion(json.dumps({**VERDICT, "summary": "Second pass", "qualityScore": 4})),
        ]
    )

    client.post(f"/api/v1/sessions/{active_session.id}/analysis")
    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.json()["summary"] == "Second pass"
    assert response.json()["quality_score"] == 4
    assert db.query(Analysis).filter(Analysis.session_id == active_session.id).count() == 1


def test_quality_score_rounds_half_up(client, active_session, fake_openai):
    fake_openai.responses.append(make_completion(json.dumps({**VERDICT, "qualityScore": 6.5})))

    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.json()["quality_score"] == 7


def test_unparseable_verdict_falls_back(client, db, active_session, fake_openai):
    add_transcript(db, active_session.id)
    fake_openai.responses.append(make_completion("I cannot score this."))

    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "Unable to analyze the session."
    assert body["quality_score"] == 0
    assert body["question_count"] == 2


def test_custom_evaluation_drives_prompt(client, make_session, fake_openai):
    session = make_session(
        evaluation_settings={
            "dimensions": [
                {"id": "rootCause", "name": "Root Cause", "weight": 100, "description": "Finds it"},
            ],
            "redFlags": ["Guesses blindly"],
            "greenFlags": ["Reads the code first"],
        }
    )
    fake_openai.responses.append(make_completion(json.dumps(VERDICT)))

    client.post(f"/api/v1/sessions/{session.id}/analysis")

    system_prompt = fake_openai.calls[0]["messages"][0]["content"]
    assert "### 1. ROOT CAUSE (Weight: 100%)" in system_prompt
    assert "- Guesses blindly" in system_prompt
    assert '"rootCause": <1-10>' in system_prompt
    assert "QUESTION INTELLIGENCE" not in system_prompt


def test_openai_failure_returns_502(client, active_session, fake_openai):
    fake_openai.responses.append(RuntimeError("timeout"))

    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.status_code == 502


def test_unknown_session(client):
    response = client.post(f"/api/v1/sessions/{uuid.uuid4()}/analysis")

    assert response.status_code == 404
    assert response.json()["detail"] == "Session or problem not found"


def test_parse_fenced_json():
    content = "```json\n" + json.dumps(VERDICT) + "\n```"

    result = parse_analysis_response(content, TRANSCRIPT)

    assert result.summary == VERDICT["summary"]
    assert result.qualityScore == 7.5


def test_parse_missing_summary_falls_back():
    result = parse_analysis_response(json.dumps({"qualityScore": 9}), TRANSCRIPT)

    assert result.summary == "Unable to analyze the session."
    assert result.qualityScore == 0
    assert result.questionCount == 2


def test_parse_non_object_falls_back():
    assert parse_analysis_response("[1, 2]", []).questionCount == 0


def test_default_prompt_lists_every_dimension():
    prompt = build_analysis_prompt(DEFAULT_EVALUATION_SETTINGS)

    for dimension in DEFAULT_EVALUATION_SETTINGS.dimensions:
        assert f'"{dimension.id}": <1-10>' in prompt
    assert "(Weight: 25%)" in prompt


def test_prompt_numbers_dimensions():
    settings = EvaluationSettings(
        dimensions=[
            {"id": "a", "name": "Alpha", "weight": 50, "description": "first"},
            {"id": "b", "name": "Beta", "weight": 50, "description": "second"},
        ]
    )

    prompt = build_analysis_prompt(settings)

    assert "### 1. ALPHA (Weight: 50%)\nfirst" in prompt
    assert "### 2. BETA (Weight: 50%)\nsecond" in prompt


@pytest.mark.parametrize(
    "content",
    [
        '{"summary": "s", "questionCount": 1, "qualityScore": NaN}',
        '{"summary": "s", "questionCount": 1, "qualityScore": Infinity}',
        '{"summary": "s", "qualityScore": 5, "dimensionScores": {"clarity": -Infinity}}',
    ],
)
def test_parse_non_finite_scores_falls_back(content):
    result = parse_analysis_response(content, TRANSCRIPT)

    assert result.summary == "Unable to analyze the session."
    assert result.qualityScore == 0


def test_non_finite_score_is_stored_as_fallback(client, active_session, fake_openai):
    fake_openai.responses.append(
        make_completion('{"summary": "s", "questionCount": 1, "qualityScore": NaN}')
    )

    response = client.post(f"/api/v1/sessions/{active_session.id}/analysis")

    assert response.status_code == 200
    assert response.json()["quality_score"] == 0
    assert response.json()["summary"] == "Unable to analyze the session."
