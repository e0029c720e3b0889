import pytest
from pydantic import ValidationError

from hirehiker.services.evaluation_config import (
    DEFAULT_EVALUATION_SETTINGS,
    EvaluationSettings,
    resolve_evaluation_settings,
)


def dimension(id, weight):
    return {"id": id, "name": id.title(), "weight": weight, "description": f"{id} questions"}


def test_defaults_are_valid():
    assert len(DEFAULT_EVALUATION_SETTINGS.dimensions) == 5
    assert sum(d.weight for d in DEFAULT_EVALUATION_SETTINGS.dimensions) == 100
    assert len(DEFAULT_EVALUATION_SETTINGS.redFlags) == 4
    assert len(DEFAULT_EVALUATION_SETTINGS.greenFlags) == 4


def test_weights_must_sum_to_100():
    with pytest.raises(ValidationError, match="sum to 100"):
        EvaluationSettings(dimensions=[dimension("a", 40), dimension("b", 40)])


def test_dimension_ids_must_be_unique():
    with pytest.raises(ValidationError, match="unique"):
        EvaluationSettings(dimensions=[dimension("a", 50), dimension("a", 50)])


def test_at_least_one_dimension():
    with pytest.raises(ValidationError):
        EvaluationSettings(dimensions=[])


def test_weight_out_of_range():
    with pytest.raises(ValidationError):
        EvaluationSettings(dimensions=[dimension("a", 150), dimension("b", -50)])


def test_flags_default_to_empty():
    settings = EvaluationSettings(dimensions=[dimension("a", 100)])

    assert settings.redFlags == []
    assert settings.greenFlags == []


def test_resolve_without_settings_uses_defaults():
    assert resolve_evaluation_settings(None) is DEFAULT_EVALUATION_SETTINGS
    assert resolve_evaluation_settings({}) is DEFAULT_EVALUATION_SETTINGS


def test_resolve_stored_settings():
    settings = resolve_evaluation_settings({"dimensions": [dimension("clarity", 100)], "redFlags": ["x"]})

    assert [d.id for d in settings.dimensions] == ["clarity"]
    assert settings.redFlags == ["x"]


def test_resolve_invalid_settings_raises():
    with pytest.raises(ValidationError):
        resolve_evaluation_settings({"dimensions": [dimension("a", 10)]})
