"""
Evaluation settings for transcript scoring.

Recruiters can attach a custom rubric to a session; sessions without one are
scored with DEFAULT_EVALUATION_SETTINGS.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class EvaluationDimension(BaseModel):
    """One weighted scoring dimension."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    weight: int = Field(ge=0, le=100)  # percentage
    description: str


class EvaluationSettings(BaseModel):
    """Scoring rubric: weighted dimensions plus red/green flags."""

    dimensions: list[EvaluationDimension] = Field(min_length=1)
    redFlags: list[str] = Field(default_factory=list)
    greenFlags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dimensions(self) -> "EvaluationSettings":
        ids = [dimension.id for dimension in self.dimensions]
        if len(ids) != len(set(ids)):
            raise ValueError("Dimension ids must be unique")

        total_weight = sum(dimension.weight for dimension in self.dimensions)
        if total_weight != 100:
            raise ValueError(f"Dimension weights must sum to 100 (got {total_weight})")
        return self


DEFAULT_EVALUATION_SETTINGS = EvaluationSettings(
    dimensions=[
        EvaluationDimension(
            id="questionIntelligence",
            name="Question Intelligence",
            weight=25,
            description="Are questions specific, targeted, and show prior thought?",
        ),
        EvaluationDimension(
            id="domainUnderstanding",
            name="Domain Understanding",
            weight=25,
            description="Do questions show relevant programming knowledge?",
        ),
        EvaluationDimension(
            id="problemSolvingProgression",
            name="Problem-Solving Progression",
            weight=20,
            description="Do questions progress logically toward the solution?",
        ),
        EvaluationDimension(
            id="debuggingMethodology",
            name="Debugging Methodology",
            weight=15,
            description="Does candidate investigate root causes vs. symptoms?",
        ),
        EvaluationDimension(
            id="communicationQuality",
            name="Communication Quality",
            weight=15,
            description="Are questions clear, concise, and well-structured?",
        ),
    ],
    redFlags=[
        "Immediately asks for the complete solution without trying to understand",
        "Ignores AI responses and asks the same thing repeatedly",
        "Never asks clarifying questions before diving into implementation",
        "Asks questions that are already answered in the problem description",
    ],
    greenFlags=[
        "Asks 'why' questions to understand underlying principles",
        "Validates understanding by restating in their own words",
        "Considers multiple approaches before settling on one",
        "Shows intellectual curiosity beyond the immediate problem",
    ],
)


def resolve_evaluation_settings(raw: Optional[dict]) -> EvaluationSettings:
    """Return the stored rubric of a session, or the defaults when it has none."""
    if not raw:
        return DEFAULT_EVALUATION_SETTINGS
    return EvaluationSettings.model_validate(raw)
