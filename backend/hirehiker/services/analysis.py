"""
Session Analysis Service.

Scores a finished session by the quality of the candidate's questions, not
by the final solution. The rubric (weighted dimensions plus red and green
flags) comes from the session's evaluation settings.
"""

import json
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hirehiker.core.config import settings
from hirehiker.core.log import get_service_logger
from hirehiker.services.evaluation_config import (
    DEFAULT_EVALUATION_SETTINGS,
    EvaluationSettings,
)
from hirehiker.services.llm import get_openai_client

logger = get_service_logger("analysis", "ANALYSIS")

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 1500

JSON_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?([\s\S]*?)\n?```$")


class AnalysisError(Exception):
    """Raised when the scoring request itself failed."""


class AnalysisResult(BaseModel):
    """Parsed scoring verdict as returned by the model."""

    model_config = ConfigDict(allow_inf_nan=False)

    summary: str
    questionCount: int = 0
    qualityScore: float = 0
    dimensionScores: dict[str, float] = Field(default_factory=dict)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


def build_analysis_prompt(evaluation: EvaluationSettings) -> str:
    dimensions_text = "\n\n".join(
        f"### {index}. {dimension.name.upper()} (Weight: {dimension.weight}%)\n{dimension.description}"
        for index, dimension in enumerate(evaluation.dimensions, start=1)
    )
    red_flags_text = "\n".join(f"- {flag}" for flag in evaluation.redFlags)
    green_flags_text = "\n".join(f"- {flag}" for flag in evaluation.greenFlags)
    dimension_scores_json = ",\n".join(
        f'    "{dimension.id}": <1-10>' for dimension in evaluation.dimensions
    )

    return f"""You are an expert at evaluating developer candidates based on the quality of questions they ask while solving problems.

Analyze the following conversation between a candidate and an AI assistant. The candidate was given a programming problem and used AI chat to investigate and solve it. Focus on evaluating the QUALITY OF THEIR QUESTIONS, not the final solution.

## Evaluation Criteria

{dimensions_text}

## Red Flags (subtract 1-2 points from overall score if present)
{red_flags_text}

## Green Flags (add 1 point to overall score if present)
{green_flags_text}

## Scoring Instructions
1. Score each dimension from 1-10
2. Calculate weighted average for the overall qualityScore
3. Adjust for red/green flags observed

Respond with a JSON object (no markdown, just raw JSON) with this structure:
{{
  "summary": "A 2-3 sentence summary of the candidate's questioning approach and problem-solving methodology",
  "questionCount": <number of questions asked by the candidate>,
  "qualityScore": <weighted average 1-10, adjusted for flags>,
  "dimensionScores": {{
{dimension_scores_json}
  }},
  "strengths": ["strength 1", "strength 2", ...],
  "improvements": ["area for improvement 1", "area for improvement 2", ...]
}}

Provide 2-4 items for both strengths and improvements."""


def format_conversation(messages: list[dict[str, str]]) -> str:
    return "\n\n".join(f"{m['role'].upper()}: {m['content']}" for m in messages)


def _fallback_result(messages: list[dict[str, str]]) -> AnalysisResult:
    return AnalysisResult(
        summary="Unable to analyze the session.",
        questionCount=sum(1 for m in messages if m["role"] == "user"),
        qualityScore=0,
    )


def parse_analysis_response(content: str, messages: list[dict[str, str]]) -> AnalysisResult:
    """
    Parse the model's JSON verdict.

    Markdown fences around the JSON are tolerated. Anything unparseable
    yields the fallback result (score 0, question count from the transcript).
    """
    text = (content or "").strip()
    fence_match = JSON_FENCE_PATTERN.match(text)
    if fence_match:
        text = fence_match.group(1).strip()

    try:
        return AnalysisResult.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning(f"Could not parse analysis response: {e}")
        return _fallback_result(messages)


def analyze_session(
    problem_description: str,
    messages: list[dict[str, str]],
    evaluation: Optional[EvaluationSettings] = None,
) -> AnalysisResult:
    """
    Score a session transcript.

    Args:
        problem_description: The problem the candidate worked on
        messages: Ordered transcript [{"role", "content"}]
        evaluation: Rubric; defaults to DEFAULT_EVALUATION_SETTINGS

    Raises:
        AnalysisError: The OpenAI request failed
    """
    evaluation = evaluation or DEFAULT_EVALUATION_SETTINGS
    logger.info(
        f"Analyzing transcript: {len(messages)} messages, {len(evaluation.dimensions)} dimensions"
    )

    try:
        response = get_openai_client().chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": build_analysis_prompt(evaluation)},
                {
                    "role": "user",
                    "content": (
                        f"PROBLEM DESCRIPTION:\n{problem_description}\n\n"
                        f"CONVERSATION:\n{format_conversation(messages)}"
                    ),
                },
            ],
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
        )
    except Exception as e:
        logger.error(f"OpenAI analysis request failed: {e}")
        raise AnalysisError("Failed to generate analysis") from e

    choices = response.choices or []
    content = choices[0].message.content if choices else None
    result = parse_analysis_response(content or "{}", messages)
    logger.info(f"Quality score: {result.qualityScore} ({result.questionCount} questions)")
    return result
