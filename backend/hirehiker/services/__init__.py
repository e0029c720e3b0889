from hirehiker.services.assistant import chat, chat_with_files, ProblemContext, AssistantError
from hirehiker.services.analysis import analyze_session, AnalysisError, AnalysisResult
from hirehiker.services.code_blocks import parse_code_blocks, extract_code_blocks
from hirehiker.services.evaluation_config import (
    DEFAULT_EVALUATION_SETTINGS,
    EvaluationSettings,
    resolve_evaluation_settings,
)
from hirehiker.services.workspace import get_workspace_registry, WorkspaceError

__all__ = [
    "chat",
    "chat_with_files",
    "ProblemContext",
    "AssistantError",
    "analyze_session",
    "AnalysisError",
    "AnalysisResult",
    "parse_code_blocks",
    "extract_code_blocks",
    "DEFAULT_EVALUATION_SETTINGS",
    "EvaluationSettings",
    "resolve_evaluation_settings",
    "get_workspace_registry",
    "WorkspaceError",
]
