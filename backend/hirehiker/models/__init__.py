from hirehiker.models.enums import Difficulty, SessionStatus, MessageRole
from hirehiker.models.problem import Problem
from hirehiker.models.candidate_session import CandidateSession
from hirehiker.models.message import Message
from hirehiker.models.analysis import Analysis

__all__ = [
    "Difficulty",
    "SessionStatus",
    "MessageRole",
    "Problem",
    "CandidateSession",
    "Message",
    "Analysis",
]
