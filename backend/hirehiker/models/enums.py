import enum


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


def enum_values(enum_cls) -> list[str]:
    """Persist enum values ("pending") rather than member names ("PENDING")."""
    return [member.value for member in enum_cls]
