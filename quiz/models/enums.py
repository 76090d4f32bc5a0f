"""Quiz Enums - Dificuldade, visibilidade e ciclo de vida."""

from enum import Enum


class QuizDifficulty(str, Enum):
    """Niveis de dificuldade do quiz."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizVisibility(str, Enum):
    """Visibilidade do quiz (privado exige access code)."""

    PUBLIC = "public"
    PRIVATE = "private"


class QuizStatus(str, Enum):
    """Estados do ciclo de vida do quiz.

    draft -> scheduled -> active -> completed
    cancelled e terminal e so e alcancavel a partir de draft ou scheduled.
    """

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Estados em que o quiz aparece na listagem e aceita novos participantes
OPEN_STATUSES = (QuizStatus.DRAFT, QuizStatus.SCHEDULED, QuizStatus.ACTIVE)
