# =============================================================================
# QUIZ DOCUMENT - Agregado persistido do quiz
# =============================================================================
# Quiz e a raiz do agregado: questoes, participantes, leaderboard e analytics
# vivem dentro do mesmo documento e sao gravados juntos no store.
# =============================================================================

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from .enums import QuizDifficulty, QuizStatus, QuizVisibility

MIN_OPTIONS = 2
MAX_OPTIONS = 6


def utcnow() -> datetime:
    """Timestamp atual em UTC."""
    return datetime.now(timezone.utc)


class Question(BaseModel):
    """Questao de multipla escolha (sem ciclo de vida proprio)."""

    question: str = Field(..., description="Enunciado da questao")
    options: list[str] = Field(
        ...,
        min_length=MIN_OPTIONS,
        max_length=MAX_OPTIONS,
        description="Alternativas (2-6)",
    )
    correct_answer: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("correct_answer", "correctAnswer", "correct"),
        description="Indice 0-based da alternativa correta",
    )
    explanation: str = Field(default="", description="Explicacao da resposta correta")
    points: int = Field(default=1, ge=1, description="Pontos da questao")
    time_limit: int = Field(
        default=30,
        ge=1,
        validation_alias=AliasChoices("time_limit", "timeLimit"),
        description="Tempo limite em segundos",
    )

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question text must not be empty")
        return value

    @field_validator("options")
    @classmethod
    def _options_not_blank(cls, value: list[str]) -> list[str]:
        cleaned = [opt.strip() for opt in value]
        if any(not opt for opt in cleaned):
            raise ValueError("options must not be empty strings")
        return cleaned

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation_default(cls, value: Any) -> str:
        return value or ""

    @model_validator(mode="after")
    def _correct_answer_in_bounds(self) -> "Question":
        if self.correct_answer >= len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} out of bounds for "
                f"{len(self.options)} options"
            )
        return self


class AnswerRecord(BaseModel):
    """Resposta registrada de um participante para uma questao."""

    question_index: int = Field(..., ge=0)
    selected_answer: Optional[int] = Field(default=None, description="None = nao respondida")
    is_correct: bool = False
    time_spent: float = Field(default=0, ge=0, description="Segundos gastos na questao")


class Participant(BaseModel):
    """Participante de um quiz (um por usuario)."""

    user_id: str
    joined_at: datetime = Field(default_factory=utcnow)
    answers: list[AnswerRecord] = Field(default_factory=list)
    score: int = 0
    percentage: int = Field(default=0, ge=0, le=100)
    completed_at: Optional[datetime] = None
    total_time_spent: float = Field(default=0, ge=0)
    rank: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def reset_attempt(self) -> None:
        """Zera a tentativa anterior (retake sobrescreve, nao acumula)."""
        self.answers = []
        self.score = 0
        self.percentage = 0
        self.total_time_spent = 0
        self.completed_at = None


class LeaderboardEntry(BaseModel):
    """Snapshot do participante no momento do recompute."""

    user_id: str
    score: int
    percentage: int
    completed_at: datetime
    total_time_spent: float
    rank: int


class QuizAnalytics(BaseModel):
    """Contadores derivados, recalculados junto com o leaderboard."""

    total_attempts: int = Field(default=0, description="Submissoes (inclui retakes)")
    average_score: int = 0
    completion_rate: int = Field(default=0, ge=0, le=100)


class QuizSettings(BaseModel):
    """Configuracoes do quiz definidas pelo criador."""

    allow_retake: bool = True
    show_answers_after_completion: bool = True


class Quiz(BaseModel):
    """Documento do quiz (raiz do agregado).

    Invariantes validadas na construcao e na desserializacao:
        - access_code presente se e somente se visibility == private
        - pelo menos uma questao
        - chaves de participants iguais ao user_id do participante
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    topic: str = Field(..., min_length=1)
    difficulty: QuizDifficulty
    creator_id: str = Field(..., min_length=1)

    visibility: QuizVisibility = QuizVisibility.PUBLIC
    access_code: Optional[str] = None

    questions: list[Question] = Field(..., min_length=1)

    status: QuizStatus = QuizStatus.DRAFT
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=1, description="Duracao em minutos")

    participants: dict[str, Participant] = Field(default_factory=dict)
    leaderboard: list[LeaderboardEntry] = Field(default_factory=list)
    analytics: QuizAnalytics = Field(default_factory=QuizAnalytics)
    settings: QuizSettings = Field(default_factory=QuizSettings)

    ai_generated: bool = False
    tags: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("title", "topic")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> "Quiz":
        if self.visibility == QuizVisibility.PRIVATE and not self.access_code:
            raise ValueError("private quiz requires an access_code")
        if self.visibility == QuizVisibility.PUBLIC and self.access_code:
            raise ValueError("public quiz must not carry an access_code")
        for user_id, participant in self.participants.items():
            if participant.user_id != user_id:
                raise ValueError(f"participant key mismatch: {user_id}")
        return self

    # -------------------------------------------------------------------------
    # Propriedades derivadas
    # -------------------------------------------------------------------------

    @property
    def is_private(self) -> bool:
        return self.visibility == QuizVisibility.PRIVATE

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    # -------------------------------------------------------------------------
    # Participantes
    # -------------------------------------------------------------------------

    def is_creator(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id == self.creator_id

    def has_participant(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id in self.participants

    def get_participant(self, user_id: str) -> Optional[Participant]:
        return self.participants.get(user_id)

    def add_participant(self, user_id: str) -> bool:
        """Adiciona participante se ainda nao existir.

        Returns:
            True se foi adicionado, False se ja participava (no-op)
        """
        if user_id in self.participants:
            return False
        self.participants[user_id] = Participant(user_id=user_id)
        return True

    def completed_participants(self) -> list[Participant]:
        return [p for p in self.participants.values() if p.is_completed]

    # -------------------------------------------------------------------------
    # Persistencia
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionario JSON-compatible (para o KV store)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Quiz":
        """Cria instancia validada a partir de dicionario."""
        return cls.model_validate(data)
