"""Quiz Schemas - Modelos Pydantic para request/response."""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field

from .document import LeaderboardEntry, Quiz, QuizAnalytics, QuizSettings
from .enums import QuizDifficulty, QuizStatus, QuizVisibility

# =============================================================================
# CRIACAO
# =============================================================================


class CreateQuizRequest(BaseModel):
    """Request para criacao de quiz gerado por IA."""

    title: Optional[str] = Field(default=None, max_length=100, description="Default: '{topic} - {difficulty} Quiz'")
    description: str = Field(default="", max_length=500)
    topic: str = Field(..., min_length=1, description="Assunto do quiz")
    difficulty: QuizDifficulty = Field(..., description="Nivel de dificuldade")
    question_count: Optional[int] = Field(
        default=None, ge=1, description="Numero de questoes (default vem da config)"
    )
    visibility: QuizVisibility = QuizVisibility.PUBLIC
    tags: list[str] = Field(default_factory=list)
    settings: QuizSettings = Field(default_factory=QuizSettings)


class ManualQuizRequest(BaseModel):
    """Request para criacao manual de quiz.

    As questoes chegam como dicionarios crus para que a validacao aponte
    exatamente qual questao e qual campo estao invalidos.
    """

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    topic: str = Field(..., min_length=1)
    difficulty: QuizDifficulty
    questions: list[dict[str, Any]] = Field(..., description="Questoes (minimo 1)")
    visibility: QuizVisibility = QuizVisibility.PUBLIC
    tags: list[str] = Field(default_factory=list)
    settings: QuizSettings = Field(default_factory=QuizSettings)


class CreatedQuizResponse(BaseModel):
    """Response da criacao (o criador ve o documento completo)."""

    message: str
    ai_generated: bool
    access_code: Optional[str] = None
    question_count: int
    quiz: Quiz


# =============================================================================
# CICLO DE VIDA
# =============================================================================


class JoinQuizRequest(BaseModel):
    """Request para entrar em um quiz (por id ou access code)."""

    quiz_id: Optional[str] = None
    access_code: Optional[str] = None


class ScheduleQuizRequest(BaseModel):
    """Request para agendar um quiz."""

    scheduled_at: datetime
    duration: Optional[int] = Field(default=None, ge=1, description="Minutos (default 30)")


# =============================================================================
# SUBMISSAO
# =============================================================================


class SubmittedAnswer(BaseModel):
    """Resposta enviada para uma questao (posicao = indice da questao)."""

    selected_answer: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("selected_answer", "selectedAnswer"),
    )
    time_spent: float = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("time_spent", "timeSpent"),
    )


class SubmitAnswersRequest(BaseModel):
    """Request de submissao das respostas."""

    answers: list[SubmittedAnswer] = Field(default_factory=list)
    total_time_spent: float = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("total_time_spent", "totalTimeSpent"),
    )


class SubmissionResult(BaseModel):
    """Resultado de uma submissao."""

    score: int
    percentage: int
    rank: Optional[int]
    correct_answers: int
    total_questions: int
    retake: bool = False


# =============================================================================
# PROJECOES
# =============================================================================


class TakingQuestion(BaseModel):
    """Questao sem resposta correta nem explicacao."""

    index: int
    question: str
    options: list[str]
    points: int
    time_limit: int


class QuizForTaking(BaseModel):
    """Projecao do quiz para quem vai responder."""

    id: str
    title: str
    description: str
    topic: str
    difficulty: QuizDifficulty
    creator_id: str
    status: QuizStatus
    scheduled_at: Optional[datetime]
    duration: Optional[int]
    settings: QuizSettings
    questions: list[TakingQuestion]


class QuizSummary(BaseModel):
    """Resumo do quiz para listagens."""

    id: str
    title: str
    description: str
    topic: str
    difficulty: QuizDifficulty
    visibility: QuizVisibility
    status: QuizStatus
    creator_id: str
    access_code: Optional[str] = Field(default=None, description="So para o criador")
    question_count: int
    participant_count: int
    total_points: int
    ai_generated: bool
    scheduled_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_quiz(cls, quiz: Quiz, viewer_id: Optional[str] = None) -> "QuizSummary":
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            topic=quiz.topic,
            difficulty=quiz.difficulty,
            visibility=quiz.visibility,
            status=quiz.status,
            creator_id=quiz.creator_id,
            access_code=quiz.access_code if quiz.is_creator(viewer_id) else None,
            question_count=len(quiz.questions),
            participant_count=len(quiz.participants),
            total_points=quiz.total_points,
            ai_generated=quiz.ai_generated,
            scheduled_at=quiz.scheduled_at,
            created_at=quiz.created_at,
        )


class QuizListResponse(BaseModel):
    quizzes: list[QuizSummary]


class LeaderboardResponse(BaseModel):
    """Leaderboard em cache + analytics."""

    quiz_id: str
    leaderboard: list[LeaderboardEntry]
    analytics: QuizAnalytics


class AttemptSummary(BaseModel):
    score: int
    percentage: int
    total_time_spent: float
    completed_at: datetime
    rank: Optional[int]


class QuizStatusResponse(BaseModel):
    """Status de conclusao do quiz para o usuario."""

    quiz_id: str
    status: QuizStatus
    joined: bool
    completed: bool
    attempt: Optional[AttemptSummary] = None


class QuizHistoryResponse(BaseModel):
    """Quizzes criados e respondidos pelo usuario."""

    created: list[QuizSummary]
    participated: list[QuizSummary]
