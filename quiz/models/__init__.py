"""Quiz Models - Enums, documento do quiz e schemas."""

from .document import (
    AnswerRecord,
    LeaderboardEntry,
    Participant,
    Question,
    Quiz,
    QuizAnalytics,
    QuizSettings,
)
from .enums import QuizDifficulty, QuizStatus, QuizVisibility
from .schemas import (
    AttemptSummary,
    CreatedQuizResponse,
    CreateQuizRequest,
    JoinQuizRequest,
    LeaderboardResponse,
    ManualQuizRequest,
    QuizForTaking,
    QuizHistoryResponse,
    QuizListResponse,
    QuizStatusResponse,
    QuizSummary,
    ScheduleQuizRequest,
    SubmissionResult,
    SubmitAnswersRequest,
    SubmittedAnswer,
    TakingQuestion,
)

__all__ = [
    # Enums
    "QuizDifficulty",
    "QuizStatus",
    "QuizVisibility",
    # Documento
    "Question",
    "AnswerRecord",
    "Participant",
    "LeaderboardEntry",
    "QuizAnalytics",
    "QuizSettings",
    "Quiz",
    # Schemas
    "CreateQuizRequest",
    "ManualQuizRequest",
    "CreatedQuizResponse",
    "JoinQuizRequest",
    "ScheduleQuizRequest",
    "SubmittedAnswer",
    "SubmitAnswersRequest",
    "SubmissionResult",
    "TakingQuestion",
    "QuizForTaking",
    "QuizSummary",
    "QuizListResponse",
    "LeaderboardResponse",
    "AttemptSummary",
    "QuizStatusResponse",
    "QuizHistoryResponse",
]
