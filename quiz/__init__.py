"""Quiz Module - Quizzes de estudo com geracao por IA, leaderboard e acesso privado.

Arquitetura:
- models/: Enums, documento Quiz (pydantic) e schemas de request/response
- engine/: QuizEngine, ScoringEngine, LeaderboardEngine, AccessPolicy
- llm/: LLMClientFactory, geradores Claude e fallback
- storage/: QuizStore (AgentFS ou memoria)
- prompts/: Templates de prompts
- notifications.py: NotificationBus (eventos por quiz)
- router.py: FastAPI endpoints
"""

from .engine import LeaderboardEngine, QuizEngine, QuizScoringEngine
from .errors import QuizError
from .llm import ClaudeQuestionGenerator, FallbackQuestionGenerator, LLMClientFactory
from .models import Question, Quiz, QuizDifficulty, QuizStatus, QuizVisibility
from .notifications import NotificationBus
from .storage import QuizStore

__all__ = [
    # Models
    "QuizDifficulty",
    "QuizStatus",
    "QuizVisibility",
    "Question",
    "Quiz",
    # Engines
    "QuizEngine",
    "QuizScoringEngine",
    "LeaderboardEngine",
    # LLM
    "LLMClientFactory",
    "ClaudeQuestionGenerator",
    "FallbackQuestionGenerator",
    # Storage / eventos
    "QuizStore",
    "NotificationBus",
    # Errors
    "QuizError",
]
