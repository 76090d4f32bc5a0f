"""Quiz Engines - Logica de negocios."""

from .access_control import AccessCodeGenerator, QuizAccessPolicy
from .leaderboard_engine import LeaderboardEngine
from .quiz_engine import CreatedQuiz, QuizEngine
from .scoring_engine import QuizScoringEngine, ScoreResult, ratio_percent, round_half_up

__all__ = [
    "QuizEngine",
    "CreatedQuiz",
    "QuizScoringEngine",
    "ScoreResult",
    "ratio_percent",
    "round_half_up",
    "LeaderboardEngine",
    "AccessCodeGenerator",
    "QuizAccessPolicy",
]
