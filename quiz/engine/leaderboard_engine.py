"""Leaderboard Engine - Recalculo do ranking e analytics do quiz."""

import logging
from fractions import Fraction

from ..models.document import LeaderboardEntry, Participant, Quiz, QuizAnalytics
from .scoring_engine import ratio_percent, round_half_up

logger = logging.getLogger(__name__)


class LeaderboardEngine:
    """Recalcula leaderboard, ranks e analytics a partir dos participantes.

    O recalculo e sempre completo (sem delta): uma nova conclusao pode mudar
    o rank de todos os outros participantes.

    Ordenacao:
        1. score (desc)
        2. total_time_spent (asc) - mais rapido ganha no empate
        3. completed_at (asc), depois user_id - desempate deterministico
    """

    @staticmethod
    def sort_key(participant: Participant) -> tuple:
        return (
            -participant.score,
            participant.total_time_spent,
            participant.completed_at,
            participant.user_id,
        )

    def rank(self, participants: list[Participant]) -> list[Participant]:
        """Filtra concluidos e ordena pelo criterio do ranking."""
        completed = [p for p in participants if p.is_completed]
        return sorted(completed, key=self.sort_key)

    def compute_analytics(self, quiz: Quiz, ranked: list[Participant]) -> QuizAnalytics:
        """Analytics derivados; total_attempts e preservado (contador cumulativo)."""
        completed = len(ranked)
        total = len(quiz.participants)

        average_score = (
            round_half_up(Fraction(sum(p.score for p in ranked), completed)) if completed else 0
        )
        completion_rate = ratio_percent(completed, total)

        return QuizAnalytics(
            total_attempts=quiz.analytics.total_attempts,
            average_score=average_score,
            completion_rate=completion_rate,
        )

    def recompute(self, quiz: Quiz) -> list[LeaderboardEntry]:
        """Reconstroi leaderboard e grava rank em cada Participant.

        Args:
            quiz: Documento do quiz (modificado in-place)

        Returns:
            Novo leaderboard (ja atribuido em quiz.leaderboard)
        """
        ranked = self.rank(list(quiz.participants.values()))

        for participant in quiz.participants.values():
            participant.rank = None

        leaderboard = []
        for position, participant in enumerate(ranked, start=1):
            participant.rank = position
            leaderboard.append(
                LeaderboardEntry(
                    user_id=participant.user_id,
                    score=participant.score,
                    percentage=participant.percentage,
                    completed_at=participant.completed_at,
                    total_time_spent=participant.total_time_spent,
                    rank=position,
                )
            )

        quiz.leaderboard = leaderboard
        quiz.analytics = self.compute_analytics(quiz, ranked)

        logger.debug(
            f"[Quiz {quiz.id}] Leaderboard recalculado: {len(leaderboard)} concluidos "
            f"de {len(quiz.participants)} participantes"
        )
        return leaderboard
