"""Quiz Scoring Engine - Motor de pontuacao das submissoes."""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from numbers import Rational
from typing import Optional, Sequence, Union

from ..models.document import AnswerRecord, Question
from ..models.schemas import SubmittedAnswer


def round_half_up(value: Union[Rational, Decimal, float]) -> int:
    """Arredonda para inteiro com semantica half-up (2.5 -> 3, -2.5 -> -3).

    O `round()` do Python usa banker's rounding (2.5 -> 2), o que divergiria
    do frontend em percentuais como 12.5%. Passe razoes como Fraction:
    23 / 40 * 100 em float vira 57.49999999999999.
    """
    if isinstance(value, float):
        value = Decimal(str(value))
    exact = Fraction(value)
    half = Fraction(1, 2)
    if exact < 0:
        return -math.floor(-exact + half)
    return math.floor(exact + half)


def ratio_percent(part: int, whole: int) -> int:
    """round_half_up(part / whole * 100) calculado sem float (0 se whole == 0)."""
    if whole <= 0:
        return 0
    return round_half_up(Fraction(part * 100, whole))


@dataclass
class ScoreResult:
    """Resultado da correcao de uma submissao."""

    score: int
    max_score: int
    correct_count: int
    total_questions: int
    percentage: int
    answers: list[AnswerRecord] = field(default_factory=list)


class QuizScoringEngine:
    """Motor de pontuacao para submissoes de quiz.

    Regras:
        - score: soma dos `points` das questoes acertadas
        - percentage: baseado na CONTAGEM de acertos, nao nos pontos
          (ratio_percent(acertos, total_questoes), sem float)
        - respostas faltando contam como erradas (nao e erro)

    Example:
        >>> engine = QuizScoringEngine()
        >>> result = engine.score(questions, answers)
        >>> print(result.score, result.percentage)
    """

    def percentage(self, correct_count: int, total_questions: int) -> int:
        """Percentual de acertos (0 quando nao ha questoes)."""
        return ratio_percent(correct_count, total_questions)

    def is_correct(self, question: Question, selected: Optional[int]) -> bool:
        return selected is not None and selected == question.correct_answer

    def score(
        self,
        questions: Sequence[Question],
        answers: Sequence[SubmittedAnswer],
    ) -> ScoreResult:
        """Corrige uma submissao completa.

        Args:
            questions: Questoes do quiz (ordem importa)
            answers: Respostas na mesma ordem das questoes (pode ser menor)

        Returns:
            ScoreResult com score, percentage e AnswerRecords
        """
        if len(answers) > len(questions):
            raise ValueError(
                f"Received {len(answers)} answers for {len(questions)} questions"
            )

        score = 0
        correct_count = 0
        records: list[AnswerRecord] = []

        for index, answer in enumerate(answers):
            question = questions[index]
            correct = self.is_correct(question, answer.selected_answer)
            if correct:
                score += question.points
                correct_count += 1

            records.append(
                AnswerRecord(
                    question_index=index,
                    selected_answer=answer.selected_answer,
                    is_correct=correct,
                    time_spent=answer.time_spent,
                )
            )

        return ScoreResult(
            score=score,
            max_score=sum(q.points for q in questions),
            correct_count=correct_count,
            total_questions=len(questions),
            percentage=self.percentage(correct_count, len(questions)),
            answers=records,
        )
