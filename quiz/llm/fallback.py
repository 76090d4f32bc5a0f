"""Fallback Generator - Questoes template quando a IA nao responde."""

from ..models.document import Question
from ..prompts import (
    FALLBACK_EXPLANATION_TEMPLATE,
    FALLBACK_OPTION_TEMPLATES,
    FALLBACK_QUESTION_TEMPLATE,
)


class FallbackQuestionGenerator:
    """Gera questoes placeholder deterministicas.

    Nao finge ser conteudo da IA: o quiz criado com estas questoes fica com
    ai_generated=False.
    """

    def build_questions(self, topic: str, difficulty: str, count: int) -> list[Question]:
        questions = []
        for number in range(1, count + 1):
            questions.append(
                Question(
                    question=FALLBACK_QUESTION_TEMPLATE.format(topic=topic, difficulty=difficulty),
                    options=[
                        template.format(topic=topic, number=number)
                        for template in FALLBACK_OPTION_TEMPLATES
                    ],
                    correct_answer=0,
                    explanation=FALLBACK_EXPLANATION_TEMPLATE.format(
                        topic=topic, difficulty=difficulty
                    ),
                )
            )
        return questions
