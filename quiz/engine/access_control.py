"""Access Control - Access codes e regras de visibilidade do quiz."""

import uuid
from typing import Optional

from ..errors import QuizForbiddenError
from ..models.document import Quiz
from ..models.enums import OPEN_STATUSES
from ..models.schemas import QuizForTaking, TakingQuestion


class AccessCodeGenerator:
    """Gera access codes curtos (alfanumericos maiusculos) a partir de UUID4.

    Unicidade nao e garantida aqui: o store rejeita colisoes e o engine
    gera um novo codigo (tentativas limitadas).

    Example:
        >>> gen = AccessCodeGenerator(length=6)
        >>> gen.generate()  # "3FA9C1"
    """

    def __init__(self, length: int = 6):
        if not 4 <= length <= 32:
            raise ValueError("access code length must be between 4 and 32")
        self.length = length

    def generate(self) -> str:
        return uuid.uuid4().hex.upper()[: self.length]

    @staticmethod
    def normalize(code: Optional[str]) -> Optional[str]:
        """Normaliza codigo digitado pelo usuario (espacos/minusculas)."""
        if code is None:
            return None
        code = code.strip().upper()
        return code or None


class QuizAccessPolicy:
    """Regras de acesso e visibilidade.

    - Quiz publico: qualquer usuario identificado pode ver e entrar.
    - Quiz privado: exige access code para entrar; o criador sempre tem acesso.
    - Ver um quiz privado (documento, leaderboard, projecao) exige ser
      criador ou participante.
    """

    @staticmethod
    def can_view(quiz: Quiz, user_id: Optional[str]) -> bool:
        if not quiz.is_private:
            return True
        return quiz.is_creator(user_id) or quiz.has_participant(user_id)

    @classmethod
    def require_view(cls, quiz: Quiz, user_id: Optional[str]) -> None:
        if not cls.can_view(quiz, user_id):
            raise QuizForbiddenError(
                "Access denied to this quiz", details={"quiz_id": quiz.id}
            )

    @staticmethod
    def can_see_answers(quiz: Quiz, user_id: Optional[str]) -> bool:
        """Documento completo: criador, ou participante que ja concluiu
        quando show_answers_after_completion esta ativo."""
        if quiz.is_creator(user_id):
            return True
        participant = quiz.get_participant(user_id)
        return (
            participant is not None
            and participant.is_completed
            and quiz.settings.show_answers_after_completion
        )

    @staticmethod
    def can_join(quiz: Quiz, user_id: str, access_code: Optional[str] = None) -> bool:
        if not quiz.is_private or quiz.is_creator(user_id):
            return True
        return AccessCodeGenerator.normalize(access_code) == quiz.access_code

    @staticmethod
    def require_creator(quiz: Quiz, user_id: str, action: str) -> None:
        if not quiz.is_creator(user_id):
            raise QuizForbiddenError(
                f"Only the quiz creator can {action} this quiz",
                details={"quiz_id": quiz.id},
            )

    @staticmethod
    def visible_in_listing(quiz: Quiz, user_id: str) -> bool:
        """Publico, criado pelo usuario ou com o usuario como participante."""
        if quiz.status not in OPEN_STATUSES:
            return False
        return (
            not quiz.is_private
            or quiz.is_creator(user_id)
            or quiz.has_participant(user_id)
        )

    @staticmethod
    def strip_answers(quiz: Quiz) -> QuizForTaking:
        """Projecao sem correct_answer/explanation."""
        return QuizForTaking(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            topic=quiz.topic,
            difficulty=quiz.difficulty,
            creator_id=quiz.creator_id,
            status=quiz.status,
            scheduled_at=quiz.scheduled_at,
            duration=quiz.duration,
            settings=quiz.settings,
            questions=[
                TakingQuestion(
                    index=index,
                    question=q.question,
                    options=list(q.options),
                    points=q.points,
                    time_limit=q.time_limit,
                )
                for index, q in enumerate(quiz.questions)
            ],
        )
