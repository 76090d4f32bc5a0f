"""Quiz Engine - Orquestracao do ciclo de vida do quiz.

Coordena criacao (IA ou manual), entrada de participantes, transicoes de
estado, submissao com pontuacao e leaderboard. Todo read-modify-write de um
quiz acontece sob `store.lock(quiz_id)`, com o documento recarregado dentro
do lock.

Maquina de estados:
    draft -> scheduled -> active -> completed
    draft | scheduled -> cancelled
    draft -> active (start direto)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError

from config import FAILURE_MODE_FAIL, QuizConfig, get_config

from ..errors import (
    DuplicateAccessCodeError,
    InvalidStateError,
    QuizForbiddenError,
    QuizNotFoundError,
    QuizValidationError,
    UpstreamFailure,
)
from ..llm.fallback import FallbackQuestionGenerator
from ..llm.generator import ContentGenerator, normalize_generated_questions
from ..models.document import Question, Quiz, QuizSettings, utcnow
from ..models.enums import QuizDifficulty, QuizStatus, QuizVisibility
from ..models.schemas import (
    AttemptSummary,
    CreateQuizRequest,
    LeaderboardResponse,
    ManualQuizRequest,
    QuizForTaking,
    QuizHistoryResponse,
    QuizStatusResponse,
    QuizSummary,
    SubmissionResult,
    SubmittedAnswer,
)
from ..notifications import NotificationBus, quiz_topic
from ..storage.quiz_store import QuizStore
from .access_control import AccessCodeGenerator, QuizAccessPolicy
from .leaderboard_engine import LeaderboardEngine
from .scoring_engine import QuizScoringEngine

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30


@dataclass
class CreatedQuiz:
    """Resultado da criacao de um quiz."""

    quiz: Quiz
    ai_generated: bool


class QuizEngine:
    """Servico de quiz com colaboradores injetados.

    Example:
        >>> engine = QuizEngine(store, generator, bus)
        >>> created = await engine.create_ai_quiz(request, creator_id="u1")
        >>> await engine.start(created.quiz.id, "u1")
        >>> result = await engine.submit(created.quiz.id, "u1", answers, 42.0)
    """

    def __init__(
        self,
        store: QuizStore,
        generator: ContentGenerator,
        notifier: NotificationBus,
        config: Optional[QuizConfig] = None,
        fallback: Optional[FallbackQuestionGenerator] = None,
        access_codes: Optional[AccessCodeGenerator] = None,
        scoring: Optional[QuizScoringEngine] = None,
        leaderboard: Optional[LeaderboardEngine] = None,
    ):
        self.store = store
        self.generator = generator
        self.notifier = notifier
        self.config = config or get_config()
        self.fallback = fallback or FallbackQuestionGenerator()
        self.access_codes = access_codes or AccessCodeGenerator(self.config.access_code_length)
        self.scoring = scoring or QuizScoringEngine()
        self.leaderboard = leaderboard or LeaderboardEngine()
        self.policy = QuizAccessPolicy()

    # =========================================================================
    # CRIACAO
    # =========================================================================

    async def create_ai_quiz(self, request: CreateQuizRequest, creator_id: str) -> CreatedQuiz:
        """Cria quiz com questoes geradas pela IA (ou template no fallback).

        Raises:
            QuizValidationError: question_count acima do limite
            UpstreamFailure: IA falhou e QUIZ_AI_FAILURE_MODE=fail
        """
        count = request.question_count or self.config.default_question_count
        if count > self.config.max_question_count:
            raise QuizValidationError(
                f"question_count must be at most {self.config.max_question_count}",
                details={"field": "question_count"},
            )

        difficulty = request.difficulty.value
        title = request.title or f"{request.topic} - {difficulty} Quiz"

        questions, ai_generated = await self._generate_questions(request.topic, difficulty, count)

        quiz = self._build_quiz(
            title=title,
            description=request.description,
            topic=request.topic,
            difficulty=request.difficulty,
            creator_id=creator_id,
            visibility=request.visibility,
            questions=questions,
            settings=request.settings,
            tags=request.tags,
            ai_generated=ai_generated,
        )
        await self._insert_with_access_code(quiz)

        logger.info(
            f"[Quiz {quiz.id}] Criado via IA por {creator_id}: {len(questions)} questoes, "
            f"ai_generated={ai_generated}"
        )
        return CreatedQuiz(quiz=quiz, ai_generated=ai_generated)

    async def create_manual_quiz(self, request: ManualQuizRequest, creator_id: str) -> CreatedQuiz:
        """Cria quiz com questoes fornecidas pelo criador.

        A primeira questao invalida interrompe a criacao; nada e persistido.

        Raises:
            QuizValidationError: questao ou campo invalido
        """
        if not request.questions:
            raise QuizValidationError(
                "At least one question is required", details={"field": "questions"}
            )

        questions = [
            self._validate_manual_question(index, raw)
            for index, raw in enumerate(request.questions)
        ]

        quiz = self._build_quiz(
            title=request.title,
            description=request.description,
            topic=request.topic,
            difficulty=request.difficulty,
            creator_id=creator_id,
            visibility=request.visibility,
            questions=questions,
            settings=request.settings,
            tags=request.tags,
            ai_generated=False,
        )
        await self._insert_with_access_code(quiz)

        logger.info(f"[Quiz {quiz.id}] Criado manualmente por {creator_id}: {len(questions)} questoes")
        return CreatedQuiz(quiz=quiz, ai_generated=False)

    async def _generate_questions(
        self, topic: str, difficulty: str, count: int
    ) -> tuple[list[Question], bool]:
        """Gera e valida questoes, aplicando a politica de falha configurada.

        Returns:
            Tuple de (questoes, ai_generated)
        """
        if not self.config.ai_enabled:
            logger.info("IA desabilitada (QUIZ_AI_ENABLED=false), usando questoes template")
            return self.fallback.build_questions(topic, difficulty, count), False

        try:
            items = await asyncio.wait_for(
                self.generator.generate_questions(topic, difficulty, count),
                timeout=self.config.ai_timeout,
            )
            questions, rejected = normalize_generated_questions(items, limit=count)
            if rejected:
                logger.warning(f"{rejected} questao(oes) da IA descartada(s) na validacao")
            if not questions:
                raise UpstreamFailure("Content generator returned no valid questions")
        except asyncio.TimeoutError:
            failure = UpstreamFailure(
                f"Content generator timed out after {self.config.ai_timeout}s"
            )
            return self._handle_generation_failure(failure, topic, difficulty, count)
        except UpstreamFailure as e:
            return self._handle_generation_failure(e, topic, difficulty, count)
        except Exception as e:
            failure = UpstreamFailure(
                "Content generator request failed", details={"reason": str(e)}
            )
            return self._handle_generation_failure(failure, topic, difficulty, count)

        if len(questions) < count:
            logger.info(f"IA retornou {len(questions)} de {count} questoes pedidas")
        return questions, True

    def _handle_generation_failure(
        self,
        failure: UpstreamFailure,
        topic: str,
        difficulty: str,
        count: int,
    ) -> tuple[list[Question], bool]:
        if self.config.ai_failure_mode == FAILURE_MODE_FAIL:
            logger.error(f"Geracao por IA falhou: {failure.message}")
            raise failure

        logger.warning(f"Geracao por IA falhou ({failure.message}), usando questoes template")
        return self.fallback.build_questions(topic, difficulty, count), False

    @staticmethod
    def _validate_manual_question(index: int, raw: Any) -> Question:
        """Converte questao manual, apontando numero e campo no erro."""
        number = index + 1
        if not isinstance(raw, dict):
            raise QuizValidationError(
                f"Question {number} must be an object",
                details={"index": index, "field": "question"},
            )
        try:
            return Question.model_validate(raw)
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else "question"
            raise QuizValidationError(
                f"Question {number} is invalid: {first['msg']}",
                details={"index": index, "field": field},
            ) from e

    def _build_quiz(
        self,
        *,
        title: str,
        description: str,
        topic: str,
        difficulty: QuizDifficulty,
        creator_id: str,
        visibility: QuizVisibility,
        questions: list[Question],
        settings: QuizSettings,
        tags: list[str],
        ai_generated: bool,
    ) -> Quiz:
        access_code = self.access_codes.generate() if visibility == QuizVisibility.PRIVATE else None
        try:
            quiz = Quiz(
                title=title,
                description=description,
                topic=topic,
                difficulty=difficulty,
                creator_id=creator_id,
                visibility=visibility,
                access_code=access_code,
                questions=questions,
                settings=settings,
                tags=tags,
                ai_generated=ai_generated,
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else "quiz"
            raise QuizValidationError(
                f"Invalid quiz: {first['msg']}", details={"field": field}
            ) from e

        quiz.add_participant(creator_id)
        self.leaderboard.recompute(quiz)
        return quiz

    async def _insert_with_access_code(self, quiz: Quiz) -> None:
        """Persiste quiz novo, regenerando o access code em caso de colisao."""
        retries = self.config.access_code_retries
        for attempt in range(1, retries + 1):
            try:
                await self.store.insert_quiz(quiz)
                return
            except DuplicateAccessCodeError:
                logger.warning(
                    f"[Quiz {quiz.id}] Access code em uso (tentativa {attempt}/{retries})"
                )
                quiz.access_code = self.access_codes.generate()

        raise UpstreamFailure(
            "Could not allocate a unique access code", details={"attempts": retries}
        )

    # =========================================================================
    # PARTICIPACAO
    # =========================================================================

    async def join(
        self,
        user_id: str,
        quiz_id: Optional[str] = None,
        access_code: Optional[str] = None,
    ) -> Quiz:
        """Adiciona usuario como participante (idempotente).

        Raises:
            QuizValidationError: nem quiz_id nem access_code
            QuizNotFoundError: quiz ou access code inexistente
            QuizForbiddenError: quiz privado sem access code valido
            InvalidStateError: quiz concluido ou cancelado
        """
        code = AccessCodeGenerator.normalize(access_code)
        if not quiz_id and not code:
            raise QuizValidationError(
                "Either quiz_id or access_code is required",
                details={"field": "quiz_id"},
            )

        if quiz_id:
            target_id = quiz_id
        else:
            found = await self.store.find_by_access_code(code)
            if found is None:
                raise QuizNotFoundError("Invalid access code", details={"access_code": code})
            target_id = found.id

        async with self.store.lock(target_id):
            quiz = await self._load(target_id)

            if quiz_id and not self.policy.can_join(quiz, user_id, code):
                raise QuizForbiddenError(
                    "Access code required to join this private quiz",
                    details={"quiz_id": quiz_id},
                )

            if quiz.status in (QuizStatus.COMPLETED, QuizStatus.CANCELLED):
                raise InvalidStateError(
                    f"Cannot join a {quiz.status.value} quiz",
                    current=quiz.status.value,
                    expected=[QuizStatus.DRAFT.value, QuizStatus.SCHEDULED.value, QuizStatus.ACTIVE.value],
                )

            if quiz.add_participant(user_id):
                self.leaderboard.recompute(quiz)
                await self.store.save_quiz(quiz)
                logger.info(f"[Quiz {quiz.id}] Usuario {user_id} entrou no quiz")
            else:
                logger.debug(f"[Quiz {quiz.id}] Usuario {user_id} ja participava")

        return quiz

    # =========================================================================
    # TRANSICOES DE ESTADO
    # =========================================================================

    async def schedule(
        self,
        quiz_id: str,
        caller_id: str,
        scheduled_at: datetime,
        duration: Optional[int] = None,
    ) -> Quiz:
        """Agenda quiz (draft/scheduled -> scheduled)."""
        async with self.store.lock(quiz_id):
            quiz = await self._load(quiz_id)
            self.policy.require_creator(quiz, caller_id, "schedule")
            self._require_status(quiz, (QuizStatus.DRAFT, QuizStatus.SCHEDULED), "schedule")

            quiz.scheduled_at = scheduled_at
            quiz.duration = duration or DEFAULT_DURATION_MINUTES
            quiz.status = QuizStatus.SCHEDULED
            await self.store.save_quiz(quiz)

        logger.info(f"[Quiz {quiz_id}] Agendado para {scheduled_at.isoformat()} ({quiz.duration} min)")
        return quiz

    async def start(self, quiz_id: str, caller_id: str) -> Quiz:
        """Inicia quiz (draft/scheduled -> active) e notifica a sala."""
        quiz = await self._transition(
            quiz_id,
            caller_id,
            action="start",
            allowed=(QuizStatus.DRAFT, QuizStatus.SCHEDULED),
            target=QuizStatus.ACTIVE,
        )
        self.notifier.publish(quiz_topic(quiz_id), "quiz-started", {"quizId": quiz_id})
        return quiz

    async def complete(self, quiz_id: str, caller_id: str) -> Quiz:
        """Encerra quiz (active -> completed)."""
        quiz = await self._transition(
            quiz_id,
            caller_id,
            action="complete",
            allowed=(QuizStatus.ACTIVE,),
            target=QuizStatus.COMPLETED,
        )
        self.notifier.publish(quiz_topic(quiz_id), "quiz-completed", {"quizId": quiz_id})
        return quiz

    async def cancel(self, quiz_id: str, caller_id: str) -> Quiz:
        """Cancela quiz (draft/scheduled -> cancelled, terminal)."""
        return await self._transition(
            quiz_id,
            caller_id,
            action="cancel",
            allowed=(QuizStatus.DRAFT, QuizStatus.SCHEDULED),
            target=QuizStatus.CANCELLED,
        )

    async def _transition(
        self,
        quiz_id: str,
        caller_id: str,
        action: str,
        allowed: tuple[QuizStatus, ...],
        target: QuizStatus,
    ) -> Quiz:
        async with self.store.lock(quiz_id):
            quiz = await self._load(quiz_id)
            self.policy.require_creator(quiz, caller_id, action)
            self._require_status(quiz, allowed, action)

            previous = quiz.status
            quiz.status = target
            await self.store.save_quiz(quiz)

        logger.info(f"[Quiz {quiz_id}] {previous.value} -> {target.value}")
        return quiz

    @staticmethod
    def _require_status(quiz: Quiz, allowed: Sequence[QuizStatus], action: str) -> None:
        if quiz.status not in allowed:
            raise InvalidStateError(
                f"Cannot {action} a quiz in status '{quiz.status.value}'",
                current=quiz.status.value,
                expected=[status.value for status in allowed],
            )

    # =========================================================================
    # SUBMISSAO
    # =========================================================================

    async def submit(
        self,
        quiz_id: str,
        user_id: str,
        answers: Sequence[Union[SubmittedAnswer, dict[str, Any]]],
        total_time_spent: float = 0,
    ) -> SubmissionResult:
        """Corrige submissao, atualiza participante e recalcula leaderboard.

        Retake sobrescreve a tentativa anterior (nunca acumula).

        Raises:
            QuizNotFoundError: quiz inexistente
            InvalidStateError: quiz nao esta ativo, ou retake nao permitido
            QuizForbiddenError: usuario nao e participante
            QuizValidationError: mais respostas que questoes
        """
        submitted = [
            a if isinstance(a, SubmittedAnswer) else SubmittedAnswer.model_validate(a)
            for a in answers
        ]

        async with self.store.lock(quiz_id):
            quiz = await self._load(quiz_id)

            if quiz.status != QuizStatus.ACTIVE:
                raise InvalidStateError(
                    "Quiz is not active",
                    current=quiz.status.value,
                    expected=[QuizStatus.ACTIVE.value],
                )

            participant = quiz.get_participant(user_id)
            if participant is None:
                raise QuizForbiddenError(
                    "You must join the quiz before submitting",
                    details={"quiz_id": quiz_id},
                )

            if len(submitted) > len(quiz.questions):
                raise QuizValidationError(
                    f"Received {len(submitted)} answers for {len(quiz.questions)} questions",
                    details={"field": "answers"},
                )

            retake = participant.is_completed
            if retake:
                if not quiz.settings.allow_retake:
                    raise InvalidStateError(
                        "Retakes are not allowed for this quiz",
                        current=quiz.status.value,
                        details={"quiz_id": quiz_id},
                    )
                participant.reset_attempt()

            result = self.scoring.score(quiz.questions, submitted)

            participant.answers = result.answers
            participant.score = result.score
            participant.percentage = result.percentage
            participant.total_time_spent = total_time_spent
            participant.completed_at = utcnow()

            quiz.analytics.total_attempts += 1
            self.leaderboard.recompute(quiz)
            await self.store.save_quiz(quiz)

        logger.info(
            f"[Quiz {quiz_id}] Submissao de {user_id}: score={result.score}/{result.max_score} "
            f"({result.percentage}%), rank={participant.rank}, retake={retake}"
        )

        self.notifier.publish(
            quiz_topic(quiz_id),
            "quiz-submission",
            {"userId": user_id, "score": result.score},
        )

        return SubmissionResult(
            score=result.score,
            percentage=result.percentage,
            rank=participant.rank,
            correct_answers=result.correct_count,
            total_questions=result.total_questions,
            retake=retake,
        )

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    async def get_leaderboard(self, quiz_id: str, caller_id: Optional[str]) -> LeaderboardResponse:
        quiz = await self._load(quiz_id)
        self.policy.require_view(quiz, caller_id)
        return LeaderboardResponse(
            quiz_id=quiz.id,
            leaderboard=quiz.leaderboard,
            analytics=quiz.analytics,
        )

    async def list_quizzes(
        self,
        user_id: str,
        topic: Optional[str] = None,
        difficulty: Optional[QuizDifficulty] = None,
    ) -> list[Quiz]:
        """Quizzes publicos, criados ou com participacao do usuario.

        Apenas draft/scheduled/active; mais recentes primeiro.
        """
        topic_filter = topic.strip().lower() if topic else None

        def matches(quiz: Quiz) -> bool:
            if not self.policy.visible_in_listing(quiz, user_id):
                return False
            if topic_filter and topic_filter not in quiz.topic.lower():
                return False
            if difficulty is not None and quiz.difficulty != difficulty:
                return False
            return True

        quizzes = await self.store.find_quizzes(matches)
        return self._newest_first(quizzes)

    async def get_quiz(
        self, quiz_id: str, user_id: Optional[str]
    ) -> Union[Quiz, QuizForTaking]:
        """Documento do quiz conforme o chamador.

        Criador (ou participante que concluiu, se show_answers_after_completion)
        recebe o documento completo; demais recebem a projecao sem respostas.
        """
        quiz = await self._load(quiz_id)
        self.policy.require_view(quiz, user_id)
        if self.policy.can_see_answers(quiz, user_id):
            return quiz
        return self.policy.strip_answers(quiz)

    async def get_quiz_for_taking(self, quiz_id: str, user_id: Optional[str]) -> QuizForTaking:
        """Projecao sem correct_answer nem explanation."""
        quiz = await self._load(quiz_id)
        self.policy.require_view(quiz, user_id)
        return self.policy.strip_answers(quiz)

    async def get_history(self, user_id: str) -> QuizHistoryResponse:
        """Quizzes criados e participacoes concluidas do usuario."""
        created = self._newest_first(
            await self.store.find_quizzes(lambda q: q.is_creator(user_id))
        )

        participated = await self.store.find_quizzes(
            lambda q: q.has_participant(user_id) and q.participants[user_id].is_completed
        )
        participated.sort(key=lambda q: q.participants[user_id].completed_at, reverse=True)

        return QuizHistoryResponse(
            created=[QuizSummary.from_quiz(q, user_id) for q in created],
            participated=[QuizSummary.from_quiz(q, user_id) for q in participated],
        )

    async def get_status(self, quiz_id: str, user_id: str) -> QuizStatusResponse:
        """Status de conclusao do usuario e resumo da ultima tentativa."""
        quiz = await self._load(quiz_id)
        self.policy.require_view(quiz, user_id)

        participant = quiz.get_participant(user_id)
        attempt = None
        if participant is not None and participant.is_completed:
            attempt = AttemptSummary(
                score=participant.score,
                percentage=participant.percentage,
                total_time_spent=participant.total_time_spent,
                completed_at=participant.completed_at,
                rank=participant.rank,
            )

        return QuizStatusResponse(
            quiz_id=quiz.id,
            status=quiz.status,
            joined=participant is not None,
            completed=attempt is not None,
            attempt=attempt,
        )

    @staticmethod
    def _newest_first(quizzes: list[Quiz]) -> list[Quiz]:
        """Ordena por created_at desc; empates ficam com o inserido por ultimo."""
        return sorted(reversed(quizzes), key=lambda q: q.created_at, reverse=True)

    async def _load(self, quiz_id: str) -> Quiz:
        quiz = await self.store.load_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError("Quiz not found", details={"quiz_id": quiz_id})
        return quiz
