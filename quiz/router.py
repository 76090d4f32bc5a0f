"""Quiz Router - Endpoints FastAPI do servico de quiz."""

import asyncio
import json
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

import app_state
from config import get_config

from .engine.quiz_engine import CreatedQuiz, QuizEngine
from .errors import QuizError
from .models.document import Quiz
from .models.enums import QuizDifficulty
from .models.schemas import (
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
)
from .notifications import quiz_topic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["Quiz"])

# Limite lido da config a cada request (QUIZ_CREATE_RATE_LIMIT)
limiter = Limiter(key_func=get_remote_address)

# Intervalo de keepalive do stream SSE (segundos)
SSE_KEEPALIVE_SECONDS = 15.0


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Identidade do chamador (header X-User-Id)."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def _create_rate_limit() -> str:
    return get_config().create_rate_limit


def register_exception_handlers(app: FastAPI) -> None:
    """Converte QuizError em JSON {error, message, details}."""

    @app.exception_handler(QuizError)
    async def quiz_error_handler(request: Request, exc: QuizError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.kind}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _created_response(created: CreatedQuiz) -> CreatedQuizResponse:
    quiz = created.quiz
    return CreatedQuizResponse(
        message="Quiz created successfully",
        ai_generated=created.ai_generated,
        access_code=quiz.access_code,
        question_count=len(quiz.questions),
        quiz=quiz,
    )


# =============================================================================
# CRIACAO
# =============================================================================


@router.post("", response_model=CreatedQuizResponse, status_code=201)
@limiter.limit(_create_rate_limit)
async def create_quiz(
    request: Request,
    body: CreateQuizRequest,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Cria quiz com questoes geradas pela IA.

    - Se a IA falhar, usa questoes template (ai_generated=false) ou
      retorna 502, conforme QUIZ_AI_FAILURE_MODE
    - Quiz privado recebe access_code (visivel so para o criador)
    """
    created = await engine.create_ai_quiz(body, user_id)
    return _created_response(created)


@router.post("/manual", response_model=CreatedQuizResponse, status_code=201)
async def create_manual_quiz(
    body: ManualQuizRequest,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Cria quiz com questoes escritas pelo criador."""
    created = await engine.create_manual_quiz(body, user_id)
    return _created_response(created)


# =============================================================================
# LISTAGEM E PARTICIPACAO
# =============================================================================


@router.get("", response_model=QuizListResponse)
async def list_quizzes(
    topic: Optional[str] = Query(default=None),
    difficulty: Optional[QuizDifficulty] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Quizzes publicos, criados ou com participacao do usuario."""
    quizzes = await engine.list_quizzes(user_id, topic=topic, difficulty=difficulty)
    return QuizListResponse(quizzes=[QuizSummary.from_quiz(q, user_id) for q in quizzes])


@router.post("/join", response_model=QuizSummary)
async def join_quiz(
    body: JoinQuizRequest,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Entra em um quiz por id ou access code (idempotente)."""
    quiz = await engine.join(user_id, quiz_id=body.quiz_id, access_code=body.access_code)
    return QuizSummary.from_quiz(quiz, user_id)


@router.get("/history", response_model=QuizHistoryResponse)
async def get_history(
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Quizzes criados e respondidos pelo usuario."""
    return await engine.get_history(user_id)


# =============================================================================
# CICLO DE VIDA (somente criador)
# =============================================================================


@router.put("/{quiz_id}/schedule", response_model=QuizSummary)
async def schedule_quiz(
    quiz_id: str,
    body: ScheduleQuizRequest,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    quiz = await engine.schedule(quiz_id, user_id, body.scheduled_at, body.duration)
    return QuizSummary.from_quiz(quiz, user_id)


@router.put("/{quiz_id}/start", response_model=QuizSummary)
async def start_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Inicia o quiz e notifica a sala (evento quiz-started)."""
    quiz = await engine.start(quiz_id, user_id)
    return QuizSummary.from_quiz(quiz, user_id)


@router.put("/{quiz_id}/complete", response_model=QuizSummary)
async def complete_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    quiz = await engine.complete(quiz_id, user_id)
    return QuizSummary.from_quiz(quiz, user_id)


@router.put("/{quiz_id}/cancel", response_model=QuizSummary)
async def cancel_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    quiz = await engine.cancel(quiz_id, user_id)
    return QuizSummary.from_quiz(quiz, user_id)


# =============================================================================
# SUBMISSAO E RESULTADOS
# =============================================================================


@router.post("/{quiz_id}/submit", response_model=SubmissionResult)
async def submit_answers(
    quiz_id: str,
    body: SubmitAnswersRequest,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Corrige as respostas e atualiza o leaderboard.

    Respostas seguem a ordem das questoes; faltantes contam como erradas.
    Nova submissao de quem ja concluiu substitui a anterior (retake).
    """
    return await engine.submit(quiz_id, user_id, body.answers, body.total_time_spent)


@router.get("/{quiz_id}/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    return await engine.get_leaderboard(quiz_id, user_id)


@router.get("/{quiz_id}/take", response_model=QuizForTaking)
async def get_quiz_for_taking(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Quiz sem respostas corretas, para quem vai responder."""
    return await engine.get_quiz_for_taking(quiz_id, user_id)


@router.get("/{quiz_id}/status", response_model=QuizStatusResponse)
async def get_quiz_status(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    return await engine.get_status(quiz_id, user_id)


@router.get("/{quiz_id}/events")
async def stream_quiz_events(
    quiz_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Stream SSE dos eventos do quiz (quiz-started, quiz-submission...).

    Entrega at-most-once: eventos anteriores a conexao nao sao reenviados.
    """
    await engine.get_quiz_for_taking(quiz_id, user_id)
    topic = quiz_topic(quiz_id)

    async def generate():
        async with engine.notifier.subscribe(topic) as queue:
            yield ": connected\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(queue.get(), timeout=SSE_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: {message['event']}\ndata: {json.dumps(message['data'])}\n\n"

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/{quiz_id}", response_model=Union[Quiz, QuizForTaking])
async def get_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    engine: QuizEngine = Depends(app_state.get_quiz_engine),
):
    """Documento completo para o criador (ou participante que concluiu);
    projecao sem respostas para os demais."""
    return await engine.get_quiz(quiz_id, user_id)
