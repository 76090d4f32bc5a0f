# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza mocks, fixtures e configurações comuns
# =============================================================================

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio


# =============================================================================
# FIXTURES DO AGENTFS
# =============================================================================


@pytest.fixture
def mock_agentfs():
    """Mock do AgentFS com KV vazio (para verificar chamadas)."""
    mock = MagicMock()

    # KV Store
    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()
    mock.kv.list = AsyncMock(return_value=[])

    # Lifecycle
    mock.close = AsyncMock()

    return mock


@pytest.fixture
def mock_agentfs_with_data():
    """Mock do AgentFS com KV em dicionário."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    async def mock_list(prefix=""):
        return [{"key": k} for k in _storage if k.startswith(prefix)]

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock.kv.list = mock_list
    mock._storage = _storage

    mock.close = AsyncMock()

    return mock


@pytest.fixture
def memory_store():
    """QuizStore sobre o backend em memória."""
    from quiz.storage.quiz_store import MemoryAgentFS, QuizStore

    return QuizStore(MemoryAgentFS())


class YieldingKV:
    """KV em memória que cede o event loop em cada get/set.

    Com ele, operações concorrentes intercalam entre leitura e escrita
    (como num store com I/O real).
    """

    def __init__(self):
        from quiz.storage.quiz_store import MemoryKV

        self.inner = MemoryKV()

    async def get(self, key):
        await asyncio.sleep(0)
        return await self.inner.get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        await self.inner.set(key, value)

    async def delete(self, key):
        await self.inner.delete(key)

    async def list(self, prefix=""):
        return await self.inner.list(prefix)


@pytest.fixture
def yielding_store():
    """QuizStore cujo KV cede o event loop (expõe corridas sem lock)."""
    from quiz.storage.quiz_store import MemoryAgentFS, QuizStore

    agentfs = MemoryAgentFS()
    agentfs.kv = YieldingKV()
    return QuizStore(agentfs)


# =============================================================================
# FIXTURES DE NOTIFICAÇÃO
# =============================================================================


class RecordingNotificationBus:
    """Bus que registra publicações e repassa para um bus real."""

    def __init__(self):
        from quiz.notifications import NotificationBus

        self.inner = NotificationBus()
        self.events: list[tuple[str, str, dict]] = []

    def publish(self, topic: str, event: str, payload: dict) -> int:
        self.events.append((topic, event, payload))
        return self.inner.publish(topic, event, payload)

    def subscribe(self, topic: str):
        return self.inner.subscribe(topic)

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


@pytest.fixture
def recording_bus():
    return RecordingNotificationBus()


# =============================================================================
# FIXTURES DO GERADOR DE CONTEÚDO
# =============================================================================


class FakeQuestionGenerator:
    """Gerador falso: retorna itens fixos, levanta erro ou demora."""

    def __init__(
        self,
        items: Optional[list[Any]] = None,
        error: Optional[Exception] = None,
        delay: float = 0,
    ):
        self.items = items if items is not None else []
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, str, int]] = []

    async def generate_questions(self, topic: str, difficulty: str, count: int) -> list[Any]:
        self.calls.append((topic, difficulty, count))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.items)


def make_generated_items(count: int) -> list[dict]:
    """Itens no formato retornado pela IA."""
    return [
        {
            "question": f"Generated question {i + 1}?",
            "options": ["Alpha", "Beta", "Gamma", "Delta"],
            "correctAnswer": i % 4,
            "explanation": f"Explanation {i + 1}",
        }
        for i in range(count)
    ]


@pytest.fixture
def generated_items():
    return make_generated_items


@pytest.fixture
def fake_generator():
    """Factory de geradores falsos."""

    def _make(items=None, error=None, delay=0):
        return FakeQuestionGenerator(items=items, error=error, delay=delay)

    return _make


# =============================================================================
# FIXTURES DO QUIZ
# =============================================================================


@pytest.fixture
def quiz_config():
    """Config determinística para testes do engine."""
    from config import QuizConfig

    return QuizConfig(
        ai_enabled=True,
        ai_timeout=0.5,
        ai_failure_mode="fallback",
        default_question_count=5,
        max_question_count=20,
        access_code_length=6,
        access_code_retries=3,
    )


@pytest.fixture
def make_engine(memory_store, recording_bus, quiz_config, fake_generator, generated_items):
    """Factory de QuizEngine com colaboradores de teste."""
    from quiz.engine.quiz_engine import QuizEngine

    def _make(generator=None, config=None, **kwargs):
        return QuizEngine(
            memory_store,
            generator or fake_generator(items=generated_items(5)),
            recording_bus,
            config=config or quiz_config,
            **kwargs,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def example_questions():
    """Três questões do cenário de referência (pontos 1, 2, 1)."""
    return [
        {"question": "Q1?", "options": ["A", "B", "C"], "correctAnswer": 0, "points": 1},
        {"question": "Q2?", "options": ["A", "B", "C"], "correctAnswer": 1, "points": 2},
        {"question": "Q3?", "options": ["A", "B", "C"], "correctAnswer": 2, "points": 1},
    ]


@pytest.fixture
def manual_request(example_questions):
    """Factory de ManualQuizRequest."""
    from quiz.models.schemas import ManualQuizRequest

    def _make(**overrides):
        data = {
            "title": "Biology Basics",
            "description": "Cells and organisms",
            "topic": "Biology",
            "difficulty": "easy",
            "questions": example_questions,
        }
        data.update(overrides)
        return ManualQuizRequest(**data)

    return _make


@pytest.fixture
def sample_quiz(example_questions):
    """Quiz público em draft (não persistido)."""
    from quiz.models.document import Quiz

    return Quiz(
        title="Biology Basics",
        topic="Biology",
        difficulty="easy",
        creator_id="creator",
        questions=example_questions,
    )


@pytest.fixture
def private_quiz(example_questions):
    """Quiz privado com access code fixo (não persistido)."""
    from quiz.models.document import Quiz

    return Quiz(
        title="Secret Chemistry",
        topic="Chemistry",
        difficulty="hard",
        creator_id="creator",
        visibility="private",
        access_code="ABC123",
        questions=example_questions,
    )


@pytest_asyncio.fixture
async def active_quiz(engine, manual_request):
    """Quiz do cenário de referência, ativo, com 'alice' e 'bob' participando."""
    created = await engine.create_manual_quiz(manual_request(), "creator")
    quiz_id = created.quiz.id
    await engine.join("alice", quiz_id=quiz_id)
    await engine.join("bob", quiz_id=quiz_id)
    await engine.start(quiz_id, "creator")
    return quiz_id


# =============================================================================
# FIXTURES DO FASTAPI
# =============================================================================


@pytest.fixture
def client(fake_generator, generated_items):
    """Cliente de teste FastAPI (lifespan executado, gerador falso)."""
    from fastapi.testclient import TestClient

    from server import app

    with TestClient(app) as test_client:
        app.state.quiz_engine.generator = fake_generator(items=generated_items(5))
        yield test_client


# =============================================================================
# FIXTURES DE LOGGING
# =============================================================================


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificação em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
