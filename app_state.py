"""Core module - estado compartilhado do app (engine, store, AgentFS)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Union

from fastapi import FastAPI, Request

from config import QuizConfig, get_config
from quiz.engine.quiz_engine import QuizEngine
from quiz.llm.factory import LLMClientFactory
from quiz.llm.generator import ClaudeQuestionGenerator
from quiz.notifications import NotificationBus
from quiz.storage.quiz_store import MemoryAgentFS, QuizStore

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

logger = logging.getLogger(__name__)


async def open_agentfs(config: QuizConfig) -> Union[AgentFS, MemoryAgentFS]:
    """Abre o backend de armazenamento configurado.

    QUIZ_STORAGE_BACKEND=agentfs exige o extra `agentfs` instalado.
    """
    if config.storage_backend == "agentfs":
        from agentfs_sdk import AgentFS, AgentFSOptions

        agentfs = await AgentFS.open(AgentFSOptions(id=config.agentfs_id))
        logger.info(f"AgentFS aberto: {config.agentfs_id}")
        return agentfs

    logger.info("Usando armazenamento em memoria (QUIZ_STORAGE_BACKEND=memory)")
    return MemoryAgentFS()


def build_engine(
    agentfs: Union[AgentFS, MemoryAgentFS],
    config: Optional[QuizConfig] = None,
) -> QuizEngine:
    """Monta QuizEngine com store, gerador Claude e bus de notificacoes."""
    config = config or get_config()
    store = QuizStore(agentfs)
    generator = ClaudeQuestionGenerator(LLMClientFactory(model=config.ai_model))
    return QuizEngine(store, generator, NotificationBus(), config=config)


async def startup(app: FastAPI, config: Optional[QuizConfig] = None) -> QuizEngine:
    """Inicializa recursos e registra no app.state."""
    config = config or get_config()
    agentfs = await open_agentfs(config)
    engine = build_engine(agentfs, config)
    app.state.agentfs = agentfs
    app.state.quiz_engine = engine
    return engine


async def cleanup(app: FastAPI) -> None:
    """Libera recursos no shutdown."""
    agentfs = getattr(app.state, "agentfs", None)
    if agentfs is not None:
        try:
            await agentfs.close()
            logger.info("AgentFS fechado")
        except Exception as e:
            logger.warning(f"Erro ao fechar AgentFS: {e}")
        app.state.agentfs = None
    app.state.quiz_engine = None


def get_quiz_engine(request: Request) -> QuizEngine:
    """Dependency para obter o QuizEngine do app."""
    engine = getattr(request.app.state, "quiz_engine", None)
    if engine is None:
        raise RuntimeError("QuizEngine nao inicializado (lifespan nao executado)")
    return engine
