"""Quiz Store - Abstração sobre AgentFS para persistência de quiz."""

from __future__ import annotations

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, Optional

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..errors import DuplicateAccessCodeError
from ..models.document import Quiz, utcnow

logger = logging.getLogger(__name__)


class MemoryKV:
    """KV assíncrono em memória com a mesma superfície do `AgentFS.kv`.

    Usado quando QUIZ_STORAGE_BACKEND=memory (desenvolvimento e testes).
    Valores são copiados na escrita e na leitura, como num store real.
    """

    def __init__(self):
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any:
        value = self._data.get(key)
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list(self, prefix: str = "") -> list[dict[str, Any]]:
        return [{"key": k} for k in self._data if k.startswith(prefix)]


class MemoryAgentFS:
    """Contêiner com `.kv` para o backend em memória."""

    def __init__(self):
        self.kv = MemoryKV()

    async def close(self) -> None:
        return None


class QuizStore:
    """Abstração sobre AgentFS para persistência de quiz.

    Cada quiz é um documento único; participantes, leaderboard e analytics
    são gravados junto com ele.

    Estrutura de chaves:
        - quiz:{quiz_id}:doc -> Documento completo do quiz (Quiz.to_dict)
        - quiz:access:{CODE} -> quiz_id do quiz privado com esse access code
        - quiz:index -> Lista de quiz IDs (ordem de inserção)

    Example:
        >>> store = QuizStore(agentfs)
        >>> await store.insert_quiz(quiz)
        >>> async with store.lock(quiz.id):
        ...     loaded = await store.load_quiz(quiz.id)
        ...     await store.save_quiz(loaded)
    """

    KEY_PREFIX = "quiz"

    def __init__(self, agentfs: AgentFS | MemoryAgentFS):
        """Inicializa store com instância do AgentFS.

        Args:
            agentfs: Instância configurada do AgentFS (ou MemoryAgentFS)
        """
        self.agentfs = agentfs
        self._locks: dict[str, asyncio.Lock] = {}
        self._index_lock = asyncio.Lock()

    def _doc_key(self, quiz_id: str) -> str:
        """Gera chave para documento do quiz."""
        return f"{self.KEY_PREFIX}:{quiz_id}:doc"

    def _access_key(self, access_code: str) -> str:
        """Gera chave do índice de access code."""
        return f"{self.KEY_PREFIX}:access:{access_code.upper()}"

    def _index_key(self) -> str:
        return f"{self.KEY_PREFIX}:index"

    # -------------------------------------------------------------------------
    # Lock por quiz
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def lock(self, quiz_id: str) -> AsyncIterator[None]:
        """Serializa read-modify-write do mesmo quiz.

        Quizzes diferentes usam locks diferentes e seguem em paralelo.
        """
        quiz_lock = self._locks.setdefault(quiz_id, asyncio.Lock())
        async with quiz_lock:
            yield

    # -------------------------------------------------------------------------
    # Escrita
    # -------------------------------------------------------------------------

    async def insert_quiz(self, quiz: Quiz) -> None:
        """Persiste um quiz novo e registra o access code.

        Raises:
            DuplicateAccessCodeError: access code já usado por outro quiz
            ValueError: quiz_id já existe
        """
        async with self._index_lock:
            if await self.agentfs.kv.get(self._doc_key(quiz.id)):
                raise ValueError(f"Quiz {quiz.id} já existe")

            if quiz.access_code:
                access_key = self._access_key(quiz.access_code)
                owner = await self.agentfs.kv.get(access_key)
                if owner and owner != quiz.id:
                    raise DuplicateAccessCodeError(
                        "Access code already in use",
                        details={"access_code": quiz.access_code},
                    )
                await self.agentfs.kv.set(access_key, quiz.id)

            await self.agentfs.kv.set(self._doc_key(quiz.id), quiz.to_dict())

            index = await self.agentfs.kv.get(self._index_key()) or []
            index.append(quiz.id)
            await self.agentfs.kv.set(self._index_key(), index)

        logger.debug(f"Quiz inserido: {quiz.id}")

    async def save_quiz(self, quiz: Quiz) -> None:
        """Persiste documento completo (atualiza updated_at).

        Args:
            quiz: Documento do quiz a persistir
        """
        quiz.updated_at = utcnow()
        await self.agentfs.kv.set(self._doc_key(quiz.id), quiz.to_dict())
        logger.debug(f"Quiz salvo: {quiz.id}")

    async def delete_quiz(self, quiz_id: str) -> None:
        """Remove quiz, access code e entrada do índice.

        Args:
            quiz_id: ID do quiz
        """
        async with self._index_lock:
            quiz = await self.load_quiz(quiz_id)
            if quiz is not None and quiz.access_code:
                await self.agentfs.kv.delete(self._access_key(quiz.access_code))

            await self.agentfs.kv.delete(self._doc_key(quiz_id))

            index = await self.agentfs.kv.get(self._index_key()) or []
            if quiz_id in index:
                index.remove(quiz_id)
                await self.agentfs.kv.set(self._index_key(), index)

        self._locks.pop(quiz_id, None)
        logger.info(f"Quiz deletado: {quiz_id}")

    # -------------------------------------------------------------------------
    # Leitura
    # -------------------------------------------------------------------------

    async def load_quiz(self, quiz_id: str) -> Optional[Quiz]:
        """Carrega documento do KV store.

        Args:
            quiz_id: ID do quiz

        Returns:
            Quiz se encontrado, None caso contrário
        """
        data = await self.agentfs.kv.get(self._doc_key(quiz_id))

        if not data:
            logger.debug(f"Quiz não encontrado: {quiz_id}")
            return None

        return Quiz.from_dict(data)

    async def find_by_access_code(self, access_code: str) -> Optional[Quiz]:
        """Resolve access code para o quiz privado correspondente."""
        quiz_id = await self.agentfs.kv.get(self._access_key(access_code))
        if not quiz_id:
            return None
        return await self.load_quiz(quiz_id)

    async def list_quiz_ids(self) -> list[str]:
        """Lista todos os quiz IDs armazenados (ordem de inserção)."""
        return list(await self.agentfs.kv.get(self._index_key()) or [])

    async def find_quizzes(self, predicate: Callable[[Quiz], bool]) -> list[Quiz]:
        """Retorna quizzes que satisfazem o predicado.

        Args:
            predicate: Função aplicada a cada documento carregado

        Returns:
            Lista de Quiz (cada id no máximo uma vez)
        """
        results = []
        seen = set()
        for quiz_id in await self.list_quiz_ids():
            if quiz_id in seen:
                continue
            seen.add(quiz_id)
            quiz = await self.load_quiz(quiz_id)
            if quiz is not None and predicate(quiz):
                results.append(quiz)
        return results
