"""Notification Bus - Eventos em tempo real por quiz (fire-and-forget).

Topico por quiz: `quiz-{quiz_id}`. Eventos emitidos pelo engine:
    - quiz-started     {"quizId": ...}
    - quiz-submission  {"userId": ..., "score": ...}
    - quiz-completed   {"quizId": ...}

Entrega at-most-once: assinante lento (fila cheia) perde eventos e uma
falha na publicacao nunca afeta a operacao que a disparou.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

logger = logging.getLogger(__name__)

QUEUE_MAXSIZE = 100


def quiz_topic(quiz_id: str) -> str:
    """Nome do topico de um quiz."""
    return f"quiz-{quiz_id}"


class NotificationBus:
    """Pub/sub em processo com filas limitadas por assinante.

    Example:
        >>> bus = NotificationBus()
        >>> async with bus.subscribe("quiz-abc") as queue:
        ...     event = await queue.get()
    """

    def __init__(self, queue_maxsize: int = QUEUE_MAXSIZE):
        self.queue_maxsize = queue_maxsize
        self._subscribers: dict[str, set[asyncio.Queue]] = {}

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    def publish(self, topic: str, event: str, payload: dict[str, Any]) -> int:
        """Publica evento para os assinantes do topico.

        Nunca levanta excecao.

        Returns:
            Numero de assinantes que receberam o evento
        """
        delivered = 0
        try:
            message = {"event": event, "data": payload}
            for queue in list(self._subscribers.get(topic, ())):
                try:
                    queue.put_nowait(message)
                    delivered += 1
                except asyncio.QueueFull:
                    logger.warning(f"Fila cheia no topico {topic}, evento '{event}' descartado")
        except Exception as e:
            logger.error(f"Erro ao publicar '{event}' em {topic}: {e}")
        return delivered

    @asynccontextmanager
    async def subscribe(self, topic: str) -> AsyncIterator[asyncio.Queue]:
        """Registra uma fila no topico enquanto o contexto estiver aberto."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_maxsize)
        self._subscribers.setdefault(topic, set()).add(queue)
        logger.debug(f"Assinante adicionado em {topic}")
        try:
            yield queue
        finally:
            subscribers = self._subscribers.get(topic)
            if subscribers is not None:
                subscribers.discard(queue)
                if not subscribers:
                    del self._subscribers[topic]
            logger.debug(f"Assinante removido de {topic}")
