"""Question Generators - Geracao de questoes via Claude e validacao da saida.

A saida da IA nunca e aceita sem validacao: cada item e convertido para
`Question`, que aplica as mesmas invariantes do caminho manual.
"""

import json
import logging
import re
from typing import Any, Optional, Protocol

from claude_agent_sdk import query
from pydantic import ValidationError

from ..errors import UpstreamFailure
from ..models.document import Question
from ..prompts import DEFAULT_EXPLANATION, QUIZ_GENERATION_PROMPT
from .factory import LLMClientFactory

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    """Contrato do gerador de conteudo consumido pelo QuizEngine."""

    async def generate_questions(
        self, topic: str, difficulty: str, count: int
    ) -> list[dict[str, Any]]:
        """Retorna itens crus (ainda nao validados)."""
        ...


def extract_json(text: str) -> Any:
    """Extrai JSON de uma resposta do LLM.

    Aceita JSON puro, bloco markdown (```json ... ```) ou JSON cercado de
    texto. Levanta json.JSONDecodeError quando nada e parseavel.
    """
    content = text.strip()

    if "```json" in content:
        content = content.split("```json")[1].split("```")[0].strip()
    elif "```" in content:
        content = content.split("```")[1].split("```")[0].strip()

    if not content.startswith(("[", "{")):
        match = re.search(r"\[[\s\S]*\]|\{[\s\S]*\}", content)
        if match:
            content = match.group(0)

    return json.loads(content)


def _normalize_options(raw_options: Any) -> Any:
    """Aceita ["A", "B"] ou [{"label": "A", "text": "..."}]."""
    if not isinstance(raw_options, list):
        return raw_options
    normalized = []
    for opt in raw_options:
        if isinstance(opt, dict):
            normalized.append(opt.get("text", ""))
        else:
            normalized.append(opt)
    return normalized


def normalize_generated_questions(
    items: list[Any], limit: Optional[int] = None
) -> tuple[list[Question], int]:
    """Valida itens gerados pela IA contra as invariantes de Question.

    Itens invalidos (sem question/options/correctAnswer, ou indice fora dos
    limites) sao descartados, nunca corrigidos. A validacao e strict: bool
    ou string numerica em correctAnswer nao viram inteiro.

    Args:
        items: Itens crus retornados pelo gerador
        limit: Maximo de questoes aceitas

    Returns:
        Tuple de (questoes validas, quantidade rejeitada)
    """
    valid: list[Question] = []
    rejected = 0

    for index, item in enumerate(items):
        if limit is not None and len(valid) >= limit:
            break

        if not isinstance(item, dict):
            rejected += 1
            logger.warning(f"Item {index} da IA descartado: nao e um objeto")
            continue

        data = {
            "question": item.get("question"),
            "options": _normalize_options(item.get("options")),
            "explanation": item.get("explanation") or DEFAULT_EXPLANATION,
            "points": 1,
            "time_limit": 30,
        }
        for key in ("correctAnswer", "correct_answer", "correct_index", "correct"):
            if key in item:
                data["correct_answer"] = item[key]
                break

        try:
            valid.append(Question.model_validate(data, strict=True))
        except ValidationError as e:
            rejected += 1
            logger.warning(f"Item {index} da IA descartado: {e.error_count()} erro(s) de validacao")

    return valid, rejected


class ClaudeQuestionGenerator:
    """Gerador de questoes usando o Claude Agent SDK.

    Example:
        >>> generator = ClaudeQuestionGenerator(LLMClientFactory("haiku"))
        >>> items = await generator.generate_questions("Python", "easy", 5)
    """

    def __init__(self, llm_factory: Optional[LLMClientFactory] = None):
        self.llm_factory = llm_factory or LLMClientFactory()

    async def _query_text(self, prompt: str) -> str:
        """Executa a query e concatena os blocos de texto da resposta."""
        options = self.llm_factory.create_generation_options()
        text = ""
        async for message in query(prompt=prompt, options=options):
            content = getattr(message, "content", None)
            if isinstance(content, list):
                for block in content:
                    if hasattr(block, "text"):
                        text += block.text
        return text

    async def generate_questions(
        self, topic: str, difficulty: str, count: int
    ) -> list[dict[str, Any]]:
        """Gera questoes cruas para topic/difficulty/count.

        Raises:
            UpstreamFailure: Erro do SDK, resposta vazia ou JSON invalido
        """
        prompt = QUIZ_GENERATION_PROMPT.format(
            topic=topic,
            difficulty=difficulty,
            question_count=count,
        )

        logger.info(f"Gerando {count} questoes com Claude: topic='{topic}', difficulty={difficulty}")

        try:
            text = await self._query_text(prompt)
        except Exception as e:
            logger.error(f"Erro na chamada ao Claude: {e}")
            raise UpstreamFailure(
                "Content generator request failed", details={"reason": str(e)}
            ) from e

        if not text.strip():
            raise UpstreamFailure("Content generator returned an empty response")

        try:
            data = extract_json(text)
        except json.JSONDecodeError as e:
            logger.error(f"Erro ao parsear JSON do Claude: {e}")
            raise UpstreamFailure(
                "Content generator returned malformed JSON", details={"reason": str(e)}
            ) from e

        items = data.get("questions") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise UpstreamFailure("Content generator returned no question list")

        logger.info(f"Resposta do Claude recebida: {len(items)} itens")
        return items
