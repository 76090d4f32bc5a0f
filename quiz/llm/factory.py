"""LLM Client Factory - Abstracao para criacao de opcoes do Claude Agent SDK."""

from typing import Optional

from claude_agent_sdk import ClaudeAgentOptions

from ..prompts import QUIZ_SYSTEM_PROMPT


class LLMClientFactory:
    """Factory para criar ClaudeAgentOptions com configuracao consistente.

    Centraliza a criacao das opcoes usadas na geracao de quiz:
    - System prompt de gerador JSON
    - Selecao de modelo (haiku, sonnet, opus)
    - Sem ferramentas e com um unico turno (resposta direta)

    Example:
        >>> factory = LLMClientFactory(model="haiku")
        >>> options = factory.create_generation_options()
        >>> async for message in query(prompt=prompt, options=options):
        ...     ...
    """

    DEFAULT_MODEL = "haiku"  # Rapido e economico

    def __init__(self, model: str = DEFAULT_MODEL):
        self.model = model

    def create_options(
        self,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ClaudeAgentOptions:
        """Cria opcoes genericas para uma chamada de geracao.

        Args:
            system_prompt: Prompt de sistema customizado
            model: Sobrescreve o modelo configurado na factory

        Returns:
            ClaudeAgentOptions configurado
        """
        return ClaudeAgentOptions(
            model=model or self.model,
            system_prompt=system_prompt or QUIZ_SYSTEM_PROMPT,
            allowed_tools=[],
            max_turns=1,
        )

    def create_generation_options(self) -> ClaudeAgentOptions:
        """Opcoes para geracao de questoes com o modelo configurado."""
        return self.create_options(system_prompt=QUIZ_SYSTEM_PROMPT)
