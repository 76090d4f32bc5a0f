"""Quiz LLM - Geradores de conteudo."""

from .factory import LLMClientFactory
from .fallback import FallbackQuestionGenerator
from .generator import (
    ClaudeQuestionGenerator,
    ContentGenerator,
    extract_json,
    normalize_generated_questions,
)

__all__ = [
    "LLMClientFactory",
    "ContentGenerator",
    "ClaudeQuestionGenerator",
    "FallbackQuestionGenerator",
    "extract_json",
    "normalize_generated_questions",
]
