"""Quiz Prompts - Templates de prompts."""

from .templates import (
    DEFAULT_EXPLANATION,
    FALLBACK_EXPLANATION_TEMPLATE,
    FALLBACK_OPTION_TEMPLATES,
    FALLBACK_QUESTION_TEMPLATE,
    QUIZ_GENERATION_PROMPT,
    QUIZ_SYSTEM_PROMPT,
)

__all__ = [
    "QUIZ_SYSTEM_PROMPT",
    "QUIZ_GENERATION_PROMPT",
    "FALLBACK_QUESTION_TEMPLATE",
    "FALLBACK_OPTION_TEMPLATES",
    "FALLBACK_EXPLANATION_TEMPLATE",
    "DEFAULT_EXPLANATION",
]
