"""Quiz Errors - Taxonomia de erros do motor de quiz.

Todo erro carrega um `kind` estavel (usado pelo frontend) e uma mensagem
legivel. O router converte qualquer QuizError em JSON com o status HTTP
definido em `status_code`.
"""

from typing import Any, Optional


class QuizError(Exception):
    """Erro base do modulo de quiz."""

    kind = "quiz_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Converte para payload de resposta."""
        return {
            "error": self.kind,
            "message": self.message,
            "details": self.details,
        }


class QuizValidationError(QuizError):
    """Entrada com formato invalido (questao, opcoes, campos obrigatorios)."""

    kind = "validation_error"
    status_code = 400


class QuizNotFoundError(QuizError):
    """Quiz ou access code nao encontrado."""

    kind = "not_found"
    status_code = 404


class QuizForbiddenError(QuizError):
    """Falha de autorizacao (nao e o criador, access code errado...)."""

    kind = "forbidden"
    status_code = 403


class InvalidStateError(QuizError):
    """Operacao invalida para o estado atual do quiz."""

    kind = "invalid_state"
    status_code = 409

    def __init__(
        self,
        message: str,
        current: Optional[str] = None,
        expected: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if current is not None:
            merged["current"] = current
        if expected is not None:
            merged["expected"] = expected
        super().__init__(message, merged)


class UpstreamFailure(QuizError):
    """Falha do gerador de conteudo ou do store."""

    kind = "upstream_failure"
    status_code = 502


class DuplicateAccessCodeError(UpstreamFailure):
    """Access code ja usado por outro quiz privado."""

    kind = "duplicate_access_code"
    status_code = 409
