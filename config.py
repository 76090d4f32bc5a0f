# =============================================================================
# CONFIGURACAO DO QUIZ SERVICE - StudyAI
# =============================================================================
# Configuracao centralizada via variaveis de ambiente
# =============================================================================

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# Modelos aceitos pelo Claude Agent SDK (alias curto)
VALID_MODELS = ("haiku", "sonnet", "opus")

# Politicas quando a geracao por IA falha
FAILURE_MODE_FALLBACK = "fallback"
FAILURE_MODE_FAIL = "fail"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Valor invalido para {name}='{value}', usando {default}")
        return default
    if parsed < minimum:
        logger.warning(f"{name}={parsed} abaixo do minimo {minimum}, usando {default}")
        return default
    return parsed


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Valor invalido para {name}='{value}', usando {default}")
        return default
    return parsed if parsed > 0 else default


@dataclass
class QuizConfig:
    """Configuracao do servico de quiz.

    Attributes:
        ai_enabled: Se False, o caminho de IA vai direto para o fallback
        ai_model: Alias do modelo Claude (haiku, sonnet, opus)
        ai_timeout: Prazo (segundos) para a geracao por IA
        ai_failure_mode: "fallback" (questoes template) ou "fail" (erro)
        default_question_count: Numero de questoes padrao no caminho IA
        max_question_count: Limite superior de questoes pedidas
        access_code_length: Tamanho do access code de quizzes privados
        access_code_retries: Tentativas ao colidir access code
        storage_backend: "memory" ou "agentfs"
        agentfs_id: ID do banco AgentFS
        create_rate_limit: Limite slowapi para criacao via IA
        cors_origins: Origens permitidas
        log_level: Nivel de log raiz
    """

    ai_enabled: bool = True
    ai_model: str = "haiku"
    ai_timeout: float = 60.0
    ai_failure_mode: str = FAILURE_MODE_FALLBACK
    default_question_count: int = 10
    max_question_count: int = 50
    access_code_length: int = 6
    access_code_retries: int = 5
    storage_backend: str = "memory"
    agentfs_id: str = "studyai-quiz"
    create_rate_limit: str = "10/minute"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "QuizConfig":
        """Cria configuracao a partir das variaveis de ambiente."""
        model = os.getenv("QUIZ_AI_MODEL", "haiku").strip().lower()
        if model not in VALID_MODELS:
            logger.warning(f"Modelo invalido '{model}', usando 'haiku' como fallback")
            model = "haiku"

        failure_mode = os.getenv("QUIZ_AI_FAILURE_MODE", FAILURE_MODE_FALLBACK).strip().lower()
        if failure_mode not in (FAILURE_MODE_FALLBACK, FAILURE_MODE_FAIL):
            logger.warning(f"QUIZ_AI_FAILURE_MODE invalido '{failure_mode}', usando 'fallback'")
            failure_mode = FAILURE_MODE_FALLBACK

        backend = os.getenv("QUIZ_STORAGE_BACKEND", "memory").strip().lower()
        if backend not in ("memory", "agentfs"):
            logger.warning(f"QUIZ_STORAGE_BACKEND invalido '{backend}', usando 'memory'")
            backend = "memory"

        max_count = _env_int("QUIZ_MAX_QUESTION_COUNT", 50)
        default_count = min(_env_int("QUIZ_DEFAULT_QUESTION_COUNT", 10), max_count)

        origins_env = os.getenv("CORS_ORIGINS")
        origins = (
            [o.strip() for o in origins_env.split(",") if o.strip()]
            if origins_env
            else list(DEFAULT_CORS_ORIGINS)
        )

        return cls(
            ai_enabled=_env_bool("QUIZ_AI_ENABLED", True),
            ai_model=model,
            ai_timeout=_env_float("QUIZ_AI_TIMEOUT", 60.0),
            ai_failure_mode=failure_mode,
            default_question_count=default_count,
            max_question_count=max_count,
            access_code_length=_env_int("QUIZ_ACCESS_CODE_LENGTH", 6, minimum=4),
            access_code_retries=_env_int("QUIZ_ACCESS_CODE_RETRIES", 5),
            storage_backend=backend,
            agentfs_id=os.getenv("AGENTFS_ID", "studyai-quiz"),
            create_rate_limit=os.getenv("QUIZ_CREATE_RATE_LIMIT", "10/minute"),
            cors_origins=origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def to_dict(self) -> dict:
        """Converte para dicionario agrupado por secao."""
        return {
            "ai": {
                "enabled": self.ai_enabled,
                "model": self.ai_model,
                "timeout": self.ai_timeout,
                "failure_mode": self.ai_failure_mode,
                "default_question_count": self.default_question_count,
                "max_question_count": self.max_question_count,
            },
            "access": {
                "code_length": self.access_code_length,
                "code_retries": self.access_code_retries,
            },
            "storage": {
                "backend": self.storage_backend,
                "agentfs_id": self.agentfs_id,
            },
            "server": {
                "create_rate_limit": self.create_rate_limit,
                "cors_origins": self.cors_origins,
                "log_level": self.log_level,
            },
        }


_config: Optional[QuizConfig] = None


def get_config() -> QuizConfig:
    """Retorna configuracao carregada (carrega na primeira chamada)."""
    global _config
    if _config is None:
        _config = QuizConfig.from_env()
    return _config


def reload_config() -> QuizConfig:
    """Recarrega configuracao das variaveis de ambiente."""
    global _config
    _config = QuizConfig.from_env()
    return _config
