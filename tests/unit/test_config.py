# =============================================================================
# TESTES - Config Module
# =============================================================================
# Testes unitários para configuração centralizada
# =============================================================================

import os
from unittest.mock import patch


class TestQuizConfigDefaults:
    """Testes para valores padrão."""

    def test_from_env_defaults(self, clean_env):
        """Verifica valores padrão do from_env."""
        from config import DEFAULT_CORS_ORIGINS, QuizConfig

        config = QuizConfig.from_env()

        assert config.ai_enabled is True
        assert config.ai_model == "haiku"
        assert config.ai_timeout == 60.0
        assert config.ai_failure_mode == "fallback"
        assert config.default_question_count == 10
        assert config.max_question_count == 50
        assert config.access_code_length == 6
        assert config.access_code_retries == 5
        assert config.storage_backend == "memory"
        assert config.create_rate_limit == "10/minute"
        assert config.cors_origins == DEFAULT_CORS_ORIGINS
        assert config.log_level == "INFO"


class TestQuizConfigFromEnv:
    """Testes para leitura de variáveis de ambiente."""

    def test_custom_values(self, clean_env):
        from config import QuizConfig

        env = {
            "QUIZ_AI_ENABLED": "false",
            "QUIZ_AI_MODEL": "Sonnet",
            "QUIZ_AI_TIMEOUT": "15.5",
            "QUIZ_AI_FAILURE_MODE": "fail",
            "QUIZ_DEFAULT_QUESTION_COUNT": "8",
            "QUIZ_ACCESS_CODE_LENGTH": "8",
            "QUIZ_STORAGE_BACKEND": "agentfs",
            "AGENTFS_ID": "quiz-db",
            "CORS_ORIGINS": "http://a.test, http://b.test",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            config = QuizConfig.from_env()

        assert config.ai_enabled is False
        assert config.ai_model == "sonnet"
        assert config.ai_timeout == 15.5
        assert config.ai_failure_mode == "fail"
        assert config.default_question_count == 8
        assert config.access_code_length == 8
        assert config.storage_backend == "agentfs"
        assert config.agentfs_id == "quiz-db"
        assert config.cors_origins == ["http://a.test", "http://b.test"]
        assert config.log_level == "DEBUG"

    def test_invalid_model_falls_back(self, clean_env):
        from config import QuizConfig

        with patch.dict(os.environ, {"QUIZ_AI_MODEL": "gpt-4"}):
            assert QuizConfig.from_env().ai_model == "haiku"

    def test_invalid_numbers_fall_back(self, clean_env):
        from config import QuizConfig

        env = {
            "QUIZ_AI_TIMEOUT": "soon",
            "QUIZ_MAX_QUESTION_COUNT": "many",
            "QUIZ_ACCESS_CODE_LENGTH": "2",
        }
        with patch.dict(os.environ, env):
            config = QuizConfig.from_env()

        assert config.ai_timeout == 60.0
        assert config.max_question_count == 50
        assert config.access_code_length == 6

    def test_invalid_enums_fall_back(self, clean_env):
        from config import QuizConfig

        env = {"QUIZ_AI_FAILURE_MODE": "explode", "QUIZ_STORAGE_BACKEND": "redis"}
        with patch.dict(os.environ, env):
            config = QuizConfig.from_env()

        assert config.ai_failure_mode == "fallback"
        assert config.storage_backend == "memory"

    def test_default_count_capped_by_max(self, clean_env):
        from config import QuizConfig

        env = {"QUIZ_DEFAULT_QUESTION_COUNT": "30", "QUIZ_MAX_QUESTION_COUNT": "20"}
        with patch.dict(os.environ, env):
            config = QuizConfig.from_env()

        assert config.default_question_count == 20


class TestQuizConfigHelpers:
    """Testes para to_dict e cache."""

    def test_to_dict_sections(self):
        from config import QuizConfig

        data = QuizConfig().to_dict()

        assert set(data) == {"ai", "access", "storage", "server"}
        assert data["ai"]["model"] == "haiku"
        assert data["access"]["code_length"] == 6

    def test_reload_config(self):
        from config import get_config, reload_config

        with patch.dict(os.environ, {"QUIZ_AI_MODEL": "opus"}):
            reloaded = reload_config()

        assert reloaded.ai_model == "opus"
        assert get_config() is reloaded
