# =============================================================================
# CONFTEST - Pytest Fixtures Globais
# =============================================================================
# Ambiente de teste isolado: armazenamento em memoria, IA desabilitada por
# padrao e rate limit alto para nao interferir nos testes de endpoint
# =============================================================================

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar root ao path
sys.path.insert(0, str(Path(__file__).parent))


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_env():
    """Configura variaveis de ambiente e recarrega a config."""
    env_vars = {
        "ANTHROPIC_API_KEY": "test-key-123",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "ERROR",
        "QUIZ_STORAGE_BACKEND": "memory",
        "QUIZ_AI_ENABLED": "true",
        "QUIZ_AI_FAILURE_MODE": "fallback",
        "QUIZ_AI_TIMEOUT": "2",
        "QUIZ_CREATE_RATE_LIMIT": "1000/minute",
    }
    with patch.dict(os.environ, env_vars):
        from config import reload_config

        reload_config()
        yield
    from config import reload_config

    reload_config()


@pytest.fixture
def clean_env():
    """Limpa variaveis de ambiente para testes isolados."""
    with patch.dict(os.environ, {}, clear=True):
        yield
