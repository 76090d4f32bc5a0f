"""
StudyAI Quiz Server

FastAPI server with:
- Quizzes gerados por IA (Claude Agent SDK) ou manuais
- Quizzes privados com access code
- Submissao com pontuacao e leaderboard
- Eventos em tempo real por quiz (SSE)
- Rate limiting, CORS
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

import app_state
from config import get_config
from quiz.router import limiter, register_exception_handlers
from quiz.router import router as quiz_router

# .env nao sobrescreve variaveis ja definidas no ambiente
load_dotenv()
config = get_config()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# FASTAPI APP
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    logger.info("Starting StudyAI Quiz...")
    await app_state.startup(app)
    yield
    await app_state.cleanup(app)
    logger.info("StudyAI Quiz stopped")


app = FastAPI(
    title="StudyAI Quiz",
    description="Quiz backend powered by Claude Agent SDK",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)
app.include_router(quiz_router)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/")
async def root():
    """Health check."""
    return {
        "status": "ok",
        "message": "StudyAI Quiz API",
        "engine_ready": getattr(app.state, "quiz_engine", None) is not None,
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    current = get_config()
    return {
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "development"),
        "storage": current.storage_backend,
        "ai": {
            "enabled": current.ai_enabled,
            "model": current.ai_model,
            "failure_mode": current.ai_failure_mode,
        },
        "rate_limiter": "slowapi",
    }


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8001")))
