"""Quiz Storage - Persistência de documentos de quiz."""

from .quiz_store import MemoryAgentFS, MemoryKV, QuizStore

__all__ = ["QuizStore", "MemoryKV", "MemoryAgentFS"]
