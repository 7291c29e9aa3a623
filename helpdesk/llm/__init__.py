from .agent import complete, extract_json, parse_response
from .backend import get_embedding_backend, get_llm_backend, reset_llm_backend
from .protocol import EmbeddingBackend, LLMBackend

__all__ = [
    "EmbeddingBackend",
    "LLMBackend",
    "complete",
    "extract_json",
    "get_embedding_backend",
    "get_llm_backend",
    "parse_response",
    "reset_llm_backend",
]
