import os

_backend = None
_embedding_backend = None


def reset_llm_backend():
    global _backend, _embedding_backend
    _backend = None
    _embedding_backend = None


def get_llm_backend():
    global _backend
    if _backend is not None:
        return _backend
    name = os.getenv("LLM_BACKEND", "openai").strip().lower()
    if name == "openai":
        from .backends.openai import OpenAIBackend
        _backend = OpenAIBackend()
    elif name == "groq":
        from .backends.groq import GroqBackend
        _backend = GroqBackend()
    elif name == "llama_cpp":
        from .backends.llama_cpp import LlamaCppBackend
        _backend = LlamaCppBackend()
    else:
        raise ValueError(f"Unknown LLM_BACKEND: {name}")
    return _backend


def get_embedding_backend():
    global _embedding_backend
    if _embedding_backend is not None:
        return _embedding_backend
    name = os.getenv("EMBEDDING_BACKEND", "openai").strip().lower()
    if name == "openai":
        from .backends.openai import OpenAIBackend
        _embedding_backend = OpenAIBackend()
    elif name == "sentence_transformers":
        from .backends.sentence_transformers import SentenceTransformersBackend
        _embedding_backend = SentenceTransformersBackend()
    else:
        raise ValueError(f"Unknown EMBEDDING_BACKEND: {name}")
    return _embedding_backend
