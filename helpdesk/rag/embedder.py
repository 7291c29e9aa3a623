import asyncio
import logging

import numpy as np

import config
from helpdesk.llm import EmbeddingBackend, get_embedding_backend
from helpdesk.logging_utils import log_fallback
from helpdesk.models import Ticket

logger = logging.getLogger(__name__)

_LCG_A = 1664525
_LCG_C = 1013904223
_LCG_M = 2**32


def text_hash32(text: str) -> int:
    """31-based rolling string hash wrapped to a signed 32-bit int."""
    h = 0
    for ch in text:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    return h - _LCG_M if h >= 2**31 else h


def fallback_embedding(text: str, dim: int | None = None) -> list[float]:
    """Deterministic unit vector derived from the text alone; no network involved."""
    dim = dim or config.EMBEDDING_DIM
    value = text_hash32(text)
    coords = np.empty(dim, dtype=np.float64)
    for i in range(dim):
        value = (value * _LCG_A + _LCG_C) % _LCG_M
        coords[i] = value / 2**31 - 1
    norm = np.linalg.norm(coords)
    if norm == 0:
        coords[0] = 1.0
        norm = 1.0
    return (coords / norm).tolist()


def ticket_document(ticket: Ticket) -> str:
    return (
        f"Title: {ticket.title}\n"
        f"Description: {ticket.description}\n"
        f"Category: {ticket.category or 'Uncategorized'}\n"
        f"Priority: {ticket.priority}\n"
        f"Status: {ticket.status}"
    )


def ticket_query_text(ticket: Ticket) -> str:
    return f"{ticket.title} {ticket.description}"


class Embedder:
    def __init__(
        self,
        backend: EmbeddingBackend | None = None,
        dim: int | None = None,
        timeout: float | None = None,
    ):
        self._backend = backend
        self.dim = dim or config.EMBEDDING_DIM
        self.timeout = timeout if timeout is not None else config.LLM_CALL_TIMEOUT_SEC

    @property
    def backend(self) -> EmbeddingBackend:
        if self._backend is None:
            self._backend = get_embedding_backend()
        return self._backend

    def _valid(self, vec) -> bool:
        if vec is None or len(vec) != self.dim:
            return False
        return bool(np.all(np.isfinite(np.asarray(vec, dtype=np.float64))))

    async def embed(self, text: str) -> list[float]:
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Cannot embed empty text.")
        try:
            vec = await asyncio.wait_for(self.backend.embed(text), timeout=self.timeout)
            if self._valid(vec):
                return [float(x) for x in vec]
            reason = f"malformed embedding (len={len(vec) if vec is not None else 0}, expected {self.dim})"
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
        logger.warning("Embedding service unavailable, using fallback projection: %s", reason)
        log_fallback("embed", reason)
        return fallback_embedding(text, self.dim)
