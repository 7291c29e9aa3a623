from .embedder import Embedder, fallback_embedding, ticket_document, ticket_query_text
from .indexer import index_ticket, index_tickets
from .vector_store import EmbeddingRecord, VectorStore, cosine_similarity

__all__ = [
    "Embedder",
    "EmbeddingRecord",
    "VectorStore",
    "cosine_similarity",
    "fallback_embedding",
    "index_ticket",
    "index_tickets",
    "ticket_document",
    "ticket_query_text",
]
