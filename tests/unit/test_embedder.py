"""Unit tests for the embedding generator and its offline projection."""

import asyncio
import math

import pytest

from helpdesk.rag import Embedder, fallback_embedding, ticket_document, ticket_query_text
from helpdesk.rag.embedder import text_hash32
from tests.conftest import StaticEmbeddings


class SlowEmbeddings:
    async def embed(self, text):
        await asyncio.sleep(5)
        return [1.0] * 4


class TestFallbackEmbedding:

    @pytest.mark.unit
    def test_same_text_same_vector(self):
        assert fallback_embedding("printer on fire", 32) == fallback_embedding("printer on fire", 32)

    @pytest.mark.unit
    def test_different_texts_differ(self):
        assert fallback_embedding("printer on fire", 32) != fallback_embedding("printer on ice", 32)

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["a", "VPN drops", "x" * 2000, "çà ü 日本"])
    def test_unit_norm(self, text):
        vec = fallback_embedding(text, 64)
        assert len(vec) == 64
        assert math.isclose(math.sqrt(sum(x * x for x in vec)), 1.0, rel_tol=1e-9)

    @pytest.mark.unit
    def test_default_dimension_comes_from_config(self):
        import config

        assert len(fallback_embedding("hello")) == config.EMBEDDING_DIM

    @pytest.mark.unit
    def test_hash_wraps_to_signed_32_bits(self):
        assert text_hash32("a") == 97
        assert text_hash32("") == 0
        h = text_hash32("a much longer string that overflows many times over")
        assert -(2**31) <= h < 2**31


class TestEmbedder:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_service_vector_is_returned(self):
        backend = StaticEmbeddings(vector=[0.5, 0.5, 0.5, 0.5])
        vec = await Embedder(backend=backend, dim=4).embed("hello")
        assert vec == [0.5, 0.5, 0.5, 0.5]
        assert backend.calls == ["hello"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_service_failure_uses_fallback(self):
        backend = StaticEmbeddings(error=ConnectionError("refused"))
        vec = await Embedder(backend=backend, dim=8).embed("hello")
        assert vec == fallback_embedding("hello", 8)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_wrong_length_uses_fallback(self):
        backend = StaticEmbeddings(vector=[1.0, 2.0])
        vec = await Embedder(backend=backend, dim=8).embed("hello")
        assert vec == fallback_embedding("hello", 8)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_finite_uses_fallback(self):
        backend = StaticEmbeddings(vector=[1.0, float("nan"), 0.0, 0.0])
        vec = await Embedder(backend=backend, dim=4).embed("hello")
        assert vec == fallback_embedding("hello", 4)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_uses_fallback(self):
        vec = await Embedder(backend=SlowEmbeddings(), dim=4, timeout=0.05).embed("hello")
        assert vec == fallback_embedding("hello", 4)

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None])
    async def test_empty_text_is_rejected(self, text):
        with pytest.raises(ValueError):
            await Embedder(backend=StaticEmbeddings(vector=[1.0]), dim=1).embed(text)


class TestTicketText:

    @pytest.mark.unit
    def test_document_and_query_text(self, ticket):
        doc = ticket_document(ticket)
        assert doc.startswith("Title: VPN keeps disconnecting\nDescription: ")
        assert "Category: Network" in doc
        assert "Priority: high" in doc
        assert ticket_query_text(ticket) == f"{ticket.title} {ticket.description}"
