"""Pytest configuration and fixtures."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from helpdesk.departments import DepartmentDirectory
from helpdesk.models import DepartmentProfile, Ticket
from helpdesk.rag import Embedder, VectorStore

IT_ID = "11111111-1111-4111-8111-111111111111"
HR_ID = "22222222-2222-4222-8222-222222222222"
FACILITIES_ID = "33333333-3333-4333-8333-333333333333"


class ScriptedLLM:
    """Chat backend that replays canned replies in call order.

    A reply is a string, an exception instance to raise, or a callable taking
    the message list and returning either of those. Once the script runs out
    the last reply repeats.
    """

    def __init__(self, *replies, delay: float = 0.0):
        self.replies = list(replies)
        self.delay = delay
        self.calls: list[list[dict]] = []

    async def chat_completion(self, messages, *, max_tokens=512, temperature=0.3, response_format=None):
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.replies:
            return "", 0, 0
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if callable(reply) and not isinstance(reply, BaseException):
            reply = reply(messages)
        if isinstance(reply, BaseException):
            raise reply
        return reply, 12, 7

    def prompts(self, role: str = "user") -> list[str]:
        return [m["content"] for call in self.calls for m in call if m["role"] == role]


class StaticEmbeddings:
    """Embedding backend returning one fixed vector, or raising `error`."""

    def __init__(self, vector=None, error: Exception | None = None):
        self.vector = vector
        self.error = error
        self.calls: list[str] = []

    async def embed(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.vector


def as_json(**payload) -> str:
    return json.dumps(payload)


def evaluation_json(interest, confidence, rationale="Looks like ours.", **extra) -> str:
    return as_json(
        interest_level=interest,
        confidence_score=confidence,
        rationale=rationale,
        **extra,
    )


@pytest.fixture
def departments() -> list[DepartmentProfile]:
    return [
        DepartmentProfile(id=IT_ID, name="IT Support"),
        DepartmentProfile(id=HR_ID, name="HR"),
        DepartmentProfile(id=FACILITIES_ID, name="Facilities"),
    ]


@pytest.fixture
def directory(departments) -> DepartmentDirectory:
    return DepartmentDirectory(departments, default_name="IT Support")


@pytest.fixture
def ticket() -> Ticket:
    return Ticket(
        id="TKT-001",
        ticket_number="HD-1001",
        title="VPN keeps disconnecting",
        description="Since this morning my VPN drops every five minutes and I lose my remote desktop session.",
        category="Network",
        priority="High",
        requester="Sam Rivera",
    )


@pytest.fixture
def ticket_factory():
    """Factory for creating test tickets."""
    counter = {"n": 0}

    def create_ticket(**kwargs) -> Ticket:
        counter["n"] += 1
        defaults = {
            "id": f"HIST-{counter['n']:03d}",
            "title": f"Printer jam on floor {counter['n']}",
            "description": "The shared printer shows a paper jam error that will not clear.",
            "category": "Hardware",
            "priority": "medium",
            "department": "IT Support",
            "department_id": IT_ID,
            "created_at": datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        }
        return Ticket(**{**defaults, **kwargs})

    return create_ticket


@pytest.fixture
def embedder() -> Embedder:
    """Embedder whose service is always down, so every vector is the deterministic fallback."""
    return Embedder(backend=StaticEmbeddings(error=ConnectionError("offline")), dim=16, timeout=1)


@pytest.fixture
def store(tmp_path) -> VectorStore:
    return VectorStore(path=tmp_path / "store")
