"""Unit tests for the routing graph and the TicketRouter entry point."""

import time

import pytest
from pydantic import ValidationError

from helpdesk.graph import TicketRouter
from helpdesk.rag import index_tickets
from helpdesk.rag.precedent import NO_PRECEDENT
from helpdesk.routing import Arbiter, DepartmentEvaluator
from tests.conftest import HR_ID, IT_ID, ScriptedLLM, as_json, evaluation_json

SCORES = {
    "IT Department Agent": (90, 80),
    "HR Department Agent": (20, 95),
    "Facilities Department Agent": (10, 50),
}


def by_department(messages):
    system = messages[0]["content"]
    for marker, (interest, confidence) in SCORES.items():
        if marker in system:
            return evaluation_json(interest, confidence, f"{marker} view", recommended_tags=["routed"])
    raise AssertionError("unknown department prompt")


def _router(store, embedder, evaluator_llm, arbiter_llm) -> TicketRouter:
    return TicketRouter(
        store,
        embedder=embedder,
        evaluator=DepartmentEvaluator(backend=evaluator_llm),
        arbiter=Arbiter(backend=arbiter_llm),
        default_department="IT Support",
    )


class TestTicketRouter:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_arbiter_decision_end_to_end(self, store, embedder, departments, ticket):
        arbiter_llm = ScriptedLLM(
            as_json(assigned_department="IT Support", reason="VPN is IT.", confidence=91, priority="high")
        )
        router = _router(store, embedder, ScriptedLLM(by_department), arbiter_llm)
        result = await router.route(ticket, departments)

        assert len(result.evaluations) == 3
        assert result.decision.source == "arbiter"
        assert result.decision.department_id == IT_ID
        assert result.decision.confidence == 91
        assert result.ticket.id == ticket.id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_arbiter_outage_uses_score_fallback(self, store, embedder, departments, ticket):
        router = _router(store, embedder, ScriptedLLM(by_department), ScriptedLLM(ConnectionError("down")))
        result = await router.route(ticket, departments)
        assert result.decision.assigned_department == "IT Support"
        assert result.decision.confidence == 72
        assert result.decision.source == "fallback"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_all_evaluators_failing(self, store, embedder, departments, ticket):
        arbiter_llm = ScriptedLLM(as_json(assigned_department="HR"))
        router = _router(store, embedder, ScriptedLLM("not json at all"), arbiter_llm)
        result = await router.route(ticket, departments)

        assert result.evaluations == []
        assert result.decision.department_id == IT_ID
        assert result.decision.confidence == 30
        assert result.decision.tags == ["auto-assigned", "requires-review"]
        assert arbiter_llm.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_evaluators_run_concurrently(self, store, embedder, departments, ticket):
        evaluator_llm = ScriptedLLM(by_department, delay=0.3)
        router = _router(store, embedder, evaluator_llm, ScriptedLLM(TimeoutError()))
        t0 = time.perf_counter()
        result = await router.route(ticket, departments)
        elapsed = time.perf_counter() - t0

        assert len(evaluator_llm.calls) == 3
        assert len(result.evaluations) == 3
        assert elapsed < 0.8

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_precedent_is_scoped_per_department(self, store, embedder, departments, ticket, ticket_factory):
        await index_tickets(
            [ticket_factory(status="resolved", title=f"VPN outage {i}") for i in range(3)],
            store,
            embedder,
        )
        evaluator_llm = ScriptedLLM(by_department)
        router = _router(store, embedder, evaluator_llm, ScriptedLLM(TimeoutError()))
        await router.route(ticket, departments)

        prompts = {
            call[0]["content"].split("\n")[0]: call[1]["content"] for call in evaluator_llm.calls
        }
        it_prompt = next(p for s, p in prompts.items() if "IT Department Agent" in s)
        hr_prompt = next(p for s, p in prompts.items() if "HR Department Agent" in s)
        assert it_prompt.count("Similar Ticket ") == 3
        assert NO_PRECEDENT in hr_prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_remember_indexes_routed_ticket(self, store, embedder, departments, ticket):
        arbiter_llm = ScriptedLLM(as_json(assigned_department="HR", reason="Payroll.", confidence=60))
        router = _router(store, embedder, ScriptedLLM(by_department), arbiter_llm)
        await router.route(ticket, departments, remember=True)

        record = store.get(ticket.id)
        assert record is not None
        assert record.metadata["department_name"] == "HR"
        assert record.metadata["department_id"] == HR_ID
        assert record.has_vector

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pipeline_error_yields_default_decision(self, store, embedder, departments, ticket, monkeypatch):
        def broken_query(*args, **kwargs):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(store, "query", broken_query)
        router = _router(store, embedder, ScriptedLLM(by_department), ScriptedLLM(TimeoutError()))
        result = await router.route(ticket, departments)

        assert result.decision.source == "error"
        assert result.decision.department_id == IT_ID
        assert result.decision.confidence == 30
        assert result.decision.tags == ["error-fallback", "requires-review"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_error_decision_is_not_remembered(self, store, embedder, departments, ticket, monkeypatch):
        def broken_query(*args, **kwargs):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(store, "query", broken_query)
        router = _router(store, embedder, ScriptedLLM(by_department), ScriptedLLM(TimeoutError()))
        result = await router.route(ticket, departments, remember=True)

        assert result.decision.source == "error"
        assert store.get(ticket.id) is None
        assert len(store) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_accepts_plain_dicts(self, store, embedder):
        router = _router(store, embedder, ScriptedLLM(by_department), ScriptedLLM(TimeoutError()))
        result = await router.route(
            {"id": "T-9", "title": "Heating broken", "description": "Room 4 is freezing."},
            [{"id": IT_ID, "name": "IT Support"}, {"id": HR_ID, "name": "HR"}],
        )
        assert result.decision.department_id in {IT_ID, HR_ID}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_input_raises(self, store, embedder, departments):
        router = _router(store, embedder, ScriptedLLM(by_department), ScriptedLLM(TimeoutError()))
        with pytest.raises(ValidationError):
            await router.route({"id": "T-1", "title": "  ", "description": "x"}, departments)
        with pytest.raises(ValueError):
            await router.route({"id": "T-1", "title": "Help", "description": "x"}, [])
