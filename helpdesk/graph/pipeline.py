import logging
import time
from typing import Iterable

from langgraph.graph import END, StateGraph

import config
from helpdesk.departments import DepartmentDirectory
from helpdesk.logging_utils import log_decision
from helpdesk.models import DepartmentProfile, RoutingResult, Ticket
from helpdesk.rag import Embedder, VectorStore, index_ticket
from helpdesk.routing import Arbiter, DepartmentEvaluator, default_decision, finalize_decision

from . import nodes
from .state import RoutingState

logger = logging.getLogger(__name__)


def build_routing_graph(
    store: VectorStore,
    embedder: Embedder,
    evaluator: DepartmentEvaluator,
    arbiter: Arbiter,
    precedent_k: int | None = None,
):
    k = precedent_k or config.EVALUATOR_PRECEDENT_K

    async def _embed(state: RoutingState) -> RoutingState:
        return await nodes.embed(state, embedder)

    def _retrieve(state: RoutingState) -> RoutingState:
        return nodes.retrieve_precedent(state, store, k)

    async def _evaluate(state: RoutingState) -> RoutingState:
        return await nodes.evaluate_departments(state, evaluator)

    async def _arbitrate(state: RoutingState) -> RoutingState:
        return await nodes.arbitrate(state, arbiter)

    builder = StateGraph(RoutingState)
    builder.add_node("embed", _embed)
    builder.add_node("retrieve_precedent", _retrieve)
    builder.add_node("evaluate_departments", _evaluate)
    builder.add_node("arbitrate", _arbitrate)

    builder.set_entry_point("embed")
    builder.add_edge("embed", "retrieve_precedent")
    builder.add_edge("retrieve_precedent", "evaluate_departments")
    builder.add_edge("evaluate_departments", "arbitrate")
    builder.add_edge("arbitrate", END)
    return builder.compile()


async def run_routing(compiled, ticket: Ticket, directory: DepartmentDirectory) -> RoutingResult:
    t0 = time.perf_counter()
    values = await compiled.ainvoke({"ticket": ticket, "directory": directory})
    elapsed = time.perf_counter() - t0
    decision = values["decision"]
    evaluations = values.get("evaluations") or []
    log_decision(
        source=decision.source,
        department=decision.assigned_department,
        confidence=decision.confidence,
        elapsed_sec=elapsed,
        n_evaluations=len(evaluations),
        ticket_id=ticket.id,
    )
    return RoutingResult(ticket=ticket, evaluations=evaluations, decision=decision)


class TicketRouter:
    """Routing entry point: ticket + caller's departments -> RoutingResult.

    Raises only for invalid input (blank ticket fields, no departments, no well-formed
    department id). Any other failure yields a low-confidence decision for the default
    department, which is never remembered as precedent.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder | None = None,
        evaluator: DepartmentEvaluator | None = None,
        arbiter: Arbiter | None = None,
        precedent_k: int | None = None,
        default_department: str | None = None,
    ):
        self.store = store
        self.embedder = embedder or Embedder()
        self.evaluator = evaluator or DepartmentEvaluator()
        self.arbiter = arbiter or Arbiter()
        self.default_department = default_department
        self.graph = build_routing_graph(
            store, self.embedder, self.evaluator, self.arbiter, precedent_k=precedent_k
        )

    async def route(
        self,
        ticket: Ticket | dict,
        departments: Iterable[DepartmentProfile | dict],
        *,
        remember: bool = False,
    ) -> RoutingResult:
        if not isinstance(ticket, Ticket):
            ticket = Ticket.model_validate(ticket)
        directory = DepartmentDirectory(departments, default_name=self.default_department)
        try:
            result = await run_routing(self.graph, ticket, directory)
        except Exception:
            logger.exception("Routing failed for ticket %s; using default department", ticket.label)
            decision = default_decision(
                ticket,
                directory,
                reason=f"An error occurred during the routing process. Defaulting to {directory.default.name}.",
                tags=["error-fallback", "requires-review"],
                source="error",
            )
            result = RoutingResult(ticket=ticket, decision=finalize_decision(decision, directory))
        if remember and result.decision.source != "error":
            routed = ticket.model_copy(
                update={
                    "department": result.decision.assigned_department,
                    "department_id": result.decision.department_id,
                }
            )
            await index_ticket(routed, self.store, self.embedder)
        return result
