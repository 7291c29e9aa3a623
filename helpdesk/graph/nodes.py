import asyncio

from helpdesk.departments import DepartmentDirectory
from helpdesk.rag import Embedder, VectorStore, ticket_query_text
from helpdesk.routing import Arbiter, DepartmentEvaluator

from .state import RoutingState


async def embed(state: RoutingState, embedder: Embedder) -> RoutingState:
    ticket = state["ticket"]
    vec = await embedder.embed(ticket_query_text(ticket))
    return {"embedding": vec}


def retrieve_precedent(state: RoutingState, store: VectorStore, k: int) -> RoutingState:
    directory: DepartmentDirectory = state["directory"]
    embedding = state.get("embedding") or []
    precedent = {
        dept.id: store.query(embedding, k=k, where={"department_name": dept.name})
        for dept in directory
    }
    return {"precedent": precedent}


async def evaluate_departments(state: RoutingState, evaluator: DepartmentEvaluator) -> RoutingState:
    ticket = state["ticket"]
    directory: DepartmentDirectory = state["directory"]
    precedent = state.get("precedent") or {}
    results = await asyncio.gather(
        *(evaluator.evaluate(dept, ticket, precedent.get(dept.id, [])) for dept in directory)
    )
    return {"evaluations": [r for r in results if r is not None]}


async def arbitrate(state: RoutingState, arbiter: Arbiter) -> RoutingState:
    decision = await arbiter.decide(
        state["ticket"], state.get("evaluations") or [], state["directory"]
    )
    return {"decision": decision}
