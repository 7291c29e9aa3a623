from typing import Any, TypedDict

from helpdesk.models import EvaluationResult, RoutingDecision, Ticket


class RoutingState(TypedDict, total=False):
    ticket: Ticket
    directory: Any
    embedding: list[float]
    precedent: dict[str, list]
    evaluations: list[EvaluationResult]
    decision: RoutingDecision
