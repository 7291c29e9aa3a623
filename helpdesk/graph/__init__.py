from .pipeline import TicketRouter, build_routing_graph, run_routing
from .state import RoutingState

__all__ = ["RoutingState", "TicketRouter", "build_routing_graph", "run_routing"]
