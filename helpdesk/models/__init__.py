from .results import (
    DetectionResult,
    DraftResponse,
    EvaluationResult,
    PatternReport,
    RoutingDecision,
    RoutingResult,
    ValidationVerdict,
)
from .tickets import PRIORITIES, DepartmentProfile, Ticket, normalize_priority

__all__ = [
    "PRIORITIES",
    "DepartmentProfile",
    "DetectionResult",
    "DraftResponse",
    "EvaluationResult",
    "PatternReport",
    "RoutingDecision",
    "RoutingResult",
    "Ticket",
    "ValidationVerdict",
    "normalize_priority",
]
