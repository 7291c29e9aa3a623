from .contexts import EVALUATOR_CONTEXTS, MISUSE_FOCUS, RESPONSE_GUIDELINES, lookup
from .directory import UNKNOWN_DEPARTMENT, DepartmentDirectory, department_context

__all__ = [
    "EVALUATOR_CONTEXTS",
    "MISUSE_FOCUS",
    "RESPONSE_GUIDELINES",
    "UNKNOWN_DEPARTMENT",
    "DepartmentDirectory",
    "department_context",
    "lookup",
]
