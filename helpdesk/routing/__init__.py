from .arbiter import Arbiter, default_decision, fallback_decision, finalize_decision, pick_best
from .evaluator import DepartmentEvaluator

__all__ = [
    "Arbiter",
    "DepartmentEvaluator",
    "default_decision",
    "fallback_decision",
    "finalize_decision",
    "pick_best",
]
