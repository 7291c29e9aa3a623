from .logger import (
    log_decision,
    log_draft,
    log_evaluation,
    log_fallback,
    log_pattern_report,
    log_result,
    log_usage,
)

__all__ = [
    "log_decision",
    "log_draft",
    "log_evaluation",
    "log_fallback",
    "log_pattern_report",
    "log_result",
    "log_usage",
]
