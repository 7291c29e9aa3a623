from .drafter import ResponseDrafter, fallback_draft
from .validator import ResponseValidator

__all__ = ["ResponseDrafter", "ResponseValidator", "fallback_draft"]
