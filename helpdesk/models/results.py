from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .tickets import Ticket, normalize_priority

MAX_TAGS = 3
DRAFT_STATUSES = ("open", "in_progress", "pending", "resolved")

DecisionSource = Literal["arbiter", "fallback", "default", "error"]


def clamp_score(v: Any) -> int:
    try:
        x = float(v)
    except (TypeError, ValueError):
        return 0
    if x != x:
        return 0
    return int(round(min(100.0, max(0.0, x))))


def clean_tags(tags: Any, limit: int = MAX_TAGS) -> list[str]:
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, (list, tuple)):
        return []
    out = [str(t).strip() for t in tags if t is not None and str(t).strip()]
    return out[:limit]


class EvaluationResult(BaseModel):
    department_id: str
    department_name: str
    interest_level: int = Field(ge=0, le=100)
    confidence_score: int = Field(ge=0, le=100)
    rationale: str = ""
    suggested_priority: str = "medium"
    recommended_tags: list[str] = Field(default_factory=list)
    estimated_resolution_time: str = "Unknown"

    @field_validator("interest_level", "confidence_score", mode="before")
    @classmethod
    def _score(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("suggested_priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> str:
        return normalize_priority(v)

    @field_validator("recommended_tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> list[str]:
        return clean_tags(v)

    @property
    def score(self) -> int:
        return self.interest_level * self.confidence_score


class RoutingDecision(BaseModel):
    assigned_department: str
    department_id: str
    reason: str
    confidence: int = Field(ge=0, le=100)
    priority: str = "medium"
    tags: list[str] = Field(default_factory=list)
    estimated_resolution_time: str = "Unknown"
    source: DecisionSource = "arbiter"

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> str:
        return normalize_priority(v)


class RoutingResult(BaseModel):
    ticket: Ticket
    evaluations: list[EvaluationResult] = Field(default_factory=list)
    decision: RoutingDecision


class DraftResponse(BaseModel):
    text: str
    confidence: int = Field(ge=0, le=100)
    reasoning: str = ""
    suggested_status: str = "in_progress"
    suggested_tags: list[str] = Field(default_factory=list)
    attempts: int = 0

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("suggested_status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> str:
        s = str(v or "").strip().lower().replace("-", "_").replace(" ", "_")
        return s if s in DRAFT_STATUSES else "in_progress"

    @field_validator("suggested_tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> list[str]:
        return clean_tags(v)


class ValidationVerdict(BaseModel):
    is_valid: bool
    feedback: str = ""
    improved_text: str | None = None


class DetectionResult(BaseModel):
    detected: bool = False
    rationale: str = ""


class PatternReport(BaseModel):
    micro_summaries: list[str]
    macro_summary: str
    repetition: DetectionResult
    misuse: DetectionResult
    department_name: str
