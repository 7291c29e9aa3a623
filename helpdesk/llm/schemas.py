from pydantic import BaseModel, ConfigDict, Field


class DepartmentEvaluationResponse(BaseModel):
    interest_level: float = Field(description="0 to 100: how much this ticket belongs to the department.")
    confidence_score: float = Field(description="0 to 100: confidence in the assessment.")
    rationale: str = Field(min_length=1, description="Detailed explanation for the assessment.")
    suggested_priority: str | None = Field(default=None, description="Critical | High | Medium | Low")
    recommended_tags: list[str] = Field(default_factory=list, description="Up to 3 tags.")
    estimated_resolution_time: str | None = Field(
        default=None, description='e.g. "1-2 hours", "1 day", "3-5 days"'
    )


class ArbiterResponse(BaseModel):
    assigned_department: str = Field(min_length=1, description="Department name.")
    department_id: str | None = None
    reason: str | None = None
    confidence: float | None = Field(default=None, description="0 to 100.")
    priority: str | None = None
    tags: list[str] = Field(default_factory=list)
    estimated_resolution_time: str | None = None


class DraftCandidate(BaseModel):
    response: str = Field(min_length=1, description="Complete human-like reply to the ticket.")
    confidence: float = Field(default=50, description="0 to 100.")
    reasoning: str = ""
    suggested_status: str | None = Field(default=None, description="open | in_progress | pending | resolved")
    suggested_tags: list[str] = Field(default_factory=list)


class ValidatorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    feedback: str = ""
    improved_response: str | None = Field(default=None, alias="improvedResponse")


class DetectionResponse(BaseModel):
    is_detected: bool
    rationale: str = ""
