from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

PRIORITIES = ("low", "medium", "high", "critical")
DEFAULT_PRIORITY = "medium"


def normalize_priority(priority: Any) -> str:
    """Map any model- or user-supplied priority onto low/medium/high/critical."""
    if not isinstance(priority, str):
        return DEFAULT_PRIORITY
    p = priority.strip().lower()
    return p if p in PRIORITIES else DEFAULT_PRIORITY


class Ticket(BaseModel):
    id: str = Field(min_length=1)
    ticket_number: str | None = None
    title: str
    description: str
    category: str | None = None
    priority: str = DEFAULT_PRIORITY
    status: str = "open"
    department: str | None = None
    department_id: str | None = None
    requester: str | None = None
    assigned_to: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    resolution: str | None = Field(
        default=None,
        description="Reply that closed the ticket, used as a worked example for drafting.",
    )

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v: Any) -> str:
        return normalize_priority(v)

    @property
    def label(self) -> str:
        return self.ticket_number or self.id

    def metadata_snapshot(self) -> dict[str, Any]:
        return {
            "ticket_number": self.ticket_number,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "category": self.category,
            "department_name": self.department,
            "department_id": self.department_id,
            "requester": self.requester,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "resolution": self.resolution,
        }


class DepartmentProfile(BaseModel):
    id: str
    name: str
    responsibility: str | None = Field(
        default=None,
        description="Free-text description of what the department handles; evaluator context.",
    )
