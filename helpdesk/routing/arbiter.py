import logging
import math
from typing import Iterable

import config
from helpdesk.departments import DepartmentDirectory
from helpdesk.llm import LLMBackend, complete, get_llm_backend, parse_response
from helpdesk.llm.schemas import ArbiterResponse
from helpdesk.logging_utils import log_fallback, log_usage
from helpdesk.models import DepartmentProfile, EvaluationResult, RoutingDecision, Ticket
from helpdesk.models.results import clean_tags

from .evaluator import format_ticket

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 30
DEFAULT_TAGS = ["auto-assigned", "requires-review"]

ASSIGNER_PROMPT = """You are the Assigner Agent in a help desk ticket routing system. Your role is to make the final decision about which department should handle a new ticket.

You'll receive the ticket details and the evaluations from each department agent: interest level (0-100), confidence score (0-100), rationale, suggested priority and recommended tags.

When deciding:
- Give more weight to departments with BOTH high interest and high confidence; neither alone is enough
- Critically evaluate each rationale for logical reasoning
- Consider the ticket's content and category more than just agent scores
- If multiple departments could handle it, choose the best fit based on expertise
- If no department is clearly appropriate, choose the one with the strongest case

The assigned department must be one of the department names given in the evaluations.

IMPORTANT: Respond with ONLY a JSON object and nothing else - no markdown, no backticks, no explanations.
Return ONLY the following JSON structure:

{
  "assigned_department": string (department name),
  "reason": string (brief explanation for your decision),
  "confidence": number (0-100, your confidence in this decision),
  "priority": "Critical" | "High" | "Medium" | "Low",
  "tags": string[] (up to 3 tags),
  "estimated_resolution_time": string
}"""


def _format_evaluations(evaluations: list[EvaluationResult]) -> str:
    blocks = []
    for e in evaluations:
        blocks.append(
            f"{e.department_name} Department Evaluation:\n"
            f"- Interest Level: {e.interest_level}/100\n"
            f"- Confidence Score: {e.confidence_score}/100\n"
            f"- Rationale: {e.rationale}\n"
            f"- Suggested Priority: {e.suggested_priority}\n"
            f"- Recommended Tags: {', '.join(e.recommended_tags)}\n"
            f"- Estimated Resolution Time: {e.estimated_resolution_time}"
        )
    return "\n\n".join(blocks)


def pick_best(evaluations: list[EvaluationResult]) -> EvaluationResult:
    """Highest interest x confidence; equal scores go to the alphabetically first department."""
    return min(evaluations, key=lambda e: (-e.score, e.department_name.casefold()))


def default_decision(
    ticket: Ticket,
    directory: DepartmentDirectory,
    reason: str | None = None,
    tags: list[str] | None = None,
    source: str = "default",
) -> RoutingDecision:
    dept = directory.default
    return RoutingDecision(
        assigned_department=dept.name,
        department_id=dept.id,
        reason=reason or f"No valid department evaluations were received. Defaulting to {dept.name}.",
        confidence=DEFAULT_CONFIDENCE,
        priority=ticket.priority,
        tags=list(tags or DEFAULT_TAGS),
        estimated_resolution_time="Unknown",
        source=source,
    )


def fallback_decision(
    ticket: Ticket,
    evaluations: list[EvaluationResult],
    directory: DepartmentDirectory,
) -> RoutingDecision:
    if not evaluations:
        return default_decision(ticket, directory)
    best = pick_best(evaluations)
    return RoutingDecision(
        assigned_department=best.department_name,
        department_id=best.department_id,
        reason=(
            "Automatic selection of the department with the highest interest x confidence score. "
            f"{best.rationale}"
        ).strip(),
        confidence=math.floor(best.score / 100 + 0.5),
        priority=best.suggested_priority or ticket.priority,
        tags=best.recommended_tags or ["auto-assigned"],
        estimated_resolution_time=best.estimated_resolution_time or "Unknown",
        source="fallback",
    )


def finalize_decision(
    decision: RoutingDecision,
    directory: DepartmentDirectory,
    penalty: int | None = None,
) -> RoutingDecision:
    """Bind the decision to a durable department id from the caller's list.

    The id is always looked up from the department name; an id carried by the
    decision itself is never trusted.
    """
    penalty = config.UNRESOLVED_DEPARTMENT_PENALTY if penalty is None else penalty
    tags = clean_tags(decision.tags)
    dept = directory.resolve(decision.assigned_department)
    if dept is not None:
        return decision.model_copy(
            update={"assigned_department": dept.name, "department_id": dept.id, "tags": tags}
        )
    default = directory.default
    logger.warning(
        "Decision names unresolvable department %r; substituting %s",
        decision.assigned_department, default.name,
    )
    log_fallback(
        "arbitration",
        "unresolved department",
        department=decision.assigned_department,
        substituted=default.name,
    )
    return decision.model_copy(
        update={
            "assigned_department": default.name,
            "department_id": default.id,
            "confidence": max(0, decision.confidence - penalty),
            "reason": (
                f"{decision.reason} (Department {decision.assigned_department!r} could not be "
                f"resolved; assigned to {default.name}.)"
            ),
            "tags": tags,
        }
    )


class Arbiter:
    def __init__(self, backend: LLMBackend | None = None, timeout: float | None = None):
        self._backend = backend
        self.timeout = timeout

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def _arbitrate(self, ticket: Ticket, evaluations: list[EvaluationResult]) -> RoutingDecision | None:
        user = (
            "A new helpdesk ticket has been submitted:\n\n"
            f"{format_ticket(ticket)}\n\n"
            "Here are the department agent evaluations:\n\n"
            f"{_format_evaluations(evaluations)}\n\n"
            "Based on these evaluations, make the final routing decision.\n"
            "Return ONLY a valid JSON object."
        )
        try:
            content, inp, out = await complete(
                self.backend, ASSIGNER_PROMPT, user,
                temperature=0.3,
                max_tokens=400,
                schema=ArbiterResponse,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("Assigner agent failed: %s: %s", type(e).__name__, e)
            log_fallback("arbitration", f"{type(e).__name__}: {e}", ticket_id=ticket.id)
            return None
        parsed = parse_response(content, ArbiterResponse)
        if parsed is None:
            logger.warning("Assigner agent returned malformed output")
            log_fallback("arbitration", "malformed output", ticket_id=ticket.id)
            return None
        log_usage("arbitration", input_tokens=inp, output_tokens=out, ticket_id=ticket.id)
        return RoutingDecision(
            assigned_department=parsed.assigned_department,
            department_id=parsed.department_id or "",
            reason=parsed.reason or "No specific reason provided.",
            confidence=parsed.confidence if parsed.confidence is not None else 50,
            priority=parsed.priority or ticket.priority,
            tags=clean_tags(parsed.tags) or ["auto-assigned"],
            estimated_resolution_time=parsed.estimated_resolution_time or "1-2 days",
            source="arbiter",
        )

    async def decide(
        self,
        ticket: Ticket,
        evaluations: Iterable[EvaluationResult | None],
        departments: DepartmentDirectory | Iterable[DepartmentProfile | dict],
    ) -> RoutingDecision:
        directory = (
            departments if isinstance(departments, DepartmentDirectory) else DepartmentDirectory(departments)
        )
        valid = [e for e in evaluations if e is not None]
        if not valid:
            decision = default_decision(ticket, directory)
        else:
            decision = await self._arbitrate(ticket, valid)
            if decision is None:
                decision = fallback_decision(ticket, valid, directory)
        return finalize_decision(decision, directory)
