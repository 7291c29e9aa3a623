import logging

import config
from helpdesk.departments import department_context
from helpdesk.llm import LLMBackend, complete, get_llm_backend, parse_response
from helpdesk.llm.agent import truncate
from helpdesk.llm.schemas import DepartmentEvaluationResponse
from helpdesk.logging_utils import log_evaluation, log_fallback
from helpdesk.models import DepartmentProfile, EvaluationResult, Ticket
from helpdesk.rag.precedent import format_precedent
from helpdesk.rag.vector_store import EmbeddingRecord

logger = logging.getLogger(__name__)

SCHEMA_INSTRUCTIONS = """IMPORTANT: Respond with ONLY a JSON object and nothing else - no markdown, no backticks, no explanations.
Return ONLY the following JSON structure:

{
  "interest_level": number (0 to 100),
  "confidence_score": number (0 to 100),
  "rationale": string (detailed explanation for your assessment),
  "suggested_priority": "Critical" | "High" | "Medium" | "Low",
  "recommended_tags": string[] (up to 3 tags),
  "estimated_resolution_time": string (e.g. "1-2 hours", "1 day", "3-5 days")
}"""


def format_ticket(ticket: Ticket) -> str:
    return (
        f"Title: {ticket.title}\n"
        f"Description: {truncate(ticket.description)}\n"
        f"Category: {ticket.category or 'Uncategorized'}\n"
        f"Priority: {ticket.priority}\n"
        f"Requester: {ticket.requester or 'Unknown'}"
    )


def build_evaluation_prompt(
    department: DepartmentProfile,
    ticket: Ticket,
    precedent: list[tuple[EmbeddingRecord, float]],
) -> str:
    if precedent:
        precedent_block = (
            f"Here are similar tickets previously handled by the {department.name} department:\n"
            f"{format_precedent(precedent)}"
        )
    else:
        precedent_block = format_precedent(precedent)
    return (
        "A new helpdesk ticket has been submitted:\n\n"
        f"{format_ticket(ticket)}\n\n"
        f"{precedent_block}\n\n"
        f"Based on this information, evaluate if this ticket should be assigned to the {department.name} department.\n"
        "Return ONLY a valid JSON object with your interest level, confidence score, and rationale."
    )


class DepartmentEvaluator:
    """One department's opinion on a ticket. The same evaluator serves every department;
    only the context block differs."""

    def __init__(
        self,
        backend: LLMBackend | None = None,
        max_precedent: int | None = None,
        timeout: float | None = None,
    ):
        self._backend = backend
        self.max_precedent = max_precedent or config.EVALUATOR_PRECEDENT_K
        self.timeout = timeout

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def evaluate(
        self,
        department: DepartmentProfile,
        ticket: Ticket,
        precedent: list[tuple[EmbeddingRecord, float]],
    ) -> EvaluationResult | None:
        system = f"{department_context(department)}\n\n{SCHEMA_INSTRUCTIONS}"
        user = build_evaluation_prompt(department, ticket, precedent[: self.max_precedent])
        try:
            content, inp, out = await complete(
                self.backend, system, user,
                temperature=0.3,
                max_tokens=400,
                schema=DepartmentEvaluationResponse,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("%s evaluator failed: %s: %s", department.name, type(e).__name__, e)
            log_fallback("department_evaluation", f"{type(e).__name__}: {e}", department=department.name)
            return None
        parsed = parse_response(content, DepartmentEvaluationResponse)
        if parsed is None:
            logger.warning("%s evaluator returned malformed output", department.name)
            log_fallback("department_evaluation", "malformed output", department=department.name)
            return None
        result = EvaluationResult(
            department_id=department.id,
            department_name=department.name,
            interest_level=parsed.interest_level,
            confidence_score=parsed.confidence_score,
            rationale=parsed.rationale,
            suggested_priority=parsed.suggested_priority or ticket.priority,
            recommended_tags=parsed.recommended_tags,
            estimated_resolution_time=parsed.estimated_resolution_time or "Unknown",
        )
        log_evaluation(
            department.name,
            interest_level=result.interest_level,
            confidence_score=result.confidence_score,
            input_tokens=inp,
            output_tokens=out,
            ticket_id=ticket.id,
        )
        return result
