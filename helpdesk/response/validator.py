import logging

from helpdesk.llm import LLMBackend, complete, get_llm_backend, parse_response
from helpdesk.llm.agent import truncate
from helpdesk.llm.schemas import ValidatorResponse
from helpdesk.logging_utils import log_fallback, log_usage
from helpdesk.models import DraftResponse, Ticket, ValidationVerdict

logger = logging.getLogger(__name__)

VALIDATOR_PROMPT = """You are the Validator Agent for a help desk ticket system. Your job is to evaluate response quality before it is sent to users.

Evaluate responses on:
1. Accuracy - Does it correctly address the ticket's issues?
2. Completeness - Does it fully address all aspects of the request?
3. Tone - Is it professional, empathetic and human-like?
4. Clarity - Is it easy to understand with clear next steps?
5. Specificity - Does it provide specific information rather than generic answers?

IMPORTANT: Respond with ONLY valid JSON in the following format:
{
  "isValid": boolean,
  "feedback": "Your specific feedback on the response",
  "improvedResponse": "Only include this field if isValid is false, providing an improved version"
}"""


class ResponseValidator:
    def __init__(self, backend: LLMBackend | None = None, timeout: float | None = None):
        self._backend = backend
        self.timeout = timeout

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def validate(self, ticket: Ticket, draft: DraftResponse) -> ValidationVerdict:
        """A validator that cannot answer rejects the draft without offering an improvement."""
        user = (
            "Validate this response to a help desk ticket:\n\n"
            "Ticket Information:\n"
            f"Title: {ticket.title}\n"
            f"Description: {truncate(ticket.description)}\n"
            f"Priority: {ticket.priority}\n"
            f"Status: {ticket.status}\n\n"
            f"Generated Response:\n{draft.text}\n\n"
            f"Agent Confidence: {draft.confidence}%\n"
            f"Agent Reasoning: {draft.reasoning}\n\n"
            "Evaluate if this response is valid and high quality. Return only a JSON object."
        )
        try:
            content, inp, out = await complete(
                self.backend, VALIDATOR_PROMPT, user,
                temperature=0.3,
                max_tokens=800,
                schema=ValidatorResponse,
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("Validator failed: %s: %s", type(e).__name__, e)
            log_fallback("draft_validation", f"{type(e).__name__}: {e}", ticket_id=ticket.id)
            return ValidationVerdict(is_valid=False, feedback="Validation unavailable.")
        parsed = parse_response(content, ValidatorResponse)
        if parsed is None:
            log_fallback("draft_validation", "malformed output", ticket_id=ticket.id)
            return ValidationVerdict(is_valid=False, feedback="Could not parse validator output.")
        log_usage(
            "draft_validation",
            is_valid=parsed.is_valid,
            input_tokens=inp,
            output_tokens=out,
            ticket_id=ticket.id,
        )
        improved = (parsed.improved_response or "").strip() or None
        return ValidationVerdict(
            is_valid=parsed.is_valid,
            feedback=parsed.feedback,
            improved_text=None if parsed.is_valid else improved,
        )
