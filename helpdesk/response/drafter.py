import logging

import config
from helpdesk.departments import RESPONSE_GUIDELINES, lookup
from helpdesk.llm import LLMBackend, complete, get_llm_backend, parse_response
from helpdesk.llm.agent import truncate
from helpdesk.llm.schemas import DraftCandidate
from helpdesk.logging_utils import log_draft, log_fallback, log_usage
from helpdesk.models import DraftResponse, Ticket
from helpdesk.rag import Embedder, EmbeddingRecord, VectorStore, ticket_query_text
from helpdesk.rag.precedent import format_resolution_time

from .validator import ResponseValidator

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 30
NO_EXAMPLES = "No similar tickets found for reference."

RESPONSE_FORMAT = """IMPORTANT: Respond with ONLY valid JSON in the following format:
{
  "response": "Your complete human-like response to the ticket",
  "confidence": number between 0-100 indicating your confidence in this response,
  "reasoning": "Brief explanation of your rationale for this response",
  "suggested_status": "open" | "in_progress" | "pending" | "resolved",
  "suggested_tags": ["tag1", "tag2"] (up to 3 relevant tags)
}"""


class DraftGenerationError(RuntimeError):
    pass


def fallback_draft(ticket: Ticket, attempts: int = 0) -> DraftResponse:
    return DraftResponse(
        text=(
            f"Hi {ticket.requester or 'there'},\n\n"
            "Thank you for your ticket. We've received your request and are looking into it. "
            "A support agent will get back to you shortly with more information.\n\n"
            "Regards,\nHelp Desk Team"
        ),
        confidence=FALLBACK_CONFIDENCE,
        reasoning="Fallback response after failed generation attempts.",
        suggested_status="in_progress",
        suggested_tags=["needs-review"],
        attempts=attempts,
    )


def format_examples(precedent: list[tuple[EmbeddingRecord, float]]) -> str:
    if not precedent:
        return NO_EXAMPLES
    blocks = []
    for record, similarity in precedent:
        m = record.metadata
        resolution_time = format_resolution_time(m.get("created_at"), m.get("resolved_at"))
        blocks.append(
            f'Similar Ticket: "{m.get("title") or ""}"\n'
            f'Description: "{truncate(m.get("description"), 500)}"\n'
            f'Response Used: "{m.get("resolution") or "(no recorded reply)"}"\n'
            f"Resolution Time: {resolution_time or 'Not recorded'}\n"
            f"Similarity Score: {similarity * 100:.1f}%"
        )
    return "\n\n".join(blocks)


class ResponseDrafter:
    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder | None = None,
        backend: LLMBackend | None = None,
        validator: ResponseValidator | None = None,
        precedent_k: int | None = None,
        timeout: float | None = None,
    ):
        self.store = store
        self.embedder = embedder or Embedder()
        self._backend = backend
        self.validator = validator or ResponseValidator(backend=backend, timeout=timeout)
        self.precedent_k = precedent_k or config.DRAFT_PRECEDENT_K
        self.timeout = timeout

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def find_precedent(self, ticket: Ticket, department_name: str) -> list[tuple[EmbeddingRecord, float]]:
        """Most similar resolved tickets of the department, excluding the ticket itself."""
        vector = await self.embedder.embed(ticket_query_text(ticket))
        hits = self.store.query(
            vector,
            k=self.precedent_k + 1,
            where={"department_name": department_name, "status": "resolved"},
        )
        return [(r, s) for r, s in hits if r.entity_id != ticket.id][: self.precedent_k]

    async def generate(
        self,
        ticket: Ticket,
        department_name: str,
        precedent: list[tuple[EmbeddingRecord, float]],
    ) -> DraftResponse:
        system = f"{lookup(RESPONSE_GUIDELINES, department_name)}\n\n{RESPONSE_FORMAT}"
        user = (
            "Generate a response to this help desk ticket:\n\n"
            f"Ticket Number: {ticket.label}\n"
            f"Title: {ticket.title}\n"
            f"Description: {truncate(ticket.description)}\n"
            f"Category: {ticket.category or 'Uncategorized'}\n"
            f"Priority: {ticket.priority}\n"
            f"Requester: {ticket.requester or 'Unknown'}\n"
            f"Current Status: {ticket.status}\n\n"
            f"{format_examples(precedent)}\n\n"
            "Based on this information, generate a professional, helpful, and human-like response.\n"
            f"Remember to follow the {department_name} department guidelines.\n"
            "Return ONLY a valid JSON object with your response."
        )
        content, inp, out = await complete(
            self.backend, system, user,
            temperature=0.7,
            max_tokens=900,
            schema=DraftCandidate,
            timeout=self.timeout,
        )
        parsed = parse_response(content, DraftCandidate)
        if parsed is None:
            raise DraftGenerationError(f"Invalid response format from {department_name} agent")
        log_usage("draft_generation", input_tokens=inp, output_tokens=out, ticket_id=ticket.id)
        return DraftResponse(
            text=parsed.response.strip(),
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
            suggested_status=parsed.suggested_status,
            suggested_tags=parsed.suggested_tags,
        )

    async def draft(
        self,
        ticket: Ticket,
        department_name: str | None = None,
        max_attempts: int | None = None,
    ) -> DraftResponse:
        max_attempts = config.DRAFT_MAX_ATTEMPTS if max_attempts is None else max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        department_name = department_name or ticket.department or config.DEFAULT_DEPARTMENT
        precedent = await self.find_precedent(ticket, department_name)
        logger.info("Found %d resolved examples for ticket %s", len(precedent), ticket.label)

        attempts = 0
        accepted: DraftResponse | None = None
        while attempts < max_attempts and accepted is None:
            attempts += 1
            try:
                candidate = await self.generate(ticket, department_name, precedent)
            except Exception as e:
                logger.warning("Draft attempt %d/%d failed: %s: %s", attempts, max_attempts, type(e).__name__, e)
                continue
            verdict = await self.validator.validate(ticket, candidate)
            if verdict.is_valid:
                accepted = candidate
            elif verdict.improved_text:
                logger.info("Adopting validator's improved draft (attempt %d)", attempts)
                accepted = candidate.model_copy(
                    update={
                        "text": verdict.improved_text,
                        "confidence": min(candidate.confidence + config.DRAFT_IMPROVEMENT_BONUS, 100),
                    }
                )
            else:
                logger.info("Draft rejected (attempt %d/%d): %s", attempts, max_attempts, verdict.feedback)

        if accepted is None:
            log_fallback("draft_generation", "attempt budget exhausted", attempts=attempts, ticket_id=ticket.id)
            result = fallback_draft(ticket, attempts)
        else:
            result = accepted.model_copy(update={"attempts": attempts})
        log_draft(attempts, accepted is not None, result.confidence, ticket_id=ticket.id)
        return result
