import asyncio
import logging
import time

from helpdesk.departments import MISUSE_FOCUS, UNKNOWN_DEPARTMENT, lookup
from helpdesk.llm import LLMBackend, complete, get_llm_backend, parse_response
from helpdesk.llm.agent import truncate
from helpdesk.llm.schemas import DetectionResponse
from helpdesk.logging_utils import log_fallback, log_pattern_report, log_usage
from helpdesk.models import DetectionResult, PatternReport, Ticket

logger = logging.getLogger(__name__)

UNPARSEABLE = "could not parse"

MICRO_PROMPT = """You are a helpdesk micro summarizer. Create a 1-sentence summary for a support ticket.
Be precise, factual and focus on the core issue."""

MACRO_PROMPT = """You are a macro summarizer for the {department} department.
Combine the following micro summaries into an overview of ticket themes and patterns.
Focus on recurring themes, common issues and potential areas for improvement."""

REPETITION_PROMPT = """You are a pattern detection agent for the {department} department.

Analyze the summary below for repetition of work that could indicate automation opportunities or excessive recurring tasks. Consider:
- Recurring technical issues that could be prevented
- Repetitive user requests that could be self-service
- Administrative tasks that could be automated
- Training gaps indicated by repeated similar questions

Respond in JSON format like:
{{
  "is_detected": true | false,
  "rationale": "reasoning with specific improvement suggestions"
}}"""

MISUSE_PROMPT = """You are a misuse detection agent for the {department} department.

Check the macro summary for signs of improper ticket creation, system misuse, or security concerns.
{focus}

Respond in JSON format:
{{
  "is_detected": true | false,
  "rationale": "clear explanation of detected issues or confirmation of no misuse"
}}"""


class PatternAnalyzer:
    def __init__(self, backend: LLMBackend | None = None, timeout: float | None = None):
        self._backend = backend
        self.timeout = timeout

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def summarize_ticket(self, ticket: Ticket) -> str:
        user = f"Ticket Title: {ticket.title}\nDescription: {truncate(ticket.description)}"
        try:
            content, inp, out = await complete(
                self.backend, MICRO_PROMPT, user,
                temperature=0.3, max_tokens=120, timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("Micro summary failed for %s: %s: %s", ticket.label, type(e).__name__, e)
            log_fallback("pattern_summary", f"{type(e).__name__}: {e}", ticket_id=ticket.id)
            return ticket.title
        log_usage("pattern_summary", input_tokens=inp, output_tokens=out, ticket_id=ticket.id)
        return content.strip() or ticket.title

    async def summarize_all(self, micro_summaries: list[str], department_name: str) -> str:
        joined = "\n".join(f"- {s}" for s in micro_summaries)
        try:
            content, inp, out = await complete(
                self.backend, MACRO_PROMPT.format(department=department_name), joined,
                temperature=0.4, max_tokens=600, timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("Macro summary failed: %s: %s", type(e).__name__, e)
            log_fallback("pattern_summary", f"{type(e).__name__}: {e}", department=department_name)
            return joined
        log_usage("pattern_summary", input_tokens=inp, output_tokens=out, department=department_name)
        return content.strip() or joined

    async def _detect(self, step: str, system: str, macro_summary: str) -> DetectionResult:
        try:
            content, inp, out = await complete(
                self.backend, system, macro_summary,
                temperature=0.3, max_tokens=400,
                schema=DetectionResponse, timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("%s failed: %s: %s", step, type(e).__name__, e)
            log_fallback("pattern_detection", f"{type(e).__name__}: {e}", detector=step)
            return DetectionResult(detected=False, rationale=UNPARSEABLE)
        parsed = parse_response(content, DetectionResponse)
        if parsed is None:
            logger.warning("%s returned malformed output", step)
            log_fallback("pattern_detection", "malformed output", detector=step)
            return DetectionResult(detected=False, rationale=UNPARSEABLE)
        log_usage("pattern_detection", detector=step, input_tokens=inp, output_tokens=out)
        return DetectionResult(detected=parsed.is_detected, rationale=parsed.rationale)

    async def detect_repetition(self, macro_summary: str, department_name: str) -> DetectionResult:
        return await self._detect(
            "repetition", REPETITION_PROMPT.format(department=department_name), macro_summary
        )

    async def detect_misuse(self, macro_summary: str, department_name: str) -> DetectionResult:
        system = MISUSE_PROMPT.format(
            department=department_name, focus=lookup(MISUSE_FOCUS, department_name)
        )
        return await self._detect("misuse", system, macro_summary)

    async def analyze(self, tickets: list[Ticket | dict], department_name: str | None = None) -> PatternReport:
        if not tickets:
            raise ValueError("No tickets provided for analysis.")
        tickets = [t if isinstance(t, Ticket) else Ticket.model_validate(t) for t in tickets]
        department_name = department_name or tickets[0].department or UNKNOWN_DEPARTMENT
        t0 = time.perf_counter()

        micro = await asyncio.gather(*(self.summarize_ticket(t) for t in tickets))
        macro = await self.summarize_all(list(micro), department_name)
        repetition, misuse = await asyncio.gather(
            self.detect_repetition(macro, department_name),
            self.detect_misuse(macro, department_name),
        )

        log_pattern_report(
            department_name,
            n_tickets=len(tickets),
            repetition=repetition.detected,
            misuse=misuse.detected,
            elapsed_sec=time.perf_counter() - t0,
        )
        return PatternReport(
            micro_summaries=list(micro),
            macro_summary=macro,
            repetition=repetition,
            misuse=misuse,
            department_name=department_name,
        )
