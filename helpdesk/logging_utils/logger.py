import json
import logging
from pathlib import Path

import config

LLM_USAGE_LOGGER = "helpdesk.llm_usage"


def get_usage_logger() -> logging.Logger:
    logger = logging.getLogger(LLM_USAGE_LOGGER)
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(stream)
        logger.setLevel(logging.INFO if config.LOG_DISPLAY else logging.WARNING)
        logger.propagate = False
    return logger


_STEP_EVENT: dict[str, str] = {
    "embed": "embedding",
    "department_evaluation": "evaluation",
    "arbitration": "decision",
    "draft_generation": "draft",
    "draft_validation": "validation",
    "pattern_summary": "summary",
    "pattern_detection": "detection",
    "routing": "routing",
}

_ROUNDED = ("confidence", "similarity", "elapsed_sec")


def log_usage(step: str, **kwargs) -> None:
    payload: dict = {"step": step, "event": _STEP_EVENT.get(step, step)}
    for k, v in kwargs.items():
        if v is None:
            continue
        if k in _ROUNDED:
            payload[k] = round(float(v), 4)
        else:
            payload[k] = v
    if "input_tokens" in payload and "output_tokens" in payload and "total_tokens" not in payload:
        payload["total_tokens"] = payload["input_tokens"] + payload["output_tokens"]
    get_usage_logger().info("%s", json.dumps(payload, ensure_ascii=False, default=str))


def log_fallback(step: str, reason: str, **kwargs) -> None:
    """Fallback paths are the only visible signal of degradation, so they log at WARNING."""
    payload = {"step": step, "event": "fallback", "reason": reason}
    payload.update({k: v for k, v in kwargs.items() if v is not None})
    get_usage_logger().warning("%s", json.dumps(payload, ensure_ascii=False, default=str))


def log_evaluation(
    department: str,
    interest_level: int | None = None,
    confidence_score: int | None = None,
    input_tokens: int | None = None,
    output_tokens: int | None = None,
    ticket_id: str | None = None,
) -> None:
    log_usage(
        "department_evaluation",
        department=department,
        interest_level=interest_level,
        confidence_score=confidence_score,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        ticket_id=ticket_id,
    )


def log_decision(
    source: str,
    department: str,
    confidence: float,
    elapsed_sec: float | None = None,
    n_evaluations: int | None = None,
    ticket_id: str | None = None,
) -> None:
    log_usage(
        "routing",
        source=source,
        department=department,
        confidence=confidence,
        elapsed_sec=elapsed_sec,
        n_evaluations=n_evaluations,
        ticket_id=ticket_id,
    )


def log_draft(
    attempts: int,
    accepted: bool,
    confidence: float,
    ticket_id: str | None = None,
) -> None:
    log_usage(
        "draft_generation",
        attempts=attempts,
        accepted=accepted,
        confidence=confidence,
        ticket_id=ticket_id,
    )


def log_pattern_report(
    department: str,
    n_tickets: int,
    repetition: bool,
    misuse: bool,
    elapsed_sec: float | None = None,
) -> None:
    log_usage(
        "pattern_detection",
        department=department,
        n_tickets=n_tickets,
        repetition=repetition,
        misuse=misuse,
        elapsed_sec=elapsed_sec,
    )


def log_result(payload: dict, path: Path | None = None, append: bool = True):
    path = path or config.OUTPUTS / "routing_results.jsonl"
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "a" if append else "w"
    with open(path, mode, encoding="utf-8") as f:
        f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
