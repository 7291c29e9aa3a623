import asyncio
import json
import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

import config
from .protocol import LLMBackend

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def extract_json(raw: str) -> str | None:
    if not raw or not raw.strip():
        return None
    s = raw.strip()
    for prefix in ("```json", "```"):
        if s.startswith(prefix):
            s = s[len(prefix):].lstrip()
    if s.endswith("```"):
        s = s[:-3].rstrip()
    start = s.find("{")
    if start == -1:
        return None
    end = s.rfind("}") + 1
    if end <= start:
        return None
    return s[start:end]


def parse_response(raw: str, model: type[M]) -> M | None:
    """Parse a model reply into `model`; None when the reply is not usable JSON for it."""
    blob = extract_json(raw)
    if blob is None:
        return None
    try:
        data = json.loads(blob)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug("Reply does not match %s: %s", model.__name__, e)
        return None


async def complete(
    backend: LLMBackend,
    system: str,
    user: str,
    *,
    temperature: float = 0.3,
    max_tokens: int = 512,
    schema: type[BaseModel] | None = None,
    timeout: float | None = None,
) -> tuple[str, int, int]:
    """Single chat call bounded by a timeout. Raises on service failure or timeout."""
    response_format = None
    if schema is not None:
        response_format = {"type": "json_object", "schema": schema.model_json_schema()}
    return await asyncio.wait_for(
        backend.chat_completion(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format,
        ),
        timeout=timeout if timeout is not None else config.LLM_CALL_TIMEOUT_SEC,
    )


def truncate(text: str | None, max_chars: int | None = None) -> str:
    s = (text or "").strip()
    limit = max_chars or config.TICKET_MAX_CHARS
    return s if len(s) <= limit else s[:limit] + "..."
