import asyncio
import os
import time

import config

REQUESTS_PER_MINUTE = 30


class RateLimiter:
    """Spaces requests at least 60/per_minute seconds apart.

    The lock is recreated whenever the running event loop changes, so one backend
    survives successive `asyncio.run` calls.
    """

    def __init__(self, per_minute: int = REQUESTS_PER_MINUTE) -> None:
        self.min_interval = 60.0 / per_minute
        self._last_request_time = 0.0
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._loop is not loop:
            self._lock = asyncio.Lock()
            self._loop = loop
        async with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self.min_interval and self._last_request_time > 0:
                await asyncio.sleep(self.min_interval - elapsed)
            self._last_request_time = time.monotonic()


class GroqBackend:
    def __init__(self) -> None:
        api_key = os.environ.get("GROQ_API_KEY", "").strip()
        if not api_key:
            raise ValueError(
                "GROQ_API_KEY not set. Set it in .env (keys at https://console.groq.com/keys)."
            )
        from groq import AsyncGroq
        self._client = AsyncGroq(api_key=api_key, timeout=config.LLM_CALL_TIMEOUT_SEC)
        self._model = os.environ.get("GROQ_MODEL", config.GROQ_MODEL).strip()
        self._limiter = RateLimiter()

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        response_format: dict | None = None,
    ) -> tuple[str, int, int]:
        await self._limiter.wait()
        kwargs = dict(
            messages=messages,
            model=self._model,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if response_format and response_format.get("type") == "json_object":
            kwargs["response_format"] = {"type": "json_object"}
        resp = await self._client.chat.completions.create(**kwargs)
        choice = (resp.choices or [None])[0]
        content = (choice.message.content or "") if choice and choice.message else ""
        usage = getattr(resp, "usage", None)
        inp = getattr(usage, "prompt_tokens", 0) or 0
        out = getattr(usage, "completion_tokens", 0) or 0
        return (content or "", inp, out)
