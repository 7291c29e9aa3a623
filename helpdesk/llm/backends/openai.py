import os

import config


class OpenAIBackend:
    """Chat completions and embeddings against the OpenAI API (or any compatible base URL)."""

    def __init__(self, model: str | None = None, embedding_model: str | None = None) -> None:
        api_key = (os.environ.get("OPENAI_API_KEY") or config.OPENAI_API_KEY or "").strip()
        if not api_key:
            raise ValueError("OPENAI_API_KEY not set. Set it in .env or environment.")
        from openai import AsyncOpenAI
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
            timeout=config.LLM_CALL_TIMEOUT_SEC,
            max_retries=0,
        )
        self._model = model or config.OPENAI_MODEL
        self._embedding_model = embedding_model or config.EMBEDDING_MODEL

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        response_format: dict | None = None,
    ) -> tuple[str, int, int]:
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

    async def embed(self, text: str) -> list[float]:
        resp = await self._client.embeddings.create(model=self._embedding_model, input=text)
        return list(resp.data[0].embedding)
