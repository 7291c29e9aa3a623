from typing import Any, Protocol


class LLMBackend(Protocol):
    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        response_format: dict[str, Any] | None = None,
    ) -> tuple[str, int, int]:
        """
        messages: [{"role": "system"|"user"|"assistant", "content": "..."}, ...]
        response_format: e.g. {"type": "json_object", "schema": {...}}
        Returns: (assistant_content_str, input_tokens, output_tokens).
        """
        ...


class EmbeddingBackend(Protocol):
    async def embed(self, text: str) -> list[float]:
        """Returns one vector for `text`. May raise; callers own the fallback."""
        ...
