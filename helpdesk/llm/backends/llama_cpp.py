import asyncio
import os
from pathlib import Path

import config


def _download_model_to(local_dir: Path) -> Path:
    from huggingface_hub import hf_hub_download
    local_dir.mkdir(parents=True, exist_ok=True)
    token = os.getenv("HF_TOKEN") or os.getenv("HUGGING_FACE_HUB_TOKEN")
    try:
        path = hf_hub_download(
            repo_id=config.LLAMA_HF_REPO,
            filename=config.LLAMA_HF_FILENAME,
            local_dir=str(local_dir),
            token=token,
        )
        return Path(path)
    except Exception as e:
        if "401" in str(e) or "Unauthorized" in str(e):
            raise RuntimeError(
                "Hugging Face model download failed (401/Unauthorized). "
                "Set HF_TOKEN in .env (tokens at https://huggingface.co/settings/tokens)."
            ) from e
        raise


def _resolve_model_path() -> Path:
    if config.LLAMA_MODEL_PATH:
        p = Path(config.LLAMA_MODEL_PATH)
        if not p.is_absolute():
            p = config.ROOT / p
        if p.exists():
            return p
        return _download_model_to(p.parent)
    return _download_model_to(config.MODELS_DIR)


class LlamaCppBackend:
    """Local GGUF model. Inference is blocking, so it runs in a worker thread."""

    def __init__(self) -> None:
        self._model = None

    def _get_model(self):
        if self._model is None:
            from llama_cpp import Llama
            path = _resolve_model_path()
            self._model = Llama(
                model_path=str(path),
                n_gpu_layers=config.LLAMA_N_GPU_LAYERS,
                n_ctx=config.LLAMA_N_CTX,
                verbose=False,
            )
        return self._model

    def _complete(self, messages, max_tokens, temperature, response_format):
        llm = self._get_model()
        resp = llm.create_chat_completion(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=response_format or {},
        )
        usage = resp.get("usage") or {}
        content = (resp.get("choices") or [{}])[0].get("message", {}).get("content", "")
        return (
            content or "",
            usage.get("prompt_tokens", 0),
            usage.get("completion_tokens", 0),
        )

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int = 512,
        temperature: float = 0.3,
        response_format: dict | None = None,
    ) -> tuple[str, int, int]:
        return await asyncio.to_thread(
            self._complete, messages, max_tokens, temperature, response_format
        )
