import asyncio

import config


class SentenceTransformersBackend:
    """Local embedding model; EMBEDDING_DIM must match the model's output size."""

    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or config.EMBEDDING_MODEL
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    async def embed(self, text: str) -> list[float]:
        vec = await asyncio.to_thread(self.model.encode, [text], convert_to_numpy=True)
        return vec[0].tolist()
