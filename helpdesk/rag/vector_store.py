import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, Field

import config
from helpdesk.errors import StorageCapacityError
from helpdesk.logging_utils import log_fallback

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1
MANIFEST_FILENAME = "manifest.json"
RECORDS_FILENAME = "records.json"

MODE_FULL = "full"
MODE_TRUNCATED = "truncated"
MODE_METADATA_ONLY = "metadata_only"


class EmbeddingRecord(BaseModel):
    entity_id: str
    vector: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def has_vector(self) -> bool:
        return len(self.vector) > 0


def cosine_similarity(a, b) -> float:
    """dot(a, b) / (|a||b|), 0 when either norm is 0.

    Vectors of different length are compared on their common prefix, which is
    how truncated records are ranked against full-size queries.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    va = np.asarray(a[:n], dtype=np.float64)
    vb = np.asarray(b[:n], dtype=np.float64)
    na = np.linalg.norm(va)
    nb = np.linalg.norm(vb)
    if na == 0 or nb == 0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / (na * nb), -1.0, 1.0))


def _matches(value: Any, expected: Any) -> bool:
    if isinstance(value, str) and isinstance(expected, str):
        return value.casefold() == expected.casefold()
    return value == expected


class VectorStore:
    def __init__(
        self,
        path: Path | None = None,
        max_bytes: int | None = None,
        truncated_dim: int | None = None,
    ):
        self.path = Path(path) if path is not None else None
        self.max_bytes = max_bytes if max_bytes is not None else config.VECTOR_STORE_MAX_BYTES
        self.truncated_dim = truncated_dim or config.VECTOR_STORE_TRUNCATED_DIM
        self.storage_mode = MODE_FULL
        self._records: dict[str, EmbeddingRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    def upsert(self, key: str, vector: list[float], metadata: dict[str, Any] | None = None) -> EmbeddingRecord:
        if not key:
            raise ValueError("Record key must be non-empty.")
        record = EmbeddingRecord(
            entity_id=key,
            vector=[float(x) for x in (vector or [])],
            metadata=dict(metadata or {}),
        )
        self._records[key] = record
        return record

    def get(self, key: str) -> EmbeddingRecord | None:
        return self._records.get(key)

    def records(self) -> list[EmbeddingRecord]:
        return list(self._records.values())

    def departments(self) -> list[str]:
        names = {r.metadata.get("department_name") for r in self._records.values()}
        return sorted(n for n in names if n)

    def query(
        self,
        vector: list[float],
        k: int = 5,
        where: dict[str, Any] | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]:
        if k <= 0:
            return []
        candidates = self._records.values()
        if where:
            candidates = [
                r for r in candidates
                if all(_matches(r.metadata.get(f), v) for f, v in where.items())
            ]
        scored = [(r, cosine_similarity(vector, r.vector)) for r in candidates]
        # Stable: equal scores keep insertion order. Vectorless records always rank last.
        scored.sort(key=lambda item: (not item[0].has_vector, -item[1]))
        return scored[:k]

    def _serialize(self, records: list[EmbeddingRecord]) -> str:
        return json.dumps([r.model_dump() for r in records], ensure_ascii=False)

    def _degrade(self, mode: str) -> list[EmbeddingRecord]:
        if mode == MODE_TRUNCATED:
            return [
                r.model_copy(update={"vector": r.vector[: self.truncated_dim]})
                for r in self._records.values()
            ]
        if mode == MODE_METADATA_ONLY:
            return [r.model_copy(update={"vector": []}) for r in self._records.values()]
        return list(self._records.values())

    def save(self, path: Path | None = None) -> Path:
        path = Path(path or self.path or config.ARTIFACTS_DIR)
        path.mkdir(parents=True, exist_ok=True)
        payload = None
        for mode in (MODE_FULL, MODE_TRUNCATED, MODE_METADATA_ONLY):
            records = self._degrade(mode)
            serialized = self._serialize(records)
            size = len(serialized.encode("utf-8"))
            if size <= self.max_bytes:
                payload = (mode, records, serialized)
                break
            logger.warning(
                "Vector store payload %d bytes exceeds capacity %d in %s mode",
                size, self.max_bytes, mode,
            )
        if payload is None:
            raise StorageCapacityError(
                f"{len(self._records)} records do not fit in {self.max_bytes} bytes, even without vectors."
            )
        mode, records, serialized = payload
        if mode != MODE_FULL:
            log_fallback("vector_store_save", f"stored in {mode} mode", n_records=len(records))
            self._records = {r.entity_id: r for r in records}
        self.storage_mode = mode
        with open(path / RECORDS_FILENAME, "w", encoding="utf-8") as f:
            f.write(serialized)
        dims = {len(r.vector) for r in records if r.has_vector}
        manifest = {
            "version": MANIFEST_VERSION,
            "storage_mode": mode,
            "dim": max(dims) if dims else 0,
            "n_records": len(records),
        }
        with open(path / MANIFEST_FILENAME, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)
        self.path = path
        return path

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        max_bytes: int | None = None,
        truncated_dim: int | None = None,
    ) -> "VectorStore":
        path = Path(path or config.ARTIFACTS_DIR)
        store = cls(path=path, max_bytes=max_bytes, truncated_dim=truncated_dim)
        records_path = path / RECORDS_FILENAME
        if not records_path.exists():
            return store
        with open(records_path, encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"Malformed vector store artifact at {records_path}: expected a list.")
        for item in raw:
            record = EmbeddingRecord.model_validate(item)
            store._records[record.entity_id] = record
        manifest_path = path / MANIFEST_FILENAME
        if manifest_path.exists():
            with open(manifest_path, encoding="utf-8") as f:
                manifest = json.load(f)
            store.storage_mode = manifest.get("storage_mode", MODE_FULL)
            n = manifest.get("n_records")
            if n is not None and n != len(store._records):
                raise ValueError(
                    f"Artifact length mismatch: manifest n_records={n}, records={len(store._records)}"
                )
        return store
