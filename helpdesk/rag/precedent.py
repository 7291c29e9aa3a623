from datetime import datetime

from .vector_store import EmbeddingRecord

NO_PRECEDENT = "No similar historical tickets found."
SNIPPET_CHARS = 500


def _parse_ts(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_resolution_time(created_at, resolved_at) -> str | None:
    created = _parse_ts(created_at)
    resolved = _parse_ts(resolved_at)
    if created is None or resolved is None:
        return None
    try:
        hours = (resolved - created).total_seconds() / 3600
    except TypeError:
        return None
    if hours < 1:
        return f"{round(hours * 60)} minutes"
    if hours < 24:
        return f"{round(hours)} hours"
    return f"{round(hours / 24)} days"


def _snippet(text, max_len: int = SNIPPET_CHARS) -> str:
    s = (text or "").strip()
    return s if len(s) <= max_len else s[:max_len] + "..."


def format_precedent(precedent: list[tuple[EmbeddingRecord, float]]) -> str:
    if not precedent:
        return NO_PRECEDENT
    blocks = []
    for i, (record, similarity) in enumerate(precedent, start=1):
        m = record.metadata
        lines = [
            f"Similar Ticket {i} (Similarity: {similarity * 100:.1f}%):",
            f"- Title: {m.get('title') or ''}",
            f"- Description: {_snippet(m.get('description'))}",
            f"- Priority: {m.get('priority') or 'unknown'}",
            f"- Status: {m.get('status') or 'unknown'}",
            f"- Category: {m.get('category') or 'Uncategorized'}",
            f"- Department: {m.get('department_name') or 'unknown'}",
        ]
        resolution_time = format_resolution_time(m.get("created_at"), m.get("resolved_at"))
        if resolution_time:
            lines.append(f"- Resolution Time: {resolution_time}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
