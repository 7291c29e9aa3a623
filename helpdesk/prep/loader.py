import hashlib
from pathlib import Path

import pandas as pd

import config
from helpdesk.models import Ticket

REQUIRED_COLUMNS = ("title", "description")
OPTIONAL_COLUMNS = (
    "id",
    "ticket_number",
    "category",
    "priority",
    "status",
    "department",
    "department_id",
    "requester",
    "assigned_to",
    "created_at",
    "resolved_at",
    "resolution",
)


def stable_id(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def _find_csv(path: Path) -> Path | None:
    preferred = path / config.TICKETS_CSV_FILENAME
    if preferred.exists():
        return preferred
    for f in sorted(path.rglob("*.csv")):
        return f
    return None


def _clean(value):
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def read_tickets_frame(csv_path: Path | None = None) -> pd.DataFrame:
    if csv_path is None:
        csv_path = _find_csv(config.DATA_RAW)
    if csv_path is None:
        raise FileNotFoundError(f"No ticket CSV in {config.DATA_RAW}.")
    df = pd.read_csv(csv_path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Ticket CSV is missing columns {missing}. Columns: {list(df.columns)}")
    df = df.dropna(subset=list(REQUIRED_COLUMNS))
    df = df[df["title"].astype(str).str.strip().ne("") & df["description"].astype(str).str.strip().ne("")]
    for col in ("created_at", "resolved_at"):
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], errors="coerce", utc=True)
    return df.reset_index(drop=True)


def load_tickets(csv_path: Path | None = None) -> list[Ticket]:
    df = read_tickets_frame(csv_path)
    tickets = []
    for _, row in df.iterrows():
        data = {c: _clean(row.get(c)) for c in REQUIRED_COLUMNS + OPTIONAL_COLUMNS if c in df.columns}
        for col in ("created_at", "resolved_at"):
            if data.get(col) is not None:
                data[col] = data[col].to_pydatetime()
        for col, value in data.items():
            if value is not None and col not in ("created_at", "resolved_at"):
                data[col] = str(value)
        if data.get("id") is None:
            data["id"] = stable_id(f"{data['title']} {data['description']}")
        tickets.append(Ticket.model_validate({k: v for k, v in data.items() if v is not None}))
    return tickets
