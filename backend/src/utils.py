from __future__ import annotations

from datetime import datetime, timezone
import json
import secrets
from typing import Any
import uuid


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def new_id() -> str:
    return uuid.uuid4().hex


def new_token() -> str:
    return secrets.token_urlsafe(32)


def to_json(value: Any) -> str:
    # Addresses carry accented Portuguese text; keep it readable in the db.
    return json.dumps(value, ensure_ascii=False)


def from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return default


def row_to_dict(row: Any) -> dict[str, Any] | None:
    if row is None:
        return None
    return {key: row[key] for key in row.keys()}
