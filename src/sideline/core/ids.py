from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def now_utc() -> datetime:
    return datetime.now(UTC)


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def coerce_datetime(value: object) -> datetime | None:
    """Accept datetimes, ISO strings, epoch seconds and ``{"seconds": n}`` timestamp documents."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, dict) and "seconds" in value:
        return datetime.fromtimestamp(float(value["seconds"]), UTC)
    if isinstance(value, (int, float)):
        # millisecond epochs from older documents
        seconds = value / 1000 if value > 10_000_000_000 else value
        return datetime.fromtimestamp(float(seconds), UTC)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ValueError(f"unsupported timestamp value: {value!r}")
