from __future__ import annotations

from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_datetime(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.astimezone()
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.astimezone()
    raise ValueError(f"Unsupported datetime value: {value!r}")


def to_epoch_millis(value) -> int:
    """Epoch milliseconds for a datetime, ISO string or millisecond count."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError("Timestamp is required")
    return (parsed - _EPOCH) // timedelta(milliseconds=1)


def now_millis() -> int:
    return to_epoch_millis(datetime.now(timezone.utc))
