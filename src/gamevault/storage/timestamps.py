"""RFC3339 timestamp helpers shared by the store and the sidecar sync."""

from datetime import datetime, timezone


def utc_now() -> str:
    """Current UTC time as an RFC3339 string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an RFC3339/ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Returns None for missing or
    unparsable input instead of raising.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def next_timestamp(previous: str | None) -> str:
    """
    Timestamp for a new write that never sorts before ``previous``.

    Guards against wall-clock steps backwards between two writes to
    the same row.
    """
    now = utc_now()
    prev = parse_timestamp(previous)
    if prev is not None and prev > datetime.fromisoformat(now):
        return prev.isoformat(timespec="microseconds")
    return now
