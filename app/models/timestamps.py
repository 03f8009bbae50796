from datetime import datetime, timezone


def utcnow() -> datetime:
    """Client-side creation timestamp; keeps sub-second ordering on every backend."""
    return datetime.now(timezone.utc)
