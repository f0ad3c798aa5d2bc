from datetime import datetime, timezone


def utcnow() -> datetime:
    """Column default for timestamps; sub-second precision keeps newest-first ordering stable."""
    return datetime.now(timezone.utc)
