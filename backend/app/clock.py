"""Current-time capability shared by the services."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Return the current time as a timezone-naive UTC datetime.

    Timestamps are stored naive-UTC so SQLite and PostgreSQL compare them the
    same way. Services accept an explicit ``now`` and fall back to this.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
