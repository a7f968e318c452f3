from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC wall-clock time without tzinfo.

    Timestamp columns are TIMESTAMP WITHOUT TIME ZONE and hold UTC, so values
    written and compared against them stay naive.
    """
    return datetime.now(UTC).replace(tzinfo=None)
