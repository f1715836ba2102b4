from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """ISO-8601 with millisecond precision and a Z suffix, e.g. 2026-02-03T13:21:03.120Z"""
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")
