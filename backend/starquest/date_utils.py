"""Date helpers shared by the approval flows."""

from datetime import date, datetime, time, timezone
from typing import Optional


def to_iso_timestamp(moment: datetime) -> str:
    """Format an aware datetime as UTC ISO-8601 with millisecond precision."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    return to_iso_timestamp(datetime.now(timezone.utc))


def to_approval_timestamp(date_str: Optional[str]) -> str:
    """Turn a picked approval date into the stored ``reviewed_at`` value.

    A ``YYYY-MM-DD`` date maps to noon UTC on that day so the timestamp
    lands on the same calendar date in every timezone.  Without a date the
    current time is used.
    """
    if not date_str:
        return utc_now_iso()
    picked = date.fromisoformat(date_str)
    return to_iso_timestamp(
        datetime.combine(picked, time(12, 0), tzinfo=timezone.utc)
    )
