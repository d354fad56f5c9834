from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, PlainSerializer


def as_naive_utc(value: datetime) -> datetime:
    """Timestamps are kept as naive UTC; aware values are converted."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_utc_iso(value: datetime) -> str:
    return value.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")


# Naive UTC in memory, "...Z" on the wire
UtcDatetime = Annotated[
    datetime,
    AfterValidator(as_naive_utc),
    PlainSerializer(to_utc_iso, return_type=str, when_used="json"),
]
