"""UTC helpers.

Relational providers hand datetimes back without a timezone; everything
stored by this service is UTC, so naive values are read as UTC.
"""

from datetime import UTC, datetime


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def as_utc_or_none(moment: datetime | None) -> datetime | None:
    return as_utc(moment) if moment is not None else None
