"""Time windows and calendar buckets used by the analytics views."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from shared.clock import as_utc
from shared.errors import InvalidRequest

TIMEFRAMES = {
    "7 days": timedelta(days=7),
    "30 days": timedelta(days=30),
    "90 days": timedelta(days=90),
    "1 year": timedelta(days=365),
}
DEFAULT_TIMEFRAME = "30 days"

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class Bucket(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def parse_bucket(value) -> Bucket:
    if isinstance(value, Bucket):
        return value
    try:
        return Bucket(str(value).lower())
    except ValueError:
        raise InvalidRequest(f"Unknown bucket {value!r}; use day, week or month") from None


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidRequest("Window end must be after its start")

    @classmethod
    def trailing(cls, timeframe: str | None = None, as_of: datetime | None = None) -> "TimeWindow":
        timeframe = timeframe or DEFAULT_TIMEFRAME
        if timeframe not in TIMEFRAMES:
            raise InvalidRequest(f"Unknown timeframe {timeframe!r}; use one of {', '.join(TIMEFRAMES)}")
        end = as_utc(as_of) if as_of else datetime.now(UTC)
        return cls(start=end - TIMEFRAMES[timeframe], end=end)

    @classmethod
    def resolve(cls, start=None, end=None, timeframe=None, as_of=None) -> "TimeWindow":
        """Explicit bounds win over a trailing timeframe."""
        if start is None and end is None:
            return cls.trailing(timeframe, as_of)
        end = as_utc(end) if end else (as_utc(as_of) if as_of else datetime.now(UTC))
        start = as_utc(start) if start else end - TIMEFRAMES[DEFAULT_TIMEFRAME]
        return cls(start=start, end=end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) < self.end

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def bucket_key(moment: datetime, bucket: Bucket) -> str:
    """Calendar label for ``moment``: ``2024-03-07``, ``2024-W10`` or ``2024-03``."""
    moment = as_utc(moment)
    if bucket == Bucket.DAY:
        return moment.date().isoformat()
    if bucket == Bucket.WEEK:
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    return f"{moment.year}-{moment.month:02d}"


def period_start(moment: datetime, period: Bucket) -> datetime:
    """Start of the week (Monday) or month containing ``moment``."""
    moment = as_utc(moment)
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == Bucket.WEEK:
        return day - timedelta(days=day.weekday())
    if period == Bucket.MONTH:
        return day.replace(day=1)
    return day


def shift_period(start: datetime, period: Bucket, count: int) -> datetime:
    """Move a period start by ``count`` periods (negative goes back)."""
    if period == Bucket.DAY:
        return start + timedelta(days=count)
    if period == Bucket.WEEK:
        return start + timedelta(weeks=count)
    month_index = start.year * 12 + (start.month - 1) + count
    return start.replace(year=month_index // 12, month=month_index % 12 + 1, day=1)


def complete_periods(as_of: datetime, period: Bucket, count: int) -> list[tuple[datetime, datetime]]:
    """The ``count`` whole periods that ended before the period containing ``as_of``."""
    current = period_start(as_of, period)
    starts = [shift_period(current, period, -offset) for offset in range(count, 0, -1)]
    return [(start, shift_period(start, period, 1)) for start in starts]
