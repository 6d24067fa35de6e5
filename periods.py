from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

# Millisecond precision, matching what clients send for "end of day".
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date

    @property
    def starts_at(self) -> datetime:
        return start_of_day(self.start)

    @property
    def ends_at(self) -> datetime:
        return end_of_day(self.end)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min)


def end_of_day(value: date) -> datetime:
    return datetime.combine(value, END_OF_DAY)


def lower_bound(value: date) -> datetime:
    if isinstance(value, datetime):
        return to_utc_naive(value)
    return start_of_day(value)


def upper_bound(value: date) -> datetime:
    """Bare dates extend to the end of that day so same-day rows match."""
    if isinstance(value, datetime):
        return to_utc_naive(value)
    return end_of_day(value)


def resolve_period(
    period: Optional[str],
    start: Optional[str],
    end: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    today = today or utc_today()
    if not period or period == "all":
        return Period("all", date(1970, 1, 1), today)
    if period == "last_month":
        first_this = today.replace(day=1)
        last_month_end = first_this - date.resolution
        last_month_start = last_month_end.replace(day=1)
        return Period("last_month", last_month_start, last_month_end)
    if period == "this_year":
        return Period(
            "this_year",
            today.replace(month=1, day=1),
            today.replace(month=12, day=31),
        )
    if period == "custom":
        if not start or not end:
            raise ValueError("Custom period requires start and end dates")
        start_date = date.fromisoformat(start)
        end_date = date.fromisoformat(end)
        if start_date > end_date:
            raise ValueError("Start date must be before end date")
        return Period("custom", start_date, end_date)

    # this month
    first = today.replace(day=1)
    if first.month == 12:
        next_month = first.replace(year=first.year + 1, month=1)
    else:
        next_month = first.replace(month=first.month + 1)
    end_this = next_month - date.resolution
    return Period("this_month", first, end_this)
