"""Normalization rules for the start/end/all-day triple edited in the event dialog.

Every function here is pure: it takes a :class:`TimeRange` (or raw input) and
returns a new value, never mutating its arguments. All-day ranges are stored
with an exclusive end, one day past the last included day.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

MIN_DURATION = timedelta(minutes=5)
DEFAULT_DURATION = timedelta(minutes=60)
ONE_DAY = timedelta(days=1)
TIMED_RESET_HOUR = 9

DATE_INPUT_FORMAT = "%Y-%m-%d"
DATETIME_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


@dataclass(frozen=True, slots=True)
class TimeRange:
    start: datetime
    end: datetime
    all_day: bool = False

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def display_end(self) -> datetime:
        """End value as shown to a user: the last included day for all-day ranges."""

        return self.end - ONE_DAY if self.all_day else self.end


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def clamp_end(start: datetime, proposed_end: datetime) -> datetime:
    """Return ``proposed_end`` unless it falls short of the minimum duration."""

    if proposed_end < start + MIN_DURATION:
        return start + DEFAULT_DURATION
    return proposed_end


def default_range(now: datetime) -> TimeRange:
    """A one-hour timed range starting at ``now`` rounded down to the quarter hour."""

    start = now.replace(minute=(now.minute // 15) * 15, second=0, microsecond=0)
    return TimeRange(start=start, end=start + DEFAULT_DURATION)


def normalize(range_: TimeRange) -> TimeRange:
    """Coerce an arbitrary range into one satisfying the dialog invariants."""

    if range_.all_day:
        start = start_of_day(range_.start)
        end = max(start_of_day(range_.end), start + ONE_DAY)
        return TimeRange(start=start, end=end, all_day=True)
    return replace(range_, end=clamp_end(range_.start, range_.end))


def toggle_all_day(range_: TimeRange, make_all_day: bool) -> TimeRange:
    if range_.all_day == make_all_day:
        return range_

    if make_all_day:
        return normalize(replace(range_, all_day=True))

    next_start = start_of_day(range_.start).replace(hour=TIMED_RESET_HOUR)
    minutes = max(60, int(range_.duration.total_seconds() // 60))
    return TimeRange(start=next_start, end=next_start + timedelta(minutes=minutes), all_day=False)


def parse_boundary_input(raw: str, all_day: bool, *, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse a date (all-day) or date-time (timed) field value.

    Returns ``None`` for anything unparseable so callers can ignore the keystroke.
    Naive values are interpreted in ``tz``.
    """

    text = (raw or "").strip()
    if not text:
        return None
    try:
        if all_day:
            parsed = datetime.combine(date.fromisoformat(text[:10]), time())
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def with_start_input(range_: TimeRange, raw: str, *, tz: Optional[tzinfo] = None) -> Optional[TimeRange]:
    parsed = parse_boundary_input(raw, range_.all_day, tz=tz or range_.start.tzinfo)
    if parsed is None:
        return None
    if range_.all_day:
        return replace(range_, start=parsed, end=max(range_.end, parsed + ONE_DAY))
    return replace(range_, start=parsed, end=clamp_end(parsed, range_.end))


def with_end_input(range_: TimeRange, raw: str, *, tz: Optional[tzinfo] = None) -> Optional[TimeRange]:
    parsed = parse_boundary_input(raw, range_.all_day, tz=tz or range_.end.tzinfo)
    if parsed is None:
        return None
    if range_.all_day:
        # the field shows the last included day; storage keeps the day after it
        exclusive_end = parsed + ONE_DAY
        return replace(range_, end=max(exclusive_end, range_.start + ONE_DAY))
    return replace(range_, end=clamp_end(range_.start, parsed))


def format_boundary(value: datetime, all_day: bool) -> str:
    return value.strftime(DATE_INPUT_FORMAT if all_day else DATETIME_INPUT_FORMAT)


__all__ = [
    "DEFAULT_DURATION",
    "MIN_DURATION",
    "ONE_DAY",
    "TimeRange",
    "clamp_end",
    "default_range",
    "format_boundary",
    "normalize",
    "parse_boundary_input",
    "start_of_day",
    "toggle_all_day",
    "with_end_input",
    "with_start_input",
]
