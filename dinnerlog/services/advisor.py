"""
Repeat-dish advisor.

Answers two questions over a user's serving history:
- Which of these candidate guests already had which of these candidate dishes recently?
- Which dishes were served most recently, and how often?

The aggregation and ordering rules live in the pure functions below. Fetching
rows from the database is delegated to a ``fetch_records`` callable with the
signature of ``serving_records.fetch_serving_records``.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Union


DEFAULT_WINDOW_MONTHS = 3
DEFAULT_RECENT_LIMIT = 10


class AdvisorError(Exception):
    """Base class for advisor failures."""


class InvalidArgument(AdvisorError):
    """Raised for malformed input (bad identifier, non-positive limit, ...)."""


class UpstreamUnavailable(AdvisorError):
    """Raised when the underlying query could not be executed."""


@dataclass(frozen=True)
class ServingRecord:
    """Guest X was served dish Y at event Z on date D."""

    guest_id: int
    dish_id: int
    event_id: int
    event_title: str
    served_at: datetime


@dataclass(frozen=True)
class RepeatAlert:
    """A candidate guest already had a candidate dish inside the recency window."""

    guest_id: int
    dish_id: int
    last_served: datetime
    event_title: str


@dataclass(frozen=True)
class DishServingSummary:
    """When a dish was last served and how many serving records it has."""

    dish_id: int
    last_served: datetime
    times_served: int


def months_before(moment: datetime, months: int) -> datetime:
    """Same wall-clock time ``months`` calendar months earlier.

    The day is clamped to the length of the target month (May 31 -> Feb 28/29).
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def as_naive_utc(moment: datetime) -> datetime:
    """Event dates are stored as naive UTC; aware values are converted to match."""
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def window_start(now: datetime, window: Union[int, timedelta]) -> datetime:
    """Inclusive lower bound of the recency window ending at ``now``.

    An int is a number of calendar months, a timedelta is an exact duration.
    """
    if isinstance(window, timedelta):
        if window < timedelta(0):
            raise InvalidArgument('recency window must not be negative')
        return now - window
    if isinstance(window, bool) or not isinstance(window, int) or window < 0:
        raise InvalidArgument(f'recency window must be a non-negative number of months, got {window!r}')
    return months_before(now, window)


def validate_ids(ids: Optional[Iterable], label: str) -> frozenset:
    """Return the identifiers as a frozenset, rejecting anything that isn't a positive int."""
    if ids is None:
        return frozenset()
    if isinstance(ids, (str, bytes)):
        raise InvalidArgument(f'{label} must be a collection of ids')
    try:
        items = list(ids)
    except TypeError:
        raise InvalidArgument(f'{label} must be a collection of ids')
    for item in items:
        if isinstance(item, bool) or not isinstance(item, int) or item <= 0:
            raise InvalidArgument(f'{label} contains an invalid id: {item!r}')
    return frozenset(items)


def collapse_repeats(records: Iterable[ServingRecord], guest_ids, dish_ids, since: datetime) -> list:
    """Collapse matching records into one alert per (guest, dish) pair, newest first.

    A record matches when its guest and dish are candidates and it was served
    at or after ``since``. The alert keeps the most recent serving and that
    event's title; equal dates fall back to the lowest event id.
    """
    if not guest_ids or not dish_ids:
        return []

    latest = {}
    for record in records:
        if record.guest_id not in guest_ids or record.dish_id not in dish_ids:
            continue
        if record.served_at < since:
            continue
        key = (record.guest_id, record.dish_id)
        current = latest.get(key)
        if current is None or (record.served_at, -record.event_id) > (current.served_at, -current.event_id):
            latest[key] = record

    alerts = [
        RepeatAlert(
            guest_id=record.guest_id,
            dish_id=record.dish_id,
            last_served=record.served_at,
            event_title=record.event_title,
        )
        for record in latest.values()
    ]
    # Newest first; ties by guest then dish id
    alerts.sort(key=lambda a: (a.guest_id, a.dish_id))
    alerts.sort(key=lambda a: a.last_served, reverse=True)
    return alerts


def summarize_dishes(records: Iterable[ServingRecord], limit: int) -> list:
    """Per-dish last served date and number of serving records, newest first, cut to ``limit``.

    The cut happens after aggregating every record. Ties on date keep the lower dish id.
    """
    last_served = {}
    counts = {}
    for record in records:
        if record.dish_id not in last_served or record.served_at > last_served[record.dish_id]:
            last_served[record.dish_id] = record.served_at
        counts[record.dish_id] = counts.get(record.dish_id, 0) + 1

    summaries = [
        DishServingSummary(dish_id=dish_id, last_served=served_at, times_served=counts[dish_id])
        for dish_id, served_at in last_served.items()
    ]
    summaries.sort(key=lambda s: s.dish_id)
    summaries.sort(key=lambda s: s.last_served, reverse=True)
    return summaries[:limit]


class RepeatServingAdvisor:
    """Stateless facade over a serving-record source."""

    def __init__(self, fetch_records: Callable, window: Union[int, timedelta] = DEFAULT_WINDOW_MONTHS,
                 default_limit: int = DEFAULT_RECENT_LIMIT):
        self.fetch_records = fetch_records
        self.window = window
        self.default_limit = default_limit

    def find_repeat_alerts(self, user_id, guest_ids, dish_ids, window=None, now: Optional[datetime] = None) -> list:
        """
        Find candidate guest/dish pairs that were already served together recently.

        Args:
            user_id: Owner of the events to look at
            guest_ids: Candidate guest ids
            dish_ids: Candidate dish ids
            window: Months (int) or timedelta; defaults to the advisor's window
            now: Reference time, defaults to utcnow

        Returns:
            list of RepeatAlert, most recent first. Empty when nothing matches.
        """
        _check_user(user_id)
        guest_ids = validate_ids(guest_ids, 'guest_ids')
        dish_ids = validate_ids(dish_ids, 'dish_ids')
        since = window_start(as_naive_utc(now or datetime.utcnow()), self.window if window is None else window)

        if not guest_ids or not dish_ids:
            return []

        records = self.fetch_records(user_id, since=since, guest_ids=guest_ids, dish_ids=dish_ids)
        return collapse_repeats(records, guest_ids, dish_ids, since)

    def recently_served_dishes(self, user_id, limit: Optional[int] = None) -> list:
        """
        Dishes from the user's whole history, most recently served first.

        Raises InvalidArgument when limit is not a positive int.
        """
        _check_user(user_id)
        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise InvalidArgument(f'limit must be a positive integer, got {limit!r}')

        records = self.fetch_records(user_id)
        return summarize_dishes(records, limit)


def _check_user(user_id):
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidArgument('user_id is required')
