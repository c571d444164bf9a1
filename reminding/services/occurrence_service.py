"""
services/occurrence_service.py
------------------------------
Calendar queries over the full set of subscriptions: which subscriptions
are due on a given day, and which renewals fall inside a date range.

The module-level functions are pure and work on any iterable of
subscriptions. ``OccurrenceService`` wraps them around a record store that
is handed in at construction and re-read on every call.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple, Optional

from reminding.config import CALENDAR_MONTHS_AFTER, CALENDAR_MONTHS_BEFORE
from reminding.models.errors import MalformedSubscriptionError
from reminding.models.subscription import Subscription
from reminding.repositories.base import SubscriptionStore
from reminding.services import recurrence_engine
from reminding.utils.date_helpers import as_date, month_window
from reminding.utils.logger import get_logger

logger = get_logger(__name__)


class Occurrence(NamedTuple):
    """A subscription paired with one date it is due."""
    subscription: Subscription
    date: date | datetime


def _sorted(found: list[Occurrence]) -> list[Occurrence]:
    # sorted() is stable: equal dates keep the store's order
    return sorted(found, key=lambda occ: as_date(occ.date))


def _skip(subscription: Subscription, error: MalformedSubscriptionError) -> None:
    logger.warning(f"Skipping malformed subscription #{subscription.id}: {error}")


# ── QUERIES ───────────────────────────────────────────────

def occurrences_on_day(subscriptions: Iterable[Subscription], day: date | datetime) -> list[Occurrence]:
    """
    Subscriptions due on the calendar date of ``day``.

    One-time subscriptions match on their start date; recurring ones match
    when a generated renewal falls on that date. Each subscription appears
    at most once. Malformed records are logged and skipped.

    Args:
        subscriptions: Every subscription to consider.
        day: The day to check; any time of day is ignored.

    Returns:
        List of Occurrence tuples ordered by date.
    """
    target = as_date(day)
    found: list[Occurrence] = []

    for sub in subscriptions:
        if not sub.billing_cycle.is_recurring:
            if as_date(sub.start_date) == target:
                found.append(Occurrence(sub, sub.start_date))
            continue
        try:
            dates = recurrence_engine.occurrences(sub, target + timedelta(days=1))
        except MalformedSubscriptionError as e:
            _skip(sub, e)
            continue
        for d in dates:
            if as_date(d) == target:
                found.append(Occurrence(sub, d))
                break

    return _sorted(found)


def occurrences_in_range(
    subscriptions: Iterable[Subscription],
    start: date | datetime,
    end: date | datetime,
) -> list[Occurrence]:
    """
    Every renewal inside ``[start, end]`` (inclusive calendar dates).

    A recurring subscription can contribute several tuples across a
    multi-month range. Results from all subscriptions are merged and ordered
    by date, not grouped per subscription.

    Returns:
        List of Occurrence tuples ordered by date; empty if ``end < start``.
    """
    first, last = as_date(start), as_date(end)
    if last < first:
        return []
    found: list[Occurrence] = []

    for sub in subscriptions:
        if not sub.billing_cycle.is_recurring:
            if first <= as_date(sub.start_date) <= last:
                found.append(Occurrence(sub, sub.start_date))
            continue
        try:
            dates = recurrence_engine.occurrences(sub, last)
        except MalformedSubscriptionError as e:
            _skip(sub, e)
            continue
        found.extend(Occurrence(sub, d) for d in dates if as_date(d) >= first)

    return _sorted(found)


def group_by_day(occurrences: Iterable[Occurrence]) -> dict[date, list[Occurrence]]:
    """
    Bucket occurrences by calendar date, e.g. for calendar day markers.
    Keys come out in ascending date order.
    """
    grouped: dict[date, list[Occurrence]] = {}
    for occ in _sorted(list(occurrences)):
        grouped.setdefault(as_date(occ.date), []).append(occ)
    return grouped


def calendar_window(
    focused_day: date | datetime,
    months_before: int = CALENDAR_MONTHS_BEFORE,
    months_after: int = CALENDAR_MONTHS_AFTER,
) -> tuple[date, date]:
    """
    Date range loaded for a calendar page: whole months around the focused
    month, by default from the first day of the previous month to the last
    day of the next one.
    """
    return month_window(focused_day, months_before, months_after)


# ── SERVICE ───────────────────────────────────────────────

class OccurrenceService:
    """
    Answers calendar queries against a record store.

    Every call takes a fresh snapshot through ``store.list_all()``; nothing
    is cached between calls.
    """

    def __init__(self, store: SubscriptionStore):
        self.store = store

    def on_day(self, day: date | datetime) -> list[Occurrence]:
        """Subscriptions due on ``day``."""
        return occurrences_on_day(self.store.list_all(), day)

    def in_range(self, start: date | datetime, end: date | datetime) -> list[Occurrence]:
        """Renewals between ``start`` and ``end`` inclusive."""
        return occurrences_in_range(self.store.list_all(), start, end)

    def calendar_events(self, focused_day: date | datetime) -> dict[date, list[Occurrence]]:
        """Day-keyed renewals for the calendar page around ``focused_day``."""
        start, end = calendar_window(focused_day)
        return group_by_day(self.in_range(start, end))

    def renews_on(self, subscription_id: int, day: date | datetime) -> Optional[bool]:
        """
        Whether the stored subscription is due on ``day``.

        Returns:
            None if no subscription has that id.

        Raises:
            MalformedSubscriptionError: If the record lacks anchors for its cycle.
        """
        sub = self.store.get_by_id(subscription_id)
        if sub is None:
            return None
        return recurrence_engine.renews_on(sub, day)
