"""
services/recurrence_engine.py
-----------------------------
Renewal-date arithmetic for subscriptions.

Pure functions: no I/O and no state kept between calls. Every function
accepts ``date`` or ``datetime``; datetimes keep their time of day, while
all comparisons are made on the calendar date only.

Renewals are pinned to an anchor day (and, for yearly+ cycles, an anchor
month) instead of being derived from the previous renewal, so a 31st
anchor lands on the last day of short months rather than drifting.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from reminding.models.billing_cycle import BillingCycle, CycleUnit
from reminding.models.errors import MalformedSubscriptionError
from reminding.models.subscription import Subscription
from reminding.utils.date_helpers import as_date, is_last_day_of_month
from reminding.utils.logger import get_logger

logger = get_logger(__name__)

# Upper bound on generated renewals per call (100 years of monthly renewals).
MAX_ITERATIONS = 1200

DateLike = date | datetime


# ── CALENDAR STEPS ────────────────────────────────────────

def add_months(value: DateLike, n: int, anchor_day: int) -> DateLike:
    """
    Move ``value`` forward ``n`` calendar months, landing on ``anchor_day``.

    The anchor is clamped to the last day of the target month. A date that
    is itself a clamped renewal (below the anchor and on its month's last
    day) carries its day forward instead, so clamping does not heal:

        add_months(2024-01-31, 1, 31) -> 2024-02-29
        add_months(2024-02-29, 1, 31) -> 2024-03-29
        add_months(2024-01-31, 2, 31) -> 2024-03-31

    The check looks only at ``value``, so any month-end date below the anchor
    carries its day. Stepping one month at a time with anchor 31 from Jan 31
    gives Feb 29, Mar 29, Apr 30, May 30, Jun 30, Jul 30, Aug 31: a day that
    is not its month's last day targets the anchor again.

    Args:
        value: Date (or datetime) to move from.
        n: Number of months.
        anchor_day: Day of month renewals are pinned to (1-31).

    Returns:
        A value of the same type as ``value``.
    """
    target_day = anchor_day
    if value.day < anchor_day and is_last_day_of_month(value):
        target_day = value.day
    return value + relativedelta(months=n, day=target_day)


def add_years(value: DateLike, n: int, anchor_month: int, anchor_day: int) -> DateLike:
    """
    Move ``value`` forward ``n`` years, landing on ``anchor_month``/``anchor_day``.

    An anchor that does not exist in the target year is clamped to the end of
    the month; Feb 29 becomes Feb 28 outside leap years and returns to Feb 29
    in the next leap year.
    """
    return value + relativedelta(years=n, month=anchor_month, day=anchor_day)


def step(
    value: DateLike,
    cycle: BillingCycle,
    anchor_day: Optional[int],
    anchor_month: Optional[int] = None,
) -> DateLike:
    """
    Advance ``value`` by one renewal of ``cycle``.

    Raises:
        ValueError: For one-time subscriptions, which never renew.
    """
    cycle_step = BillingCycle.parse(cycle).step
    if cycle_step is None:
        raise ValueError("One-time subscriptions do not renew.")
    if cycle_step.unit is CycleUnit.MONTHS:
        return add_months(value, cycle_step.count, anchor_day)
    return add_years(value, cycle_step.count, anchor_month, anchor_day)


# ── ANCHORS ───────────────────────────────────────────────

def check_anchors(cycle: BillingCycle, anchor_day: Optional[int], anchor_month: Optional[int]) -> None:
    """
    Raises:
        MalformedSubscriptionError: If ``cycle`` needs an anchor that is
            missing or outside its calendar range.
    """
    cycle = BillingCycle.parse(cycle)
    if cycle.requires_anchor_day and not _in_range(anchor_day, 1, 31):
        raise MalformedSubscriptionError(
            f"{cycle.value} cycle needs an anchor day in 1-31, got {anchor_day!r}"
        )
    if cycle.requires_anchor_month and not _in_range(anchor_month, 1, 12):
        raise MalformedSubscriptionError(
            f"{cycle.value} cycle needs an anchor month in 1-12, got {anchor_month!r}"
        )


def _in_range(value, low: int, high: int) -> bool:
    return isinstance(value, int) and low <= value <= high


def _anchors_of(subscription: Subscription) -> tuple[Optional[int], Optional[int]]:
    try:
        check_anchors(subscription.billing_cycle, subscription.anchor_day, subscription.anchor_month)
    except MalformedSubscriptionError as e:
        raise MalformedSubscriptionError(
            f"Subscription '{subscription.name}' (id={subscription.id}): {e}", subscription
        ) from None
    return subscription.anchor_day, subscription.anchor_month


# ── OCCURRENCES ───────────────────────────────────────────

def first_occurrence_on_or_after(
    start_date: DateLike,
    cycle: BillingCycle,
    anchor_day: Optional[int] = None,
    anchor_month: Optional[int] = None,
) -> DateLike:
    """
    First renewal on or after ``start_date``.

    The candidate is the anchor inside ``start_date``'s own month (month-based
    cycles) or year (year-based cycles); if it falls before ``start_date``
    it is advanced by one cycle. One-time subscriptions return ``start_date``.

    Raises:
        MalformedSubscriptionError: If the anchors required by ``cycle`` are missing.
    """
    cycle = BillingCycle.parse(cycle)
    if not cycle.is_recurring:
        return start_date
    check_anchors(cycle, anchor_day, anchor_month)

    if cycle.is_month_based:
        candidate = start_date + relativedelta(day=anchor_day)
    else:
        candidate = start_date + relativedelta(month=anchor_month, day=anchor_day)

    if as_date(candidate) < as_date(start_date):
        candidate = step(candidate, cycle, anchor_day, anchor_month)
    return candidate


def iter_occurrences(subscription: Subscription, max_date: DateLike) -> Iterator[DateLike]:
    """
    Lazily yield renewal dates up to and including ``max_date``.

    Anchors are checked before the iterator is returned, so a malformed
    record fails at the call site rather than mid-iteration.

    Raises:
        MalformedSubscriptionError: If the record lacks anchors for its cycle.
    """
    if not subscription.billing_cycle.is_recurring:
        return iter(())
    anchor_day, anchor_month = _anchors_of(subscription)
    return _generate(subscription, anchor_day, anchor_month, as_date(max_date))


def _generate(
    subscription: Subscription,
    anchor_day: Optional[int],
    anchor_month: Optional[int],
    limit: date,
) -> Iterator[DateLike]:
    cycle = subscription.billing_cycle
    current = first_occurrence_on_or_after(subscription.start_date, cycle, anchor_day, anchor_month)

    for _ in range(MAX_ITERATIONS):
        if as_date(current) > limit:
            return
        yield current
        following = step(current, cycle, anchor_day, anchor_month)
        if as_date(following) <= as_date(current):
            logger.error(
                f"Renewal step for '{subscription.name}' (id={subscription.id}) did not advance "
                f"past {current}; stopping generation"
            )
            return
        current = following
    else:
        logger.warning(
            f"Stopped generating renewals for '{subscription.name}' (id={subscription.id}) "
            f"after {MAX_ITERATIONS} steps at {current}"
        )


def occurrences(subscription: Subscription, max_date: DateLike) -> list[DateLike]:
    """
    All renewal dates of ``subscription`` up to ``max_date`` (inclusive).

    The list is strictly increasing and recomputed from scratch on every
    call. One-time subscriptions have no renewals and return ``[]``; callers
    handle their single ``start_date`` themselves.

    Raises:
        MalformedSubscriptionError: If the record lacks anchors for its cycle.
    """
    return list(iter_occurrences(subscription, max_date))


def renews_on(subscription: Subscription, day: DateLike) -> bool:
    """True if ``subscription`` is due on the calendar date of ``day``."""
    target = as_date(day)
    if not subscription.billing_cycle.is_recurring:
        return as_date(subscription.start_date) == target
    return any(as_date(d) == target for d in iter_occurrences(subscription, target))


def next_occurrence(subscription: Subscription, after: DateLike) -> Optional[DateLike]:
    """
    First due date strictly after ``after``, or None if there is none.

    Renewals are walked from the start date, since a clamped renewal changes
    the day of every renewal that follows it.
    """
    after_day = as_date(after)
    if not subscription.billing_cycle.is_recurring:
        start = subscription.start_date
        return start if as_date(start) > after_day else None
    for d in iter_occurrences(subscription, date.max - timedelta(days=31)):
        if as_date(d) > after_day:
            return d
    return None
