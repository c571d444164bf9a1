"""
services/subscription_service.py
--------------------------------
Business logic for creating, editing and looking up subscriptions.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from reminding.config import UPCOMING_DAYS
from reminding.models.billing_cycle import BillingCycle
from reminding.models.subscription import Subscription
from reminding.repositories.base import SubscriptionStore
from reminding.services import recurrence_engine
from reminding.services.occurrence_service import Occurrence, occurrences_in_range
from reminding.utils.date_helpers import as_date
from reminding.utils.logger import get_logger

logger = get_logger(__name__)


class SubscriptionService:
    """
    Handles all business logic for subscriptions.

    Responsibilities:
        - Build validated subscriptions, defaulting anchors from the start date.
        - Persist, replace and delete them through the injected store.
        - Answer "what renews next" questions.
    """

    def __init__(self, store: SubscriptionStore):
        self.store = store

    def create(
        self,
        name: str,
        start_date: date | datetime | str,
        billing_cycle: BillingCycle | str,
        anchor_day: Optional[int] = None,
        anchor_month: Optional[int] = None,
        reminder_days: Optional[int] = None,
        category: Optional[str] = None,
        rating: Optional[int] = None,
        price: Optional[float] = None,
        custom_data: Optional[dict] = None,
    ) -> Subscription:
        """
        Validate and save a new subscription.

        Anchors left out default to the start date's day (recurring cycles)
        and month (yearly+ cycles).

        Returns:
            The saved Subscription with its `id` populated.

        Raises:
            SubscriptionValidationError: If the fields break an invariant.
        """
        cycle = BillingCycle.parse(billing_cycle)
        default_day, default_month = Subscription.anchors_from_start(start_date, cycle)
        if cycle.requires_anchor_day and anchor_day is None:
            anchor_day = default_day
        if cycle.requires_anchor_month and anchor_month is None:
            anchor_month = default_month
        if not cycle.is_recurring:
            anchor_day = anchor_month = None
        elif not cycle.requires_anchor_month:
            anchor_month = None

        subscription = Subscription(
            name=name.strip() if isinstance(name, str) else name,
            start_date=start_date,
            billing_cycle=cycle,
            anchor_day=anchor_day,
            anchor_month=anchor_month,
            reminder_days=reminder_days,
            category=category,
            rating=rating,
            price=price,
        )
        if custom_data:
            subscription.custom_data = custom_data
        self.store.save(subscription)
        return subscription

    def update(self, subscription: Subscription) -> Subscription:
        """
        Replace a stored subscription with ``subscription``. The stored
        ``unique_key`` and ``created_at`` are kept and copied back onto it.

        Raises:
            ValueError: If the subscription has never been saved.
            SubscriptionValidationError: If it breaks an invariant.
        """
        if subscription.id is None:
            raise ValueError("Cannot update a subscription that has not been saved.")
        subscription.ensure_valid()
        self.store.save(subscription)
        return subscription

    def delete(self, subscription_id: int) -> bool:
        """Delete a subscription by ID."""
        deleted = self.store.delete_by_id(subscription_id)
        if not deleted:
            logger.warning(f"Subscription #{subscription_id} not found for deletion")
        return deleted

    def get(self, subscription_id: int) -> Optional[Subscription]:
        return self.store.get_by_id(subscription_id)

    def list_all(self) -> list[Subscription]:
        return self.store.list_all()

    def upcoming(self, today: date | datetime, days: int = UPCOMING_DAYS) -> list[Occurrence]:
        """
        Renewals from ``today`` through ``today + days`` inclusive.

        Raises:
            ValueError: If ``days`` is negative.
        """
        if days < 0:
            raise ValueError("Look-ahead days cannot be negative.")
        start = as_date(today)
        return occurrences_in_range(self.store.list_all(), start, start + timedelta(days=days))

    def next_renewal(self, subscription_id: int, after: date | datetime) -> Optional[date | datetime]:
        """
        Next due date of a stored subscription strictly after ``after``.

        Returns:
            None if the subscription does not exist or will not be due again.
        """
        subscription = self.store.get_by_id(subscription_id)
        if subscription is None:
            return None
        return recurrence_engine.next_occurrence(subscription, after)
