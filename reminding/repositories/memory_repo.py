"""
repositories/memory_repo.py
---------------------------
Dict-backed subscription store. Used by tests and by callers that keep
subscriptions in memory. Records are copied on the way in and out, so
stored state only changes through ``save``.
"""

import copy
from typing import Optional

from reminding.models.subscription import Subscription
from reminding.utils.logger import get_logger

logger = get_logger(__name__)


class InMemorySubscriptionRepository:
    """In-memory implementation of the SubscriptionStore contract."""

    def __init__(self, subscriptions: Optional[list[Subscription]] = None):
        self._rows: dict[int, Subscription] = {}
        self._next_id = 1
        for sub in subscriptions or []:
            self.save(sub)

    def list_all(self) -> list[Subscription]:
        return [copy.copy(s) for s in self._rows.values()]

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        row = self._rows.get(subscription_id)
        return copy.copy(row) if row else None

    def save(self, subscription: Subscription) -> int:
        """
        Insert or replace a subscription and return its id.

        A replacement keeps the stored ``unique_key`` and ``created_at``;
        both are copied back onto ``subscription``.

        Raises:
            ValueError: If a new record reuses a stored unique key.
            LookupError: If replacing an id that is not stored.
        """
        if subscription.id is None:
            if any(row.unique_key == subscription.unique_key for row in self._rows.values()):
                raise ValueError(f"Duplicate unique key: {subscription.unique_key}")
            subscription.id = self._next_id
            self._next_id += 1
            logger.info(f"Added subscription '{subscription.name}' #{subscription.id}")
        elif subscription.id not in self._rows:
            raise LookupError(f"Subscription #{subscription.id} does not exist")
        else:
            stored = self._rows[subscription.id]
            subscription.unique_key = stored.unique_key
            subscription.created_at = stored.created_at
            logger.info(f"Updated subscription '{subscription.name}' #{subscription.id}")

        self._rows[subscription.id] = copy.copy(subscription)
        return subscription.id

    def delete_by_id(self, subscription_id: int) -> bool:
        deleted = self._rows.pop(subscription_id, None) is not None
        if deleted:
            logger.info(f"Deleted subscription #{subscription_id}")
        return deleted
