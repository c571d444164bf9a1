"""
repositories/base.py
--------------------
The record-store contract the services depend on.
"""

from typing import Optional, Protocol

from reminding.models.subscription import Subscription


class SubscriptionStore(Protocol):
    def list_all(self) -> list[Subscription]:
        """Return every stored subscription. No filtering happens here."""
        ...

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        ...

    def save(self, subscription: Subscription) -> int:
        """Insert when ``subscription.id`` is None, otherwise replace. Returns the id."""
        ...

    def delete_by_id(self, subscription_id: int) -> bool:
        ...
