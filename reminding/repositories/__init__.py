"""
repositories/ - Data Access Layer
==================================
Record stores for subscriptions. Every store offers the same four
operations (list_all, get_by_id, save, delete_by_id) and returns domain
model objects; services receive a store instance explicitly.
"""

from reminding.repositories.base import SubscriptionStore
from reminding.repositories.memory_repo import InMemorySubscriptionRepository
from reminding.repositories.subscription_repo import SubscriptionRepository

__all__ = ["InMemorySubscriptionRepository", "SubscriptionRepository", "SubscriptionStore"]
