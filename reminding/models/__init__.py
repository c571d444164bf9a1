"""
models/ - Domain Layer
======================
Plain dataclasses and enums describing subscriptions and their billing
cycles. No database or I/O code lives here.
"""

from reminding.models.billing_cycle import BillingCycle, CycleStep, CycleUnit
from reminding.models.errors import MalformedSubscriptionError, SubscriptionValidationError
from reminding.models.subscription import Subscription

__all__ = [
    "BillingCycle",
    "CycleStep",
    "CycleUnit",
    "MalformedSubscriptionError",
    "Subscription",
    "SubscriptionValidationError",
]
