"""
models/errors.py
----------------
Exceptions raised by the domain layer.
"""


class SubscriptionValidationError(ValueError):
    """A subscription was constructed with missing or out-of-range fields."""


class MalformedSubscriptionError(ValueError):
    """
    A stored subscription lacks the anchor fields its billing cycle needs.

    Raised by the recurrence engine; query code catches it per record so a
    single corrupted row never blocks results for the others.
    """

    def __init__(self, message: str, subscription=None):
        super().__init__(message)
        self.subscription = subscription
