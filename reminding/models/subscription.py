"""
models/subscription.py
----------------------
Domain model for tracked subscriptions (streaming, software, memberships...).
"""

import dataclasses
import json
import uuid
from dataclasses import InitVar, dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from reminding.models.billing_cycle import BillingCycle
from reminding.models.errors import SubscriptionValidationError
from reminding.utils.date_helpers import parse_date, parse_datetime, to_iso_datetime
from reminding.utils.logger import get_logger

logger = get_logger(__name__)

# Columns of the persisted representation, in table order.
COLUMNS = (
    "id",
    "unique_key",
    "name",
    "created_at",
    "start_date",
    "billing_cycle",
    "anchor_day",
    "anchor_month",
    "reminder_days",
    "category",
    "rating",
    "price",
    "custom_fields",
)


def _new_unique_key() -> str:
    return str(uuid.uuid4())


def _is_whole_number(value: Any) -> bool:
    # bool is an int subclass; True must not pass as day 1.
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class Subscription:
    """
    Represents a subscription the user pays for once or on a cycle.

    Attributes:
        name: Display name (e.g., 'Netflix', 'Gym').
        start_date: Calendar date the subscription began; origin for renewals.
        billing_cycle: One of the 7 BillingCycle values.
        anchor_day: Day of month renewals fall on (1-31). Required unless one-time.
        anchor_month: Month renewals fall on (1-12). Required for yearly+ cycles.
        reminder_days: Days before renewal to remind. Stored only.
        category: Free-form grouping label.
        rating: 1-5 stars.
        price: Price per renewal.
        custom_fields: JSON object string with user-defined extra data.
        id: Database primary key (None for new records).
        unique_key: UUID generated once, stable for the record's lifetime.
        created_at: Timestamp when the object was first constructed.
        validate: Pass False to load a stored record verbatim without checks.
    """
    name: str
    start_date: date
    billing_cycle: BillingCycle
    anchor_day: Optional[int] = None
    anchor_month: Optional[int] = None
    reminder_days: Optional[int] = None
    category: Optional[str] = None
    rating: Optional[int] = None
    price: Optional[float] = None
    custom_fields: Optional[str] = None
    id: Optional[int] = None
    unique_key: str = field(default_factory=_new_unique_key)
    created_at: datetime = field(default_factory=datetime.now)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool) -> None:
        try:
            self.start_date = parse_date(self.start_date)
        except (TypeError, ValueError) as e:
            raise SubscriptionValidationError(f"Invalid start date: {self.start_date!r}") from e
        self.billing_cycle = BillingCycle.parse(self.billing_cycle)
        if isinstance(self.created_at, str):
            self.created_at = parse_datetime(self.created_at)
        if validate:
            self.ensure_valid()

    # ── VALIDATION ────────────────────────────────────────

    def validation_errors(self) -> list[str]:
        """Return a message for every invariant this record violates."""
        errors = []
        if not isinstance(self.name, str) or not self.name.strip():
            errors.append("Name cannot be empty.")

        cycle = self.billing_cycle
        if cycle.requires_anchor_day:
            if self.anchor_day is None:
                errors.append(f"Anchor day is required for {cycle.value} subscriptions.")
            elif not _is_whole_number(self.anchor_day) or not 1 <= self.anchor_day <= 31:
                errors.append(f"Anchor day must be a whole number between 1 and 31, got {self.anchor_day!r}.")
        if cycle.requires_anchor_month:
            if self.anchor_month is None:
                errors.append(f"Anchor month is required for {cycle.value} subscriptions.")
            elif not _is_whole_number(self.anchor_month) or not 1 <= self.anchor_month <= 12:
                errors.append(f"Anchor month must be a whole number between 1 and 12, got {self.anchor_month!r}.")

        if self.rating is not None and (not _is_whole_number(self.rating) or not 1 <= self.rating <= 5):
            errors.append(f"Rating must be a whole number between 1 and 5, got {self.rating!r}.")
        if self.price is not None and (not _is_number(self.price) or self.price < 0):
            errors.append(f"Price must be a non-negative number, got {self.price!r}.")
        if self.reminder_days is not None and (
            not _is_whole_number(self.reminder_days) or self.reminder_days < 0
        ):
            errors.append(f"Reminder days must be a non-negative whole number, got {self.reminder_days!r}.")
        return errors

    def ensure_valid(self) -> None:
        """
        Raises:
            SubscriptionValidationError: If any invariant is violated.
        """
        errors = self.validation_errors()
        if errors:
            raise SubscriptionValidationError(" ".join(errors))

    @staticmethod
    def anchors_from_start(
        start_date: date, billing_cycle: BillingCycle
    ) -> tuple[Optional[int], Optional[int]]:
        """
        Default anchors for a new subscription: the start date's day for any
        recurring cycle, and its month as well for yearly+ cycles.
        """
        cycle = BillingCycle.parse(billing_cycle)
        try:
            start = parse_date(start_date)
        except (TypeError, ValueError) as e:
            raise SubscriptionValidationError(f"Invalid start date: {start_date!r}") from e
        day = start.day if cycle.requires_anchor_day else None
        month = start.month if cycle.requires_anchor_month else None
        return day, month

    def replace(self, **changes) -> "Subscription":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    # ── CUSTOM DATA ───────────────────────────────────────

    @property
    def custom_data(self) -> dict[str, Any]:
        """
        Decoded ``custom_fields``. Broken payloads are treated as empty.
        """
        if not self.custom_fields:
            return {}
        try:
            data = json.loads(self.custom_fields)
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable custom fields for '{self.name}': {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring custom fields for '{self.name}': expected an object")
            return {}
        return data

    @custom_data.setter
    def custom_data(self, data: Optional[dict[str, Any]]) -> None:
        self.custom_fields = json.dumps(data) if data else None

    # ── SERIALIZATION ─────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """
        Persisted representation. ``id`` is left out until the record is saved;
        ``start_date`` is written as midnight so only the date survives.
        """
        row = {
            "unique_key": self.unique_key,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "start_date": to_iso_datetime(self.start_date),
            "billing_cycle": self.billing_cycle.value,
            "anchor_day": self.anchor_day,
            "anchor_month": self.anchor_month,
            "reminder_days": self.reminder_days,
            "category": self.category,
            "rating": self.rating,
            "price": self.price,
            "custom_fields": self.custom_fields,
        }
        if self.id is not None:
            row["id"] = self.id
        return row

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "Subscription":
        """
        Rebuild a stored record. Values are taken verbatim and anchors are not
        validated, so a corrupted row still loads and can be skipped later.
        """
        price = row.get("price")
        return cls(
            id=row.get("id"),
            unique_key=row["unique_key"],
            name=row["name"],
            created_at=row["created_at"],
            start_date=row["start_date"],
            billing_cycle=row["billing_cycle"],
            anchor_day=row.get("anchor_day"),
            anchor_month=row.get("anchor_month"),
            reminder_days=row.get("reminder_days"),
            category=row.get("category"),
            rating=row.get("rating"),
            price=float(price) if price is not None else None,
            custom_fields=row.get("custom_fields"),
            validate=False,
        )

    def __str__(self) -> str:
        price = f" {self.price:.2f}" if self.price is not None else ""
        return f"{self.name}{price} ({self.billing_cycle.value}) - since {self.start_date}"
