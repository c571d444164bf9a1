"""
models/billing_cycle.py
-----------------------
The closed set of billing cycles a subscription can have.
"""

from enum import Enum
from typing import NamedTuple, Optional

from reminding.models.errors import SubscriptionValidationError


class CycleUnit(str, Enum):
    MONTHS = "months"
    YEARS = "years"


class CycleStep(NamedTuple):
    """How far one renewal moves the date: ``count`` units of ``unit``."""
    unit: CycleUnit
    count: int


class BillingCycle(str, Enum):
    """
    Billing frequency. Values are the names stored in the database.

    Month-based cycles pin only the day of month; year-based cycles pin
    both month and day.
    """
    ONE_TIME = "oneTime"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semiAnnually"
    YEARLY = "yearly"
    EVERY_TWO_YEARS = "everyTwoYears"
    EVERY_THREE_YEARS = "everyThreeYears"

    @classmethod
    def parse(cls, value: "str | BillingCycle") -> "BillingCycle":
        """
        Convert a stored name to a BillingCycle.

        Raises:
            SubscriptionValidationError: If the name is not one of the 7 cycles.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise SubscriptionValidationError(f"Unknown billing cycle: {value!r}") from None

    @property
    def step(self) -> Optional[CycleStep]:
        """The cycle's step, or None for one-time subscriptions."""
        return _STEPS[self]

    @property
    def is_recurring(self) -> bool:
        return self.step is not None

    @property
    def is_month_based(self) -> bool:
        return self.is_recurring and self.step.unit is CycleUnit.MONTHS

    @property
    def is_year_based(self) -> bool:
        return self.is_recurring and self.step.unit is CycleUnit.YEARS

    @property
    def requires_anchor_day(self) -> bool:
        return self.is_recurring

    @property
    def requires_anchor_month(self) -> bool:
        return self.is_year_based


_STEPS: dict[BillingCycle, Optional[CycleStep]] = {
    BillingCycle.ONE_TIME: None,
    BillingCycle.MONTHLY: CycleStep(CycleUnit.MONTHS, 1),
    BillingCycle.QUARTERLY: CycleStep(CycleUnit.MONTHS, 3),
    BillingCycle.SEMI_ANNUALLY: CycleStep(CycleUnit.MONTHS, 6),
    BillingCycle.YEARLY: CycleStep(CycleUnit.YEARS, 1),
    BillingCycle.EVERY_TWO_YEARS: CycleStep(CycleUnit.YEARS, 2),
    BillingCycle.EVERY_THREE_YEARS: CycleStep(CycleUnit.YEARS, 3),
}

# Every cycle needs a row in the step table.
_missing = set(BillingCycle) - set(_STEPS)
if _missing:
    raise RuntimeError(f"No step defined for billing cycles: {sorted(c.value for c in _missing)}")
