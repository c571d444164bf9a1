"""
Pytest configuration and shared fixtures for the reminding test suite.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure the package is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from reminding.models import BillingCycle, Subscription
from reminding.repositories import InMemorySubscriptionRepository


@pytest.fixture
def make_subscription():
    """
    Build a Subscription, defaulting anchors from the start date the same
    way the subscription service does. Pass anchors explicitly (including
    None) to override.
    """
    def _make(start_date, billing_cycle=BillingCycle.MONTHLY, name="Netflix", **kwargs):
        cycle = BillingCycle.parse(billing_cycle)
        day, month = Subscription.anchors_from_start(start_date, cycle)
        kwargs.setdefault("anchor_day", day)
        kwargs.setdefault("anchor_month", month)
        return Subscription(name=name, start_date=start_date, billing_cycle=cycle, **kwargs)

    return _make


@pytest.fixture
def store():
    """An empty in-memory subscription store."""
    return InMemorySubscriptionRepository()


@pytest.fixture
def mock_db():
    """
    A Database stand-in whose connection hands out one shared cursor mock.

    Access the cursor as ``mock_db.cursor`` and the connection as ``mock_db.conn``.
    """
    db = MagicMock()
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    db.get_connection.return_value = conn
    db.conn = conn
    db.cursor = cursor
    return db
