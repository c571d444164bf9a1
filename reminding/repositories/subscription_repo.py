"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions.
All SQL queries related to the `subscriptions` table live here.
"""

from typing import Optional

from reminding.db.connection import Database
from reminding.models.subscription import COLUMNS, Subscription
from reminding.utils.logger import get_logger

logger = get_logger(__name__)

_SELECT_COLUMNS = ", ".join(COLUMNS)
# Everything except the primary key, in COLUMNS order.
_DATA_COLUMNS = COLUMNS[1:]
# Set once at insert; UPDATE never touches them.
_FIXED_COLUMNS = ("unique_key", "created_at")
_UPDATE_COLUMNS = tuple(col for col in _DATA_COLUMNS if col not in _FIXED_COLUMNS)


class SubscriptionRepository:
    """Repository for CRUD operations on the subscriptions table."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE / UPDATE ───────────────────────────────────

    def save(self, subscription: Subscription) -> int:
        """
        Insert a new subscription or replace an existing one.

        Args:
            subscription: Inserted when its `id` is None, otherwise updated in place.

        Returns:
            The subscription's id. New records also get `id` set on the object.

        Raises:
            LookupError: If updating an id that does not exist.
        """
        if subscription.id is None:
            return self._insert(subscription)
        return self._update(subscription)

    def _insert(self, subscription: Subscription) -> int:
        placeholders = ", ".join(["%s"] * len(_DATA_COLUMNS))
        sql = f"""
            INSERT INTO subscriptions ({", ".join(_DATA_COLUMNS)})
            VALUES ({placeholders})
            RETURNING id;
        """
        conn = self.db.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, self._params(subscription))
                subscription.id = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Added subscription '{subscription.name}' #{subscription.id}")
            return subscription.id
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add subscription '{subscription.name}': {e}")
            raise
        finally:
            self.db.release_connection(conn)

    def _update(self, subscription: Subscription) -> int:
        """Update in place. The stored unique_key/created_at are kept and copied back."""
        assignments = ", ".join(f"{col} = %s" for col in _UPDATE_COLUMNS)
        sql = f"""
            UPDATE subscriptions SET {assignments}
            WHERE id = %s
            RETURNING {", ".join(_FIXED_COLUMNS)};
        """
        values = dict(zip(_DATA_COLUMNS, self._params(subscription)))
        params = tuple(values[col] for col in _UPDATE_COLUMNS)
        conn = self.db.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (*params, subscription.id))
                row = cur.fetchone()
                if row is None:
                    raise LookupError(f"Subscription #{subscription.id} does not exist")
            conn.commit()
            subscription.unique_key, subscription.created_at = row
            logger.info(f"Updated subscription '{subscription.name}' #{subscription.id}")
            return subscription.id
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update subscription #{subscription.id}: {e}")
            raise
        finally:
            self.db.release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def list_all(self) -> list[Subscription]:
        """
        Fetch every subscription.

        Rows that cannot be decoded (e.g. an unknown billing cycle) are logged
        and left out so the remaining records are still returned.

        Returns:
            List of Subscription objects ordered by start date.
        """
        sql = f"SELECT {_SELECT_COLUMNS} FROM subscriptions ORDER BY start_date ASC, id ASC;"
        conn = self.db.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                rows = cur.fetchall()
        finally:
            self.db.release_connection(conn)

        subscriptions = []
        for row in rows:
            try:
                subscriptions.append(self._row_to_subscription(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable subscription row #{row[0]}: {e}")
        return subscriptions

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        """Fetch a single subscription by ID."""
        sql = f"SELECT {_SELECT_COLUMNS} FROM subscriptions WHERE id = %s;"
        conn = self.db.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (subscription_id,))
                row = cur.fetchone()
                return self._row_to_subscription(row) if row else None
        finally:
            self.db.release_connection(conn)

    # ── DELETE ────────────────────────────────────────────

    def delete_by_id(self, subscription_id: int) -> bool:
        """Delete a subscription by ID. Returns False if nothing was deleted."""
        sql = "DELETE FROM subscriptions WHERE id = %s;"
        conn = self.db.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (subscription_id,))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted subscription #{subscription_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete subscription #{subscription_id}: {e}")
            raise
        finally:
            self.db.release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _params(subscription: Subscription) -> tuple:
        """Column values for INSERT/UPDATE, in _DATA_COLUMNS order."""
        return (
            subscription.unique_key,
            subscription.name,
            subscription.created_at,
            subscription.start_date,
            subscription.billing_cycle.value,
            subscription.anchor_day,
            subscription.anchor_month,
            subscription.reminder_days,
            subscription.category,
            subscription.rating,
            subscription.price,
            subscription.custom_fields,
        )

    @staticmethod
    def _row_to_subscription(row: tuple) -> Subscription:
        """Convert a database row tuple to a Subscription domain object."""
        return Subscription.from_dict(dict(zip(COLUMNS, row)))
