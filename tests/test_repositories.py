"""
Unit tests for the subscription stores.

The PostgreSQL repository runs against a mocked connection; no database is
needed.
"""
from datetime import date, datetime

import pytest

from reminding.models import BillingCycle
from reminding.repositories import InMemorySubscriptionRepository, SubscriptionRepository


def _row(id_=1, cycle="monthly", anchor_day=15, anchor_month=None, price=9.99):
    return (
        id_, f"key-{id_}", "Netflix", datetime(2024, 1, 1, 12, 0), date(2024, 1, 15),
        cycle, anchor_day, anchor_month, 3, "video", 4, price, None,
    )


class TestInMemoryRepository:
    """Tests for the dict-backed store."""

    def test_save_assigns_ids(self, store, make_subscription):
        first = make_subscription(date(2024, 1, 15))
        second = make_subscription(date(2024, 2, 1))

        assert store.save(first) == 1
        assert store.save(second) == 2
        assert first.id == 1
        assert [s.id for s in store.list_all()] == [1, 2]

    def test_returned_records_are_copies(self, store, make_subscription):
        sub = make_subscription(date(2024, 1, 15))
        store.save(sub)

        fetched = store.get_by_id(sub.id)
        fetched.name = "Changed"
        sub.name = "Also changed"

        assert store.get_by_id(sub.id).name == "Netflix"

    def test_save_replaces(self, store, make_subscription):
        sub = make_subscription(date(2024, 1, 15))
        store.save(sub)

        store.save(sub.replace(name="Netflix Premium"))

        assert store.get_by_id(sub.id).name == "Netflix Premium"
        assert len(store.list_all()) == 1

    def test_duplicate_unique_key(self, store, make_subscription):
        sub = make_subscription(date(2024, 1, 15))
        store.save(sub)

        with pytest.raises(ValueError, match="Duplicate"):
            store.save(make_subscription(date(2024, 1, 15), unique_key=sub.unique_key))

    def test_replace_unknown_id(self, store, make_subscription):
        with pytest.raises(LookupError):
            store.save(make_subscription(date(2024, 1, 15), id=42))

    def test_save_keeps_stored_identity(self, store, make_subscription):
        sub = make_subscription(date(2024, 1, 15))
        store.save(sub)
        original_key, original_created = sub.unique_key, sub.created_at

        replacement = sub.replace(name="Netflix Premium", unique_key="other", created_at=datetime(2030, 1, 1))
        store.save(replacement)

        fetched = store.get_by_id(sub.id)
        assert fetched.name == "Netflix Premium"
        assert (fetched.unique_key, fetched.created_at) == (original_key, original_created)
        assert replacement.created_at == original_created

    def test_delete(self, store, make_subscription):
        sub = make_subscription(date(2024, 1, 15))
        store.save(sub)

        assert store.delete_by_id(sub.id) is True
        assert store.delete_by_id(sub.id) is False
        assert store.get_by_id(sub.id) is None

    def test_seeded(self, make_subscription):
        repo = InMemorySubscriptionRepository([make_subscription(date(2024, 1, 15))])
        assert len(repo.list_all()) == 1


class TestSubscriptionRepository:
    """Tests for the PostgreSQL repository."""

    def test_insert(self, mock_db, make_subscription):
        mock_db.cursor.fetchone.return_value = (7,)
        sub = make_subscription(date(2024, 1, 15), price=9.99)

        assert SubscriptionRepository(mock_db).save(sub) == 7

        sql, params = mock_db.cursor.execute.call_args.args
        assert "INSERT INTO subscriptions" in sql
        assert params[0] == sub.unique_key
        assert params[3] == date(2024, 1, 15)
        assert params[4] == "monthly"
        assert sub.id == 7
        mock_db.conn.commit.assert_called_once()
        mock_db.release_connection.assert_called_once_with(mock_db.conn)

    def test_update(self, mock_db, make_subscription):
        stored_at = datetime(2023, 6, 1, 9, 30)
        mock_db.cursor.fetchone.return_value = ("key-5", stored_at)
        sub = make_subscription(date(2024, 1, 15), id=5, price=12.5)

        assert SubscriptionRepository(mock_db).save(sub) == 5

        sql, params = mock_db.cursor.execute.call_args.args
        assert "UPDATE subscriptions" in sql
        assert "price = %s" in sql
        assert params[-1] == 5
        assert 12.5 in params
        mock_db.conn.commit.assert_called_once()

    def test_update_keeps_stored_identity(self, mock_db, make_subscription):
        stored_at = datetime(2023, 6, 1, 9, 30)
        mock_db.cursor.fetchone.return_value = ("key-5", stored_at)
        sub = make_subscription(date(2024, 1, 15), id=5, created_at=datetime(2030, 1, 1))
        sent_key = sub.unique_key

        SubscriptionRepository(mock_db).save(sub)

        sql, params = mock_db.cursor.execute.call_args.args
        set_clause = sql.split("WHERE")[0]
        assert "created_at" not in set_clause
        assert "unique_key" not in set_clause
        assert sent_key not in params
        assert (sub.unique_key, sub.created_at) == ("key-5", stored_at)

    def test_update_missing_row_rolls_back(self, mock_db, make_subscription):
        mock_db.cursor.fetchone.return_value = None

        with pytest.raises(LookupError):
            SubscriptionRepository(mock_db).save(make_subscription(date(2024, 1, 15), id=5))

        mock_db.conn.rollback.assert_called_once()
        mock_db.conn.commit.assert_not_called()
        mock_db.release_connection.assert_called_once_with(mock_db.conn)

    def test_insert_failure_rolls_back(self, mock_db, make_subscription):
        mock_db.cursor.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            SubscriptionRepository(mock_db).save(make_subscription(date(2024, 1, 15)))

        mock_db.conn.rollback.assert_called_once()
        mock_db.release_connection.assert_called_once_with(mock_db.conn)

    def test_list_all_maps_rows(self, mock_db):
        mock_db.cursor.fetchall.return_value = [_row(1), _row(2, "yearly", 15, 1, None)]

        subs = SubscriptionRepository(mock_db).list_all()

        assert [s.id for s in subs] == [1, 2]
        assert subs[0].billing_cycle is BillingCycle.MONTHLY
        assert subs[0].price == 9.99
        assert subs[1].anchor_month == 1
        assert subs[1].price is None
        mock_db.release_connection.assert_called_once_with(mock_db.conn)

    def test_list_all_skips_unreadable_rows(self, mock_db):
        mock_db.cursor.fetchall.return_value = [_row(1, "weekly"), _row(2)]

        subs = SubscriptionRepository(mock_db).list_all()

        assert [s.id for s in subs] == [2]

    def test_list_all_keeps_rows_with_missing_anchors(self, mock_db):
        mock_db.cursor.fetchall.return_value = [_row(1, "monthly", anchor_day=None)]

        subs = SubscriptionRepository(mock_db).list_all()

        assert len(subs) == 1
        assert subs[0].anchor_day is None

    def test_get_by_id(self, mock_db):
        mock_db.cursor.fetchone.return_value = _row(3)

        sub = SubscriptionRepository(mock_db).get_by_id(3)

        assert sub.id == 3
        assert sub.unique_key == "key-3"
        assert mock_db.cursor.execute.call_args.args[1] == (3,)

    def test_get_by_id_missing(self, mock_db):
        mock_db.cursor.fetchone.return_value = None
        assert SubscriptionRepository(mock_db).get_by_id(3) is None

    def test_delete(self, mock_db):
        mock_db.cursor.rowcount = 1
        assert SubscriptionRepository(mock_db).delete_by_id(3) is True
        mock_db.conn.commit.assert_called_once()

    def test_delete_missing(self, mock_db):
        mock_db.cursor.rowcount = 0
        assert SubscriptionRepository(mock_db).delete_by_id(3) is False
