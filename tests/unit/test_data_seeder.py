"""
Data seeder tests.

Run with: pytest tests/unit/test_data_seeder.py -v
"""

import json
import re
from unittest.mock import MagicMock

import pytest

from services.data_seeder import (
    MAX_TRANSACTIONS_PER_CUSTOMER,
    SEGMENT_CATALOGUE,
    DataSeeder,
    chunked,
)


class TestSeedCustomerData:
    def test_inserts_everything(self, database, now):
        summary = DataSeeder(database, seed=7, now=now).seed_customer_data("user-1", count=5)

        assert summary.customers == 5
        assert database.customers.count() == 5
        assert database.transactions.count() == summary.transactions
        assert database.customer_interactions.count() == summary.interactions
        assert 5 <= summary.interactions <= 25

    def test_customer_fields_in_range(self, database, now):
        DataSeeder(database, seed=11, now=now).seed_customer_data("user-1", count=20)

        for row in database.customers.list():
            assert 300 <= row["credit_score"] <= 850
            assert 0.0 <= row["risk_score"] <= 1.0
            assert row["account_balance"] >= 100
            assert 10 <= row["transaction_count"] < 210
            assert re.fullmatch(r"BNK1\d{5}", row["customer_number"])
            assert row["user_id"] == "user-1"
            assert row["country"] == "US"
            assert row["account_opened_date"] < now.date()

    def test_transactions_capped_per_customer(self, database, now):
        DataSeeder(database, seed=3, now=now).seed_customer_data("user-1", count=10)

        for customer in database.customers.list():
            txns = database.transactions.list(where={"customer_id": customer["id"]})
            assert len(txns) == min(customer["transaction_count"], MAX_TRANSACTIONS_PER_CUSTOMER)

    def test_interactions_have_valid_satisfaction(self, database, now):
        DataSeeder(database, seed=5, now=now).seed_customer_data("user-1", count=5)
        for row in database.customer_interactions.list():
            assert 1 <= row["satisfaction_score"] <= 5

    def test_transactions_inserted_in_batches(self, now):
        db = MagicMock()
        summary = DataSeeder(db, seed=1, now=now, batch_size=10).seed_customer_data("u", count=3)

        batches = [c.args[0] for c in db.transactions.create_many.call_args_list]
        assert all(len(batch) <= 10 for batch in batches)
        assert sum(len(batch) for batch in batches) == summary.transactions
        db.customers.create_many.assert_called_once()

    def test_insert_failure_is_raised(self, now):
        db = MagicMock()
        db.customers.create_many.side_effect = RuntimeError("db down")
        with pytest.raises(RuntimeError):
            DataSeeder(db, seed=1, now=now).seed_customer_data("u", count=2)


def _without_id(record: dict) -> dict:
    return {k: v for k, v in record.items() if k != "id"}


class TestReproducibility:
    def test_same_seed_same_customers(self, now):
        first = DataSeeder(MagicMock(), seed=99, now=now)
        second = DataSeeder(MagicMock(), seed=99, now=now)
        assert [_without_id(first.build_customer("u", i)) for i in range(5)] == [
            _without_id(second.build_customer("u", i)) for i in range(5)
        ]

    def test_different_seed_differs(self, now):
        first = DataSeeder(MagicMock(), seed=1, now=now).build_customer("u", 0)
        second = DataSeeder(MagicMock(), seed=2, now=now).build_customer("u", 0)
        assert _without_id(first) != _without_id(second)

    def test_same_seed_twice_inserts_both_runs(self, database, now):
        DataSeeder(database, seed=7, now=now).seed_customer_data("user-1", count=3)
        DataSeeder(database, seed=7, now=now).seed_customer_data("user-1", count=3)

        rows = database.customers.list()
        assert len(rows) == 6
        assert len({row["id"] for row in rows}) == 6
        assert len({row["customer_number"] for row in rows}) == 3


class TestSeedSegments:
    def test_inserts_catalogue(self, database, now):
        seeder = DataSeeder(database, now=now)
        inserted = seeder.seed_customer_segments("user-1")

        assert inserted == len(SEGMENT_CATALOGUE) == 5
        row = database.customer_segments.get(f"seg_high_value_{seeder.run_id}")
        assert row["segment_name"] == "High Value Customers"
        assert isinstance(json.loads(row["criteria"]), dict)
        assert row["customer_count"] == 0

    def test_catalogue_can_be_seeded_twice(self, database, now):
        DataSeeder(database, now=now).seed_customer_segments("user-1")
        DataSeeder(database, now=now).seed_customer_segments("user-1")
        assert database.customer_segments.count() == 10


def test_chunked():
    assert [list(c) for c in chunked(list(range(5)), 2)] == [[0, 1], [2, 3], [4]]
    assert list(chunked([], 3)) == []
