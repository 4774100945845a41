"""
Collection repository tests against in-memory SQLite.

Run with: pytest tests/unit/test_repositories.py -v
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from repositories.database import resolve_database_url
from utils.error_handling import NotFoundError
from utils.settings import AppSettings


class TestCollectionRepository:
    def test_create_and_get(self, database, customer_row):
        created = database.customers.create(customer_row("c1"))
        assert created["id"] == "c1"
        assert created["updated_at"] is not None

        fetched = database.customers.get("c1")
        assert fetched["first_name"] == "Jane"
        assert fetched["account_balance"] == 25000.0

    def test_get_missing(self, database):
        assert database.customers.get("nope") is None

    def test_list_filters_orders_and_limits(self, database, customer_row, now):
        for i in range(4):
            database.customers.create(
                customer_row(f"c{i}", created_at=now + timedelta(minutes=i), is_active=i != 2)
            )

        newest = database.customers.list(order_by={"created_at": "desc"}, limit=2)
        assert [r["id"] for r in newest] == ["c3", "c2"]

        active = database.customers.list(where={"is_active": True}, order_by={"created_at": "asc"})
        assert [r["id"] for r in active] == ["c0", "c1", "c3"]

    def test_invalid_sort_direction(self, database):
        with pytest.raises(ValueError, match="sideways"):
            database.customers.list(order_by={"created_at": "sideways"})

    def test_unknown_column(self, database):
        with pytest.raises(ValueError, match="Unknown column"):
            database.customers.list(where={"shoe_size": 9})

    def test_create_requires_id(self, database):
        with pytest.raises(ValueError):
            database.customers.create({"first_name": "No id"})

    def test_create_many(self, database, customer_row):
        assert database.customers.create_many([customer_row("a"), customer_row("b")]) == 2
        assert database.customers.count() == 2
        assert database.customers.create_many([]) == 0

    def test_create_many_with_sparse_records(self, database):
        inserted = database.transactions.create_many(
            [
                {"id": "t1", "customer_id": "c1", "amount": 10.0},
                {"id": "t2", "customer_id": "c1", "channel": "online"},
            ]
        )
        assert inserted == 2
        assert database.transactions.get("t2")["amount"] is None

    def test_update(self, database, customer_row, now):
        database.customers.create(customer_row("c1", updated_at=now - timedelta(days=1)))
        updated = database.customers.update("c1", {"risk_score": 0.9})
        assert updated["risk_score"] == 0.9
        assert updated["updated_at"] > (now - timedelta(days=1)).replace(tzinfo=None)

    def test_update_missing(self, database):
        with pytest.raises(NotFoundError):
            database.ai_insights.update("missing", {"status": "resolved"})

    def test_count_with_filter(self, database):
        database.ai_insights.create_many(
            [
                {"id": "i1", "status": "active"},
                {"id": "i2", "status": "active"},
                {"id": "i3", "status": "dismissed"},
            ]
        )
        assert database.ai_insights.count({"status": "active"}) == 2

    def test_list_and_count_with_membership_filter(self, database):
        database.ai_insights.create_many(
            [{"id": "i1", "status": "active"}, {"id": "i2"}, {"id": "i3"}]
        )
        rows = database.ai_insights.list(where={"id": ["i1", "i3"]}, order_by={"id": "asc"})
        assert [r["id"] for r in rows] == ["i1", "i3"]
        assert database.ai_insights.count({"id": ("i2",)}) == 1
        assert database.ai_insights.list(where={"id": []}) == []


class TestDatabase:
    def test_collection_lookup(self, database):
        assert database.collection("riskAssessments") is database.risk_assessments
        assert database.collection("customer_segment_assignments") is (
            database.customer_segment_assignments
        )

    def test_unknown_collection(self, database):
        with pytest.raises(KeyError):
            database.collection("accounts")


class TestResolveDatabaseUrl:
    def test_explicit_url_wins(self):
        settings = AppSettings(database_url="sqlite://", db_secret_arn="arn:secret")
        assert resolve_database_url(settings) == "sqlite://"

    @patch("repositories.database.boto3")
    def test_secret_url(self, mock_boto3):
        client = MagicMock()
        client.get_secret_value.return_value = {
            "SecretString": json.dumps(
                {"host": "db.local", "port": 5432, "username": "app", "password": "pw", "dbname": "bank"}
            )
        }
        mock_boto3.client.return_value = client

        url = resolve_database_url(AppSettings(db_secret_arn="arn:secret"))
        assert url == "postgresql+psycopg2://app:pw@db.local:5432/bank"

    @patch("repositories.database.boto3")
    def test_unreadable_secret_falls_back_to_sqlite(self, mock_boto3):
        mock_boto3.client.return_value.get_secret_value.side_effect = RuntimeError("denied")
        url = resolve_database_url(AppSettings(db_secret_arn="arn:secret"))
        assert url == "sqlite:///banking_intel.db"

    def test_local_default(self):
        assert resolve_database_url(AppSettings()) == "sqlite:///banking_intel.db"
