"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import health_check` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    # Add repo root first (for imports like infrastructure.*)
    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("BEDROCK_REGION", "eu-west-2")

# Lambda environment variables used by handlers
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0")
os.environ.setdefault("COGNITO_CLIENT_ID", "test-client-id")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def database():
    """Fresh in-memory database with the full schema."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    from repositories.database import Database

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    db.create_schema()
    yield db
    engine.dispose()


@pytest.fixture(autouse=True)
def _clear_customer_cache():
    from services.customer_service import customer_cache

    customer_cache.clear()
    yield
    customer_cache.clear()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def seeded_database(database, now):
    """Database with 30 reproducible customers plus their activity."""
    from services.data_seeder import DataSeeder

    DataSeeder(database, seed=42, now=now).seed_customer_data("user-1", count=30)
    return database


def make_customer_row(customer_id, **overrides):
    """Minimal customers row for targeted tests."""
    row = {
        "id": customer_id,
        "user_id": "user-1",
        "customer_number": f"BNK{customer_id[-6:]:0>6}",
        "first_name": "Jane",
        "last_name": "Doe",
        "email": f"{customer_id}@example.com",
        "account_balance": 25000.0,
        "credit_score": 700,
        "annual_income": 80000.0,
        "transaction_count": 40,
        "risk_score": 0.3,
        "customer_lifetime_value": 12000.0,
        "preferred_channel": "online",
        "kyc_status": "approved",
        "is_active": True,
        "account_opened_date": FIXED_NOW.date().replace(year=2022),
        "created_at": FIXED_NOW,
    }
    row.update(overrides)
    return row


@pytest.fixture
def customer_row():
    return make_customer_row
