"""
Customer Profiles Service.

Lists and filters customers, serves single profiles from an in-memory cache,
and exposes the per-customer AI operations (insights, product
recommendations, CLV prediction) plus sample-data seeding.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from models.customer import Customer, CustomerData
from models.insight import CustomerInsight, ProductRecommendation
from repositories.database import Database, get_database
from services.data_seeder import DataSeeder, SeedSummary
from services.ml_engine import MLEngine
from services.scoring import risk_band
from utils.cache_service import LRUCache
from utils.error_handling import NotFoundError, ValidationError
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

DAYS_PER_MONTH = 30
HIGH_VALUE_BALANCE = 100_000
RISK_FILTERS = {"all", "low", "medium", "high"}
STATUS_FILTERS = {"all", "active", "inactive", "kyc_pending", "high_value"}

_cache_settings = AppSettings.from_environment()
# Survives warm Lambda invocations.
customer_cache = LRUCache(
    max_size=_cache_settings.cache_max_size, ttl_seconds=_cache_settings.cache_ttl_seconds
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _days_between(earlier, now: datetime) -> int:
    if isinstance(earlier, datetime):
        return (now - as_utc(earlier)).days
    return (now.date() - earlier).days


def to_customer_data(customer: Customer, now: Optional[datetime] = None) -> CustomerData:
    """Feature view with defaults for missing figures.

    Account age is counted in 30-day months from the account opening date
    (or the record creation time when it is unknown).
    """
    now = now or datetime.now(timezone.utc)
    opened: Optional[date | datetime] = customer.account_opened_date or customer.created_at
    account_age = max(0, _days_between(opened, now) // DAYS_PER_MONTH) if opened else 0
    last_days = (
        max(0, _days_between(customer.last_transaction_date, now))
        if customer.last_transaction_date
        else 30
    )
    balance = customer.account_balance or 0.0
    return CustomerData(
        id=customer.id,
        account_balance=balance,
        credit_score=customer.credit_score or 650,
        annual_income=customer.annual_income or 50000.0,
        transaction_count=customer.transaction_count or 0,
        avg_monthly_balance=balance * 0.9,
        risk_score=customer.risk_score if customer.risk_score is not None else 0.3,
        customer_lifetime_value=customer.customer_lifetime_value or 0.0,
        account_age=account_age,
        last_transaction_days=last_days,
    )


def filter_customers(
    customers: Sequence[Customer],
    search: Optional[str] = None,
    risk: str = "all",
    status: str = "all",
) -> List[Customer]:
    """Apply the profile page's search box and risk/status dropdowns."""
    if risk not in RISK_FILTERS:
        raise ValidationError(f"risk must be one of: {', '.join(sorted(RISK_FILTERS))}")
    if status not in STATUS_FILTERS:
        raise ValidationError(f"status must be one of: {', '.join(sorted(STATUS_FILTERS))}")

    filtered = list(customers)
    if search:
        term = search.lower()
        filtered = [
            c
            for c in filtered
            if term in c.first_name.lower()
            or term in c.last_name.lower()
            or term in c.email.lower()
            or term in c.customer_number.lower()
        ]

    if risk != "all":
        filtered = [c for c in filtered if risk_band(c.risk_score or 0.0) == risk]

    if status == "active":
        filtered = [c for c in filtered if c.is_active]
    elif status == "inactive":
        filtered = [c for c in filtered if not c.is_active]
    elif status == "kyc_pending":
        filtered = [c for c in filtered if c.kyc_status == "pending"]
    elif status == "high_value":
        filtered = [c for c in filtered if (c.account_balance or 0) > HIGH_VALUE_BALANCE]
    return filtered


class CustomerService:
    """Service behind the customer profiles page."""

    def __init__(
        self,
        database: Optional[Database] = None,
        engine: Optional[MLEngine] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.db = database or get_database()
        self.settings = settings or AppSettings.from_environment()
        self._engine = engine

    @property
    def engine(self) -> MLEngine:
        if self._engine is None:
            self._engine = MLEngine()
        return self._engine

    def list_customers(self, limit: int = 500) -> List[Customer]:
        rows = self.db.customers.list(order_by={"created_at": "desc"}, limit=limit)
        return [Customer.model_validate(row) for row in rows]

    def search(
        self,
        search: Optional[str] = None,
        risk: str = "all",
        status: str = "all",
        limit: int = 500,
    ) -> List[Customer]:
        return filter_customers(self.list_customers(limit), search, risk, status)

    def get_customer(self, customer_id: str) -> Customer:
        def load() -> Customer:
            row = self.db.customers.get(customer_id)
            if not row:
                raise NotFoundError(f"Customer '{customer_id}' not found")
            logger.info("Customer loaded from database", extra={"customer_id": customer_id})
            return Customer.model_validate(row)

        return customer_cache.get_or_load(f"customer:{customer_id}", load)

    def update_risk_score(self, customer_id: str, risk_score: float) -> None:
        self.db.customers.update(customer_id, {"risk_score": risk_score})
        customer_cache.delete(f"customer:{customer_id}")

    def customer_insights(self, customer_id: str) -> List[CustomerInsight]:
        customer = self.get_customer(customer_id)
        return self.engine.generate_customer_insights(to_customer_data(customer))

    def product_recommendations(self, customer_id: str) -> List[ProductRecommendation]:
        customer = self.get_customer(customer_id)
        return self.engine.generate_product_recommendations(to_customer_data(customer))

    def predict_clv(self, customer_id: str) -> float:
        customer = self.get_customer(customer_id)
        return self.engine.predict_customer_lifetime_value(to_customer_data(customer))

    def seed(self, user_id: str, count: int = 100, seed: Optional[int] = None) -> SeedSummary:
        seeder = DataSeeder(
            self.db,
            seed=seed if seed is not None else self.settings.random_seed,
            batch_size=self.settings.seed_batch_size,
        )
        summary = seeder.seed_customer_data(user_id, count)
        customer_cache.clear()
        return summary
