"""
Dashboard and Analytics Service.

Aggregates are computed in Python over the collection rows; the portfolio
sizes this serves (up to the customer fetch limit) keep that cheap.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from models.analytics import (
    AnalyticsSummary,
    DashboardMetrics,
    DistributionSlice,
    MonthlyTransactions,
    SegmentPerformance,
)
from models.risk import RecordStatus
from repositories.database import Database, get_database
from services.customer_service import as_utc
from services.scoring import risk_band
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

HIGH_RISK_SCORE = 0.7
RISK_BAND_LABELS = {"low": "Low Risk", "medium": "Medium Risk", "high": "High Risk"}
DEFAULT_MONTHS = 6


def _month_key(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m")


def _percent(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def distribution(counts: Dict[str, int]) -> List[DistributionSlice]:
    total = sum(counts.values())
    return [
        DistributionSlice(name=name, count=count, percentage=_percent(count, total))
        for name, count in counts.items()
    ]


def month_over_month_growth(monthly: List[MonthlyTransactions]) -> float:
    """Percent change in volume between the last two months with data."""
    if len(monthly) < 2 or not monthly[-2].volume:
        return 0.0
    previous, current = monthly[-2].volume, monthly[-1].volume
    return round((current - previous) / previous * 100, 1)


class AnalyticsService:
    def __init__(self, database: Optional[Database] = None, settings: Optional[AppSettings] = None):
        self.db = database or get_database()
        self.settings = settings or AppSettings.from_environment()

    def _customers(self) -> List[dict]:
        return self.db.customers.list(limit=self.settings.customer_fetch_limit)

    def dashboard_metrics(self) -> DashboardMetrics:
        customers = self._customers()
        total_balance = sum(c.get("account_balance") or 0 for c in customers)
        scores = [
            i["satisfaction_score"]
            for i in self.db.customer_interactions.list()
            if i.get("satisfaction_score") is not None
        ]
        return DashboardMetrics(
            total_customers=len(customers),
            total_balance=total_balance,
            avg_balance=total_balance / len(customers) if customers else 0.0,
            high_risk_customers=sum(
                1 for c in customers if (c.get("risk_score") or 0) > HIGH_RISK_SCORE
            ),
            active_segments=self.db.customer_segments.count(),
            pending_insights=self.db.ai_insights.count({"status": RecordStatus.ACTIVE.value}),
            monthly_growth=month_over_month_growth(self.monthly_transactions()),
            customer_satisfaction=round(sum(scores) / len(scores), 1) if scores else 0.0,
        )

    def risk_distribution(self) -> List[DistributionSlice]:
        counts = Counter({label: 0 for label in RISK_BAND_LABELS.values()})
        for customer in self._customers():
            counts[RISK_BAND_LABELS[risk_band(customer.get("risk_score") or 0)]] += 1
        return distribution(dict(counts))

    def channel_distribution(self) -> List[DistributionSlice]:
        counts = Counter(c.get("preferred_channel") or "unknown" for c in self._customers())
        return distribution(dict(counts.most_common()))

    def monthly_transactions(self, months: int = DEFAULT_MONTHS) -> List[MonthlyTransactions]:
        """Transactions per calendar month, oldest first, last ``months`` only."""
        buckets: Dict[str, dict] = defaultdict(
            lambda: {"transactions": 0, "volume": 0.0, "customers": set()}
        )
        for txn in self.db.transactions.list():
            if not txn.get("transaction_date"):
                continue
            bucket = buckets[_month_key(txn["transaction_date"])]
            bucket["transactions"] += 1
            bucket["volume"] += txn.get("amount") or 0
            bucket["customers"].add(txn["customer_id"])

        return [
            MonthlyTransactions(
                month=month,
                transactions=buckets[month]["transactions"],
                volume=round(buckets[month]["volume"], 2),
                customers=len(buckets[month]["customers"]),
            )
            for month in sorted(buckets)[-months:]
        ]

    def segment_performance(self) -> List[SegmentPerformance]:
        return [
            SegmentPerformance(
                name=row["segment_name"],
                customers=row.get("customer_count") or 0,
                revenue=row.get("total_revenue") or 0.0,
                growth=row.get("growth_rate") or 0.0,
            )
            for row in self.db.customer_segments.list(order_by={"created_at": "desc"})
        ]

    def analytics_summary(self) -> AnalyticsSummary:
        transactions = self.db.transactions.list()
        volume = sum(t.get("amount") or 0 for t in transactions)
        summary = AnalyticsSummary(
            total_transactions=len(transactions),
            transaction_volume=round(volume, 2),
            active_customers=self.db.customers.count({"is_active": True}),
            avg_transaction_value=round(volume / len(transactions), 2) if transactions else 0.0,
            monthly=self.monthly_transactions(),
            channels=self.channel_distribution(),
            risk=self.risk_distribution(),
            segments=self.segment_performance(),
        )
        logger.info(
            "Analytics summary computed",
            extra={"transactions": summary.total_transactions},
        )
        return summary
