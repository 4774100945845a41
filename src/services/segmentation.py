"""
Rule-based customer segmentation.

Used when the AI segmentation call fails. Produces at most three segments:
high value (top 20% by balance), young professionals and high risk.
"""

from __future__ import annotations

import math
import time
from typing import Iterable, List, Optional, Sequence

from models.customer import CustomerData
from models.segment import SegmentationResult, SegmentCharacteristics

HIGH_VALUE_SHARE = 0.2
YOUNG_PROFESSIONAL_MAX_AGE_MONTHS = 36
YOUNG_PROFESSIONAL_INCOME = (40_000, 100_000)
HIGH_RISK_THRESHOLD = 0.7

HIGH_VALUE_INSIGHTS = [
    "Premium banking services and investment products",
    "Dedicated relationship managers",
    "Exclusive rewards and benefits programs",
]
YOUNG_PROFESSIONAL_INSIGHTS = [
    "Mobile-first banking solutions",
    "Student loan and mortgage products",
    "Financial planning and investment education",
]
HIGH_RISK_INSIGHTS = [
    "Enhanced monitoring and fraud detection",
    "Risk mitigation strategies",
    "Potential account restrictions or closures",
]


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def summarize(customers: Sequence[CustomerData]) -> SegmentCharacteristics:
    """Arithmetic means of the segment members plus their count."""
    return SegmentCharacteristics(
        avg_balance=_mean(c.account_balance for c in customers),
        avg_income=_mean(c.annual_income for c in customers),
        avg_risk_score=_mean(c.risk_score for c in customers),
        avg_clv=_mean(c.customer_lifetime_value for c in customers),
        size=len(customers),
    )


def top_by_balance(customers: Sequence[CustomerData], share: float = HIGH_VALUE_SHARE) -> List[CustomerData]:
    """First ceil(share * n) customers by descending balance.

    ``sorted`` is stable with ``reverse=True``, so equal balances keep their
    input order at the cut-off.
    """
    count = math.ceil(len(customers) * share)
    ranked = sorted(customers, key=lambda c: c.account_balance, reverse=True)
    return ranked[:count]


def is_young_professional(customer: CustomerData) -> bool:
    low, high = YOUNG_PROFESSIONAL_INCOME
    return (
        customer.account_age < YOUNG_PROFESSIONAL_MAX_AGE_MONTHS
        and low <= customer.annual_income < high
    )


def is_high_risk(customer: CustomerData) -> bool:
    return customer.risk_score > HIGH_RISK_THRESHOLD


def _segment(
    key: str, name: str, members: Sequence[CustomerData], insights: List[str], stamp: int
) -> SegmentationResult:
    return SegmentationResult(
        segment_id=f"seg_{key}_{stamp}",
        segment_name=name,
        customers=[c.id for c in members],
        characteristics=summarize(members),
        insights=list(insights),
    )


def fallback_segmentation(
    customers: Sequence[CustomerData], stamp: Optional[int] = None
) -> List[SegmentationResult]:
    """Deterministic segmentation over the given customers.

    ``stamp`` is the millisecond suffix for segment ids (defaults to now).
    """
    if not customers:
        return []
    stamp = stamp if stamp is not None else int(time.time() * 1000)

    segments = [
        _segment(
            "high_value",
            "High Value Customers",
            top_by_balance(customers),
            HIGH_VALUE_INSIGHTS,
            stamp,
        )
    ]

    young = [c for c in customers if is_young_professional(c)]
    if young:
        segments.append(
            _segment("young_prof", "Young Professionals", young, YOUNG_PROFESSIONAL_INSIGHTS, stamp)
        )

    risky = [c for c in customers if is_high_risk(c)]
    if risky:
        segments.append(
            _segment("high_risk", "High Risk Customers", risky, HIGH_RISK_INSIGHTS, stamp)
        )

    return segments
