"""
Closed-form generators and scores used by the data seeder and the
rule-based fallbacks.

Every random draw goes through an injectable ``rng`` (anything exposing
``random()``), so a ``random.Random(seed)`` makes the output reproducible.
"""

from __future__ import annotations

import math
import random
from typing import Protocol, Sequence, TypeVar

from models.risk import RiskLevel

T = TypeVar("T")

CREDIT_SCORE_MIN = 300
CREDIT_SCORE_MAX = 850
MIN_ACCOUNT_BALANCE = 100

# (cumulative probability, lower bound, width) in dollars
_INCOME_BUCKETS = (
    (0.20, 20_000, 30_000),
    (0.50, 50_000, 40_000),
    (0.80, 90_000, 60_000),
    (0.95, 150_000, 100_000),
    (1.00, 250_000, 250_000),
)


class RandomSource(Protocol):
    def random(self) -> float: ...


def _clamp(value: float, low: float, high: float) -> float:
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def _randint(rng: RandomSource, width: int) -> int:
    """Integer in [0, width)."""
    return int(math.floor(rng.random() * width))


def weighted_choice(options: Sequence[T], weights: Sequence[float], rng: RandomSource = random) -> T:
    """Pick an option by cumulative weight; the first option if weights run short."""
    draw = rng.random()
    cumulative = 0.0
    for option, weight in zip(options, weights):
        cumulative += weight
        if draw < cumulative:
            return option
    return options[0]


def uniform_choice(options: Sequence[T], rng: RandomSource = random) -> T:
    return options[_randint(rng, len(options))]


def generate_annual_income(rng: RandomSource = random) -> int:
    """Skewed income distribution between 20k and 500k."""
    bucket = rng.random()
    for threshold, low, width in _INCOME_BUCKETS:
        if bucket < threshold:
            return low + _randint(rng, width)
    low, width = _INCOME_BUCKETS[-1][1:]
    return low + _randint(rng, width)


def generate_credit_score(income: float, rng: RandomSource = random) -> int:
    """Income-correlated score with +-50 points of noise, kept in [300, 850]."""
    base = min(CREDIT_SCORE_MAX, 580 + income / 1000)
    noise = (rng.random() - 0.5) * 100
    score = _clamp(math.floor(base + noise), CREDIT_SCORE_MIN, CREDIT_SCORE_MAX)
    return int(score)


def generate_account_balance(income: float, credit_score: float, rng: RandomSource = random) -> int:
    """Balance grows with income squared and credit quality, +-25% noise, floor 100."""
    income_multiplier = income / 100_000
    credit_multiplier = credit_score / CREDIT_SCORE_MAX
    base = income * 0.1 * income_multiplier * credit_multiplier
    noise = (rng.random() - 0.5) * base * 0.5
    return int(max(MIN_ACCOUNT_BALANCE, math.floor(base + noise)))


def balance_risk(balance: float) -> float:
    if balance < 1000:
        return 0.3
    if balance < 5000:
        return 0.1
    return 0.0


def activity_risk(transaction_count: float) -> float:
    if transaction_count < 5:
        return 0.2
    if transaction_count > 100:
        return 0.1
    return 0.0


def calculate_risk_score(
    credit_score: float,
    balance: float,
    transaction_count: float,
    rng: RandomSource = random,
) -> float:
    """Weighted credit/balance/activity blend with +-0.1 noise, clamped to [0, 1]."""
    credit_risk = (CREDIT_SCORE_MAX - credit_score) / 550
    total = (
        credit_risk * 0.6
        + balance_risk(balance) * 0.3
        + activity_risk(transaction_count) * 0.1
    )
    noise = (rng.random() - 0.5) * 0.2
    return _clamp(total + noise, 0.0, 1.0)


def calculate_clv(
    balance: float,
    income: float,
    account_age_months: float,
    rng: RandomSource = random,
) -> int:
    """Simplified lifetime value: monthly fee/interest revenue x tenure x [2, 5]."""
    monthly_revenue = balance * 0.001 + income * 0.0001
    retention_multiplier = min(5, account_age_months / 12)
    value = monthly_revenue * 12 * retention_multiplier * (2 + rng.random() * 3)
    return int(math.floor(value))


def risk_level_for(score: float) -> str:
    """Bucket used by the risk fallback and segment summaries."""
    if score > 0.7:
        return RiskLevel.HIGH.value
    if score > 0.4:
        return RiskLevel.MEDIUM.value
    return RiskLevel.LOW.value


def risk_band(score: float) -> str:
    """Bucket used by the customer list filter and risk charts."""
    if score < 0.3:
        return "low"
    if score < 0.7:
        return "medium"
    return "high"
