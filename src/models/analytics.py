"""Dashboard and analytics read models."""

from typing import List

from pydantic import BaseModel, Field


class DashboardMetrics(BaseModel):
    """Headline numbers shown on the dashboard cards."""

    total_customers: int = 0
    total_balance: float = 0.0
    avg_balance: float = 0.0
    high_risk_customers: int = 0
    active_segments: int = 0
    pending_insights: int = 0
    monthly_growth: float = 0.0
    customer_satisfaction: float = 0.0


class DistributionSlice(BaseModel):
    name: str
    count: int
    percentage: float


class MonthlyTransactions(BaseModel):
    month: str
    transactions: int
    volume: float
    customers: int


class SegmentPerformance(BaseModel):
    name: str
    customers: int
    revenue: float
    growth: float


class AnalyticsSummary(BaseModel):
    """Everything the analytics page charts."""

    total_transactions: int = 0
    transaction_volume: float = 0.0
    active_customers: int = 0
    avg_transaction_value: float = 0.0
    monthly: List[MonthlyTransactions] = Field(default_factory=list)
    channels: List[DistributionSlice] = Field(default_factory=list)
    risk: List[DistributionSlice] = Field(default_factory=list)
    segments: List[SegmentPerformance] = Field(default_factory=list)
