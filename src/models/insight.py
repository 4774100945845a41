"""AI insight and recommendation models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from models.risk import RecordStatus


class InsightType(str, Enum):
    """Portfolio insight types requested from the model."""

    OPPORTUNITY = "opportunity"
    RISK_ALERT = "risk_alert"
    RETENTION = "retention"
    CROSS_SELL = "cross_sell"
    OPERATIONAL = "operational"
    TREND = "trend"
    BEHAVIOR = "behavior"


class GeneratedInsight(BaseModel):
    """Portfolio insight as parsed from the model's JSON array."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    description: str
    insight_type: str = Field(validation_alias=AliasChoices("type", "insight_type"))
    priority: str = "medium"
    confidence: float = Field(default=0.5, ge=0, le=1)


class AIInsight(BaseModel):
    """Row of the ai_insights collection."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    title: str
    description: str
    insight_type: str
    priority: str
    confidence_score: float
    status: RecordStatus = RecordStatus.ACTIVE
    customer_id: Optional[str] = None
    segment_id: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerInsight(BaseModel):
    """Per-customer insight from MLEngine.generate_customer_insights."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    title: str
    description: str
    priority: str = "medium"
    confidence: float = 0.5
    recommendation: str = ""
    potential_revenue: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("potentialRevenue", "potential_revenue")
    )


class ProductRecommendation(BaseModel):
    """Product suggestion from MLEngine.generate_product_recommendations."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_type: str = Field(validation_alias=AliasChoices("productType", "product_type"))
    product_name: str = Field(validation_alias=AliasChoices("productName", "product_name"))
    reasoning: str = ""
    recommendation_score: float = Field(
        default=0.0,
        validation_alias=AliasChoices("recommendationScore", "recommendation_score"),
    )
    potential_revenue: float = Field(
        default=0.0, validation_alias=AliasChoices("potentialRevenue", "potential_revenue")
    )
    priority: str = "medium"
