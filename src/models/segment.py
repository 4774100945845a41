"""Customer segment models."""

from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SegmentCharacteristics(BaseModel):
    """Mean metrics of the customers in a segment."""

    avg_balance: float = 0.0
    avg_income: float = 0.0
    avg_risk_score: float = 0.0
    avg_clv: float = 0.0
    size: int = 0


class SegmentationResult(BaseModel):
    """One segment produced by the AI call or the rule-based fallback."""

    segment_id: str
    segment_name: str
    customers: List[str] = Field(default_factory=list)
    characteristics: SegmentCharacteristics
    insights: List[str] = Field(default_factory=list)


class CustomerSegment(BaseModel):
    """Row of the customer_segments collection."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    segment_name: str
    description: str = ""
    criteria: dict = Field(default_factory=dict)
    customer_count: int = 0
    avg_balance: float = 0.0
    total_revenue: float = 0.0
    growth_rate: float = 0.0
    risk_level: str = "low"
    is_active: bool = True
    created_at: Optional[datetime] = None

    @field_validator("criteria", mode="before")
    @classmethod
    def decode_criteria(cls, value):
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return {"raw": value}
        return value or {}


class SegmentAssignment(BaseModel):
    """Many-to-many link between a customer and a segment."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    customer_id: str
    segment_id: str
    confidence_score: float = Field(ge=0, le=1)
