"""Risk assessment models."""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.customer import CustomerSummary


class RiskLevel(str, Enum):
    """Risk buckets accepted from the model and produced by the fallback."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecordStatus(str, Enum):
    """Lifecycle shared by risk assessments and AI insights."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class RiskAnalysis(BaseModel):
    """Output of MLEngine.assess_customer_risk."""

    risk_score: float = Field(ge=0, le=1)
    risk_level: str
    factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class RiskAssessmentRecord(BaseModel):
    """Row of the risk_assessments collection.

    ``factors`` and ``recommendations`` are stored as JSON strings and decoded
    on read.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    customer_id: str
    assessment_type: str = "comprehensive"
    risk_score: float
    risk_level: str
    factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    status: RecordStatus = RecordStatus.ACTIVE
    assessed_date: datetime
    expires_date: Optional[datetime] = None
    customer: Optional[CustomerSummary] = None

    @field_validator("factors", "recommendations", mode="before")
    @classmethod
    def decode_json_list(cls, value):
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return [value]
            return decoded if isinstance(decoded, list) else [str(decoded)]
        return value or []


class RiskRunSummary(BaseModel):
    """Result of one batch risk analysis run."""

    candidates: int
    analyzed: int
    failed: List[str] = Field(default_factory=list)
    assessment_ids: List[str] = Field(default_factory=list)
