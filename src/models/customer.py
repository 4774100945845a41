"""Customer, transaction and interaction records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """Banking customer as stored in the customers collection."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    customer_number: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: str = "US"

    account_balance: Optional[float] = None
    credit_score: Optional[int] = None
    annual_income: Optional[float] = None
    employment_status: Optional[str] = None
    account_type: Optional[str] = None
    account_opened_date: Optional[date] = None
    last_transaction_date: Optional[date] = None
    transaction_count: Optional[int] = None
    avg_monthly_balance: Optional[float] = None
    risk_score: Optional[float] = None
    customer_lifetime_value: Optional[float] = None

    preferred_channel: Optional[str] = None
    kyc_status: str = "pending"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerSummary(BaseModel):
    """Short customer view attached to risk assessments."""

    first_name: str
    last_name: str
    email: str
    account_balance: Optional[float] = None
    credit_score: Optional[int] = None


class CustomerData(BaseModel):
    """Numeric feature view handed to the ML engine."""

    id: str
    account_balance: float = 0.0
    credit_score: int = 650
    annual_income: float = 50000.0
    transaction_count: int = 0
    avg_monthly_balance: float = 0.0
    risk_score: float = 0.3
    customer_lifetime_value: float = 0.0
    account_age: int = Field(default=0, description="Account age in months")
    last_transaction_days: int = Field(default=30, description="Days since last transaction")


class Transaction(BaseModel):
    """Card/account transaction; randomly generated, no ledger invariants."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    customer_id: str
    transaction_type: str
    amount: float
    description: Optional[str] = None
    merchant_category: Optional[str] = None
    channel: Optional[str] = None
    location: Optional[str] = None
    is_recurring: bool = False
    risk_flag: bool = False
    transaction_date: datetime


class CustomerInteraction(BaseModel):
    """Support touchpoint (call, email, chat, visit, complaint)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    customer_id: str
    interaction_type: str
    channel: str
    subject: str
    description: Optional[str] = None
    outcome: str = "pending"
    satisfaction_score: Optional[int] = Field(default=None, ge=1, le=5)
    agent_id: Optional[str] = None
    duration_minutes: Optional[int] = None
    interaction_date: datetime
