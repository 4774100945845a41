"""
Synthetic banking data generator.

Builds customers with correlated income/credit/balance/risk/CLV figures,
their transactions and support interactions, and bulk-inserts them. Pass a
``seed`` (and a fixed ``now``) for reproducible field values; record ids
are unique per run.
"""

from __future__ import annotations

import json
import random
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional, Sequence

from repositories.database import Database
from services.scoring import (
    calculate_clv,
    calculate_risk_score,
    generate_account_balance,
    generate_annual_income,
    generate_credit_score,
    uniform_choice,
    weighted_choice,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Christopher", "Karen", "Charles", "Nancy", "Daniel", "Lisa",
    "Matthew", "Betty", "Anthony", "Helen", "Mark", "Sandra", "Donald", "Donna",
    "Steven", "Carol", "Paul", "Ruth", "Andrew", "Sharon", "Joshua", "Michelle",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson",
    "White", "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson", "Walker",
    "Young", "Allen", "King", "Wright", "Scott", "Torres", "Nguyen", "Hill", "Flores",
]
EMAIL_DOMAINS = ["gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "aol.com", "icloud.com"]
STREET_NAMES = ["Main St", "Oak Ave", "Pine Rd", "Elm Dr", "Maple Ln", "Cedar Ct", "Park Blvd"]
CITIES = [
    "New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia",
    "San Antonio", "San Diego", "Dallas", "San Jose", "Austin", "Jacksonville",
    "Fort Worth", "Columbus", "Charlotte", "San Francisco", "Indianapolis", "Seattle",
]
STATES = [
    "CA", "TX", "FL", "NY", "PA", "IL", "OH", "GA", "NC", "MI",
    "NJ", "VA", "WA", "AZ", "MA", "TN", "IN", "MO", "MD", "WI",
]

EMPLOYMENT_STATUSES = (["employed", "self-employed", "unemployed", "retired", "student"],
                       [0.7, 0.15, 0.05, 0.08, 0.02])
ACCOUNT_TYPES = (["checking", "savings", "premium", "business"], [0.6, 0.25, 0.1, 0.05])
CHANNELS = (["online", "mobile", "branch", "atm", "phone"], [0.35, 0.4, 0.15, 0.08, 0.02])

TRANSACTION_TYPES = ["debit", "credit", "transfer", "payment"]
MERCHANT_CATEGORIES = [
    "grocery", "gas", "restaurant", "retail", "utilities", "healthcare",
    "entertainment", "travel", "insurance", "education", "other",
]
MAX_TRANSACTIONS_PER_CUSTOMER = 50

INTERACTION_TYPES = ["call", "email", "chat", "visit", "complaint"]
INTERACTION_CHANNELS = ["phone", "email", "web_chat", "branch", "mobile_app"]
INTERACTION_SUBJECTS = [
    "Account Balance Inquiry", "Transaction Dispute", "Product Information",
    "Technical Support", "Account Opening", "Loan Application", "General Inquiry",
]

SEGMENT_CATALOGUE = [
    {
        "key": "high_value",
        "segment_name": "High Value Customers",
        "description": "Customers with account balances over $100,000 and high transaction volumes",
        "criteria": {"accountBalance": {"min": 100000}, "transactionCount": {"min": 50}},
        "avg_balance": 250000,
        "total_revenue": 5000000,
        "growth_rate": 12.5,
        "risk_level": "low",
    },
    {
        "key": "young_prof",
        "segment_name": "Young Professionals",
        "description": "Customers aged 25-35 with growing incomes and digital-first preferences",
        "criteria": {"annualIncome": {"min": 40000, "max": 100000}, "preferredChannel": "mobile"},
        "avg_balance": 25000,
        "total_revenue": 1800000,
        "growth_rate": 18.2,
        "risk_level": "medium",
    },
    {
        "key": "digital_natives",
        "segment_name": "Digital Natives",
        "description": "Tech-savvy customers who prefer mobile and online banking",
        "criteria": {"preferredChannel": ["mobile", "online"], "transactionCount": {"min": 30}},
        "avg_balance": 35000,
        "total_revenue": 2200000,
        "growth_rate": 22.1,
        "risk_level": "low",
    },
    {
        "key": "premium_savers",
        "segment_name": "Premium Savers",
        "description": "Conservative customers with high balances and low transaction frequency",
        "criteria": {"accountBalance": {"min": 75000}, "transactionCount": {"max": 20}},
        "avg_balance": 150000,
        "total_revenue": 3200000,
        "growth_rate": 8.5,
        "risk_level": "low",
    },
    {
        "key": "at_risk",
        "segment_name": "At-Risk Customers",
        "description": "Customers showing signs of potential churn or financial stress",
        "criteria": {"riskScore": {"min": 0.6}, "lastTransactionDays": {"min": 30}},
        "avg_balance": 15000,
        "total_revenue": 500000,
        "growth_rate": -5.2,
        "risk_level": "high",
    },
]


@dataclass
class SeedSummary:
    customers: int
    transactions: int
    interactions: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "customers": self.customers,
            "transactions": self.transactions,
            "interactions": self.interactions,
        }


def chunked(items: Sequence, size: int) -> Iterator[Sequence]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class DataSeeder:
    """Generates and inserts sample customers, transactions and interactions."""

    def __init__(
        self,
        database: Database,
        seed: Optional[int] = None,
        now: Optional[datetime] = None,
        batch_size: int = 50,
    ):
        self.db = database
        self.rng = random.Random(seed)
        # Ids stay unique across runs that share a seed.
        self.run_id = uuid.uuid4().hex[:10]
        self.now = now or datetime.now(timezone.utc)
        self.batch_size = batch_size

    def seed_customer_data(self, user_id: str, count: int = 100) -> SeedSummary:
        """Generate ``count`` customers with activity and insert everything."""
        try:
            logger.info("Seeding customers", extra={"count": count, "user_id": user_id})
            customers: List[dict] = []
            transactions: List[dict] = []
            interactions: List[dict] = []

            for index in range(count):
                customer = self.build_customer(user_id, index)
                customers.append(customer)
                transactions.extend(
                    self.build_transactions(customer["id"], user_id, customer["transaction_count"])
                )
                interactions.extend(self.build_interactions(customer["id"], user_id))

            self.db.customers.create_many(customers)
            for batch in chunked(transactions, self.batch_size):
                self.db.transactions.create_many(batch)
            self.db.customer_interactions.create_many(interactions)

            summary = SeedSummary(len(customers), len(transactions), len(interactions))
            logger.info("Seeding complete", extra=summary.as_dict())
            return summary
        except Exception as exc:
            logger.error("Error seeding customer data", extra={"error": str(exc)})
            raise

    def seed_customer_segments(self, user_id: str) -> int:
        """Insert the fixed segment catalogue; returns the number inserted."""
        try:
            segments = [
                {
                    "id": f"seg_{entry['key']}_{self.run_id}",
                    "user_id": user_id,
                    "segment_name": entry["segment_name"],
                    "description": entry["description"],
                    "criteria": json.dumps(entry["criteria"]),
                    "customer_count": 0,
                    "avg_balance": entry["avg_balance"],
                    "total_revenue": entry["total_revenue"],
                    "growth_rate": entry["growth_rate"],
                    "risk_level": entry["risk_level"],
                    "is_active": True,
                    "created_at": self.now,
                }
                for entry in SEGMENT_CATALOGUE
            ]
            inserted = self.db.customer_segments.create_many(segments)
            logger.info("Seeded customer segments", extra={"count": inserted})
            return inserted
        except Exception as exc:
            logger.error("Error seeding customer segments", extra={"error": str(exc)})
            raise

    def build_customer(self, user_id: str, index: int) -> dict:
        rng = self.rng
        first_name = uniform_choice(FIRST_NAMES, rng)
        last_name = uniform_choice(LAST_NAMES, rng)

        annual_income = generate_annual_income(rng)
        credit_score = generate_credit_score(annual_income, rng)
        account_balance = generate_account_balance(annual_income, credit_score, rng)
        account_age = self._randint(120) + 1
        transaction_count = self._randint(200) + 10
        avg_monthly_balance = account_balance * (0.8 + rng.random() * 0.4)
        risk_score = calculate_risk_score(credit_score, account_balance, transaction_count, rng)
        clv = calculate_clv(account_balance, annual_income, account_age, rng)

        return {
            "id": f"cust_{self.run_id}_{index}",
            "user_id": user_id,
            "customer_number": f"BNK{100000 + index:06d}",
            "first_name": first_name,
            "last_name": last_name,
            "email": f"{first_name.lower()}.{last_name.lower()}@{uniform_choice(EMAIL_DOMAINS, rng)}",
            "phone": self._phone_number(),
            "date_of_birth": self._date_of_birth(),
            "address": f"{self._randint(9999) + 1} {uniform_choice(STREET_NAMES, rng)}",
            "city": uniform_choice(CITIES, rng),
            "state": uniform_choice(STATES, rng),
            "zip_code": str(self._randint(90000) + 10000),
            "country": "US",
            "account_balance": float(account_balance),
            "credit_score": credit_score,
            "annual_income": float(annual_income),
            "employment_status": weighted_choice(*EMPLOYMENT_STATUSES, rng=rng),
            "account_type": weighted_choice(*ACCOUNT_TYPES, rng=rng),
            "account_opened_date": (self.now - timedelta(days=account_age * 30)).date(),
            "last_transaction_date": (self.now - timedelta(days=self._randint(30))).date(),
            "transaction_count": transaction_count,
            "avg_monthly_balance": avg_monthly_balance,
            "risk_score": risk_score,
            "customer_lifetime_value": float(clv),
            "preferred_channel": weighted_choice(*CHANNELS, rng=rng),
            "kyc_status": "approved" if rng.random() > 0.1 else "pending",
            "is_active": rng.random() > 0.05,
            "created_at": self.now,
        }

    def build_transactions(self, customer_id: str, user_id: str, count: int) -> List[dict]:
        rng = self.rng
        rows = []
        for i in range(min(count, MAX_TRANSACTIONS_PER_CUSTOMER)):
            rows.append(
                {
                    "id": f"txn_{customer_id}_{i}",
                    "user_id": user_id,
                    "customer_id": customer_id,
                    "transaction_type": uniform_choice(TRANSACTION_TYPES, rng),
                    "amount": float(self._randint(1000) + 10),
                    "description": f"Transaction {i + 1}",
                    "merchant_category": uniform_choice(MERCHANT_CATEGORIES, rng),
                    "channel": weighted_choice(*CHANNELS, rng=rng),
                    "location": f"{uniform_choice(CITIES, rng)}, {uniform_choice(STATES, rng)}",
                    "is_recurring": rng.random() > 0.8,
                    "risk_flag": rng.random() > 0.95,
                    "transaction_date": self.now - timedelta(days=self._randint(90)),
                }
            )
        return rows

    def build_interactions(self, customer_id: str, user_id: str) -> List[dict]:
        rng = self.rng
        rows = []
        for i in range(self._randint(5) + 1):
            subject = uniform_choice(INTERACTION_SUBJECTS, rng)
            topic = uniform_choice(INTERACTION_SUBJECTS, rng).lower()
            rows.append(
                {
                    "id": f"int_{customer_id}_{i}",
                    "user_id": user_id,
                    "customer_id": customer_id,
                    "interaction_type": uniform_choice(INTERACTION_TYPES, rng),
                    "channel": uniform_choice(INTERACTION_CHANNELS, rng),
                    "subject": subject,
                    "description": f"Customer interaction regarding {topic}",
                    "outcome": "resolved" if rng.random() > 0.2 else "pending",
                    "satisfaction_score": self._randint(5) + 1,
                    "agent_id": f"agent_{self._randint(20) + 1}",
                    "duration_minutes": self._randint(30) + 5,
                    "interaction_date": self.now - timedelta(days=self._randint(180)),
                }
            )
        return rows

    def _randint(self, width: int) -> int:
        """Integer in [0, width)."""
        return int(self.rng.random() * width)

    def _phone_number(self) -> str:
        area = self._randint(800) + 200
        exchange = self._randint(800) + 200
        return f"{area}-{exchange}-{self._randint(10000):04d}"

    def _date_of_birth(self) -> date:
        return date(
            1950 + self._randint(50),
            self._randint(12) + 1,
            self._randint(28) + 1,
        )
