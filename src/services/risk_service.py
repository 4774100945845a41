"""
Risk Assessment Service.

Batch risk analysis over the riskiest customers and the assessment history
shown on the risk page.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from models.customer import Customer, CustomerSummary, Transaction
from models.risk import RecordStatus, RiskAssessmentRecord, RiskRunSummary
from repositories.database import Database, get_database
from services.customer_service import CustomerService, to_customer_data
from services.ml_engine import MLEngine
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

CANDIDATE_RISK_SCORE = 0.6
CANDIDATE_BALANCE = 1000
RECENT_TRANSACTIONS = 20
ASSESSMENT_VALIDITY = timedelta(days=30)


def is_risk_candidate(customer: Customer) -> bool:
    return (customer.risk_score or 0) > CANDIDATE_RISK_SCORE or (
        customer.account_balance or 0
    ) < CANDIDATE_BALANCE


class RiskAssessmentService:
    def __init__(
        self,
        database: Optional[Database] = None,
        engine: Optional[MLEngine] = None,
        settings: Optional[AppSettings] = None,
        customer_service: Optional[CustomerService] = None,
    ):
        self.db = database or get_database()
        self.settings = settings or AppSettings.from_environment()
        self._engine = engine
        self.customers = customer_service or CustomerService(
            database=self.db, engine=engine, settings=self.settings
        )

    @property
    def engine(self) -> MLEngine:
        if self._engine is None:
            self._engine = MLEngine()
        return self._engine

    def list_assessments(self, limit: int = 100) -> List[RiskAssessmentRecord]:
        """Newest assessments, each with a short view of its customer."""
        rows = self.db.risk_assessments.list(order_by={"assessed_date": "desc"}, limit=limit)
        records = []
        for row in rows:
            record = RiskAssessmentRecord.model_validate(row)
            customer = self.db.customers.get(record.customer_id)
            if customer:
                record.customer = CustomerSummary.model_validate(customer)
            records.append(record)
        return records

    def run_risk_analysis(self, user_id: str, now: Optional[datetime] = None) -> RiskRunSummary:
        """Assess up to the batch cap of candidates, one at a time.

        A failure on one customer is logged and the run moves on.
        """
        now = now or datetime.now(timezone.utc)
        rows = self.db.customers.list(limit=self.settings.customer_fetch_limit)
        candidates = [c for c in (Customer.model_validate(r) for r in rows) if is_risk_candidate(c)]
        batch = candidates[: self.settings.risk_analysis_batch_cap]
        logger.info(
            "Starting risk analysis",
            extra={"candidates": len(candidates), "batch": len(batch)},
        )

        summary = RiskRunSummary(candidates=len(candidates), analyzed=0)
        for customer in batch:
            try:
                assessment_id = self._assess(user_id, customer, now)
            except Exception as exc:
                logger.error(
                    "Risk analysis failed for customer",
                    extra={"customer_id": customer.id, "error": str(exc)},
                )
                summary.failed.append(customer.id)
                continue
            summary.analyzed += 1
            summary.assessment_ids.append(assessment_id)

        logger.info(
            "Risk analysis complete",
            extra={"analyzed": summary.analyzed, "failed": len(summary.failed)},
        )
        return summary

    def update_status(self, assessment_id: str, status: RecordStatus) -> RiskAssessmentRecord:
        row = self.db.risk_assessments.update(assessment_id, {"status": status.value})
        return RiskAssessmentRecord.model_validate(row)

    def _assess(self, user_id: str, customer: Customer, now: datetime) -> str:
        rows = self.db.transactions.list(
            where={"customer_id": customer.id},
            order_by={"transaction_date": "desc"},
            limit=RECENT_TRANSACTIONS,
        )
        transactions = [Transaction.model_validate(row) for row in rows]
        analysis = self.engine.assess_customer_risk(to_customer_data(customer, now), transactions)

        assessment_id = f"risk_{uuid.uuid4().hex[:16]}"
        self.db.risk_assessments.create(
            {
                "id": assessment_id,
                "user_id": user_id,
                "customer_id": customer.id,
                "assessment_type": "comprehensive",
                "risk_score": analysis.risk_score,
                "risk_level": analysis.risk_level,
                "factors": json.dumps(analysis.factors),
                "recommendations": json.dumps(analysis.recommendations),
                "status": RecordStatus.ACTIVE.value,
                "assessed_date": now,
                "expires_date": now + ASSESSMENT_VALIDITY,
            }
        )
        self.customers.update_risk_score(customer.id, analysis.risk_score)
        return assessment_id
