"""
Risk assessment service tests against in-memory SQLite.

Run with: pytest tests/unit/test_risk_service.py -v
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from models.risk import RecordStatus, RiskAnalysis
from services.risk_service import RiskAssessmentService
from utils.error_handling import NotFoundError
from utils.settings import AppSettings


def _analysis(score=0.9):
    return RiskAnalysis(
        risk_score=score,
        risk_level="high",
        factors=["Low balance", "Irregular deposits"],
        recommendations=["Enhanced monitoring"],
    )


@pytest.fixture
def engine():
    mock = MagicMock()
    mock.assess_customer_risk.return_value = _analysis()
    return mock


@pytest.fixture
def populated(database, customer_row):
    database.customers.create_many(
        [
            customer_row("risky", risk_score=0.65),
            customer_row("poor", risk_score=0.1, account_balance=500.0),
            customer_row("safe", risk_score=0.2, account_balance=25_000.0),
        ]
    )
    return database


def _service(database, engine, **settings):
    return RiskAssessmentService(database=database, engine=engine, settings=AppSettings(**settings))


class TestRunRiskAnalysis:
    def test_selects_candidates(self, populated, engine, now):
        summary = _service(populated, engine).run_risk_analysis("user-1", now=now)

        assert summary.candidates == 2
        assert summary.analyzed == 2
        assessed = {c.args[0].id for c in engine.assess_customer_risk.call_args_list}
        assert assessed == {"risky", "poor"}

    def test_batch_cap(self, populated, engine, now):
        summary = _service(populated, engine, risk_analysis_batch_cap=1).run_risk_analysis(
            "user-1", now=now
        )
        assert summary.candidates == 2
        assert summary.analyzed == 1

    def test_stores_assessment_and_updates_customer(self, populated, engine, now):
        summary = _service(populated, engine).run_risk_analysis("user-1", now=now)

        record = populated.risk_assessments.get(summary.assessment_ids[0])
        assert record["status"] == "active"
        assert record["risk_level"] == "high"
        assert record["expires_date"].replace(tzinfo=None) == (now + timedelta(days=30)).replace(
            tzinfo=None
        )
        assert populated.customers.get(record["customer_id"])["risk_score"] == 0.9

    def test_cached_profile_sees_new_score(self, populated, engine, now):
        service = _service(populated, engine)
        assert service.customers.get_customer("risky").risk_score == 0.65

        service.run_risk_analysis("user-1", now=now)
        assert service.customers.get_customer("risky").risk_score == 0.9

    def test_failure_on_one_customer_continues(self, populated, engine, now):
        engine.assess_customer_risk.side_effect = [RuntimeError("boom"), _analysis(0.4)]
        summary = _service(populated, engine).run_risk_analysis("user-1", now=now)

        assert summary.analyzed == 1
        assert len(summary.failed) == 1
        assert populated.risk_assessments.count() == 1

    def test_passes_twenty_most_recent_transactions(self, populated, engine, now):
        populated.transactions.create_many(
            {
                "id": f"t{i}",
                "customer_id": "risky",
                "transaction_type": "debit",
                "amount": 10.0,
                "transaction_date": now - timedelta(days=i),
            }
            for i in range(25)
        )
        _service(populated, engine).run_risk_analysis("user-1", now=now)

        call = next(
            c for c in engine.assess_customer_risk.call_args_list if c.args[0].id == "risky"
        )
        transactions = call.args[1]
        assert len(transactions) == 20
        assert transactions[0].id == "t0"


class TestAssessmentHistory:
    def test_list_includes_customer_summary(self, populated, engine, now):
        service = _service(populated, engine)
        service.run_risk_analysis("user-1", now=now)

        records = service.list_assessments()
        assert len(records) == 2
        assert records[0].customer.first_name == "Jane"
        assert records[0].factors == ["Low balance", "Irregular deposits"]

    def test_update_status(self, populated, engine, now):
        service = _service(populated, engine)
        assessment_id = service.run_risk_analysis("user-1", now=now).assessment_ids[0]

        record = service.update_status(assessment_id, RecordStatus.RESOLVED)
        assert record.status == RecordStatus.RESOLVED

    def test_update_missing(self, populated, engine):
        with pytest.raises(NotFoundError):
            _service(populated, engine).update_status("risk_missing", RecordStatus.DISMISSED)
