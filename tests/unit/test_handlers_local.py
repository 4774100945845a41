"""
Local handler tests using mocks.

These tests validate handler routing, input validation and error mapping
without connecting to AWS. Services are replaced with MagicMocks.

Run with: pytest tests/unit/test_handlers_local.py -v
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from models.analytics import AnalyticsSummary, DashboardMetrics
from models.auth import AuthSession, AuthUser
from models.customer import Customer
from models.insight import AIInsight
from models.risk import RecordStatus, RiskRunSummary
from services.data_seeder import SeedSummary
from utils.error_handling import AuthenticationError, NotFoundError


def _event(method, path, body=None, query=None, sub="user-42", headers=None):
    event = {
        "requestContext": {
            "http": {"method": method, "path": path},
            "authorizer": {"jwt": {"claims": {"sub": sub}}},
        },
        "headers": headers or {},
    }
    if body is not None:
        event["body"] = body if isinstance(body, str) else json.dumps(body)
    if query is not None:
        event["queryStringParameters"] = query
    return event


def _body(response):
    return json.loads(response["body"])


class TestHealthCheckHandler:
    def test_health_check_returns_200(self):
        from handlers.health_check import lambda_handler

        result = lambda_handler({}, None)
        assert result["statusCode"] == 200
        body = _body(result)
        assert body["status"] == "ok"
        assert "timestamp" in body

    def test_health_check_includes_environment(self):
        from handlers.health_check import lambda_handler

        with patch.dict("os.environ", {"ENVIRONMENT": "test"}):
            assert _body(lambda_handler({}, None))["environment"] == "test"


class TestCustomersHandler:
    @pytest.fixture
    def service(self):
        mock = MagicMock()
        with patch("handlers.customers._get_customer_service", return_value=mock):
            yield mock

    def test_list_passes_filters(self, service):
        from handlers.customers import lambda_handler

        service.search.return_value = [Customer(id="c1", first_name="Ann")]
        resp = lambda_handler(
            _event("GET", "/customers", query={"search": "ann", "risk": "high", "limit": "20"}),
            None,
        )

        assert resp["statusCode"] == 200
        assert _body(resp)["count"] == 1
        service.search.assert_called_once_with(search="ann", risk="high", status="all", limit=20)

    def test_invalid_limit(self, service):
        from handlers.customers import lambda_handler

        resp = lambda_handler(_event("GET", "/customers", query={"limit": "many"}), None)
        assert resp["statusCode"] == 422

    def test_get_missing_customer(self, service):
        from handlers.customers import lambda_handler

        service.get_customer.side_effect = NotFoundError("Customer 'x' not found")
        resp = lambda_handler(_event("GET", "/customers/x"), None)
        assert resp["statusCode"] == 404
        assert _body(resp)["message"] == "Customer 'x' not found"

    def test_seed_uses_caller_identity(self, service):
        from handlers.customers import lambda_handler

        service.seed.return_value = SeedSummary(customers=10, transactions=200, interactions=30)
        resp = lambda_handler(_event("POST", "/customers/seed", body={"count": 10, "seed": 3}), None)

        assert resp["statusCode"] == 201
        assert _body(resp)["customers"] == 10
        service.seed.assert_called_once_with("user-42", count=10, seed=3)

    def test_clv(self, service):
        from handlers.customers import lambda_handler

        service.predict_clv.return_value = 12_500.0
        resp = lambda_handler(_event("GET", "/customers/c1/clv"), None)
        assert _body(resp) == {"customer_id": "c1", "predicted_clv": 12_500.0}

    def test_unknown_sub_route(self, service):
        from handlers.customers import lambda_handler

        resp = lambda_handler(_event("GET", "/customers/c1/history"), None)
        assert resp["statusCode"] == 404

    def test_unexpected_error_is_500_with_correlation_id(self, service):
        from handlers.customers import lambda_handler

        service.get_customer.side_effect = RuntimeError("db exploded")
        resp = lambda_handler(_event("GET", "/customers/c1"), SimpleNamespace(aws_request_id="req-1"))

        assert resp["statusCode"] == 500
        body = _body(resp)
        assert body["correlation_id"] == "req-1"
        assert "exploded" not in body["message"]


class TestStatusHandlers:
    @pytest.fixture
    def insight_service(self):
        mock = MagicMock()
        with patch("handlers.ai_insights._get_insight_service", return_value=mock):
            yield mock

    def test_update_insight_status(self, insight_service):
        from handlers.ai_insights import lambda_handler

        insight_service.update_status.return_value = AIInsight(
            id="i1", title="t", description="d", insight_type="trend", priority="low",
            confidence_score=0.5, status=RecordStatus.RESOLVED,
        )
        resp = lambda_handler(_event("POST", "/insights/i1/status", body={"status": "resolved"}), None)

        assert resp["statusCode"] == 200
        insight_service.update_status.assert_called_once_with("i1", RecordStatus.RESOLVED)

    @pytest.mark.parametrize("body", [{}, {"status": "archived"}, "not json"])
    def test_invalid_status(self, insight_service, body):
        from handlers.ai_insights import lambda_handler

        resp = lambda_handler(_event("POST", "/insights/i1/status", body=body), None)
        assert resp["statusCode"] == 422
        insight_service.update_status.assert_not_called()

    def test_risk_run(self):
        from handlers.risk_assessment import lambda_handler

        service = MagicMock()
        service.run_risk_analysis.return_value = RiskRunSummary(
            candidates=3, analyzed=2, failed=["c3"], assessment_ids=["r1", "r2"]
        )
        with patch("handlers.risk_assessment._get_risk_service", return_value=service):
            resp = lambda_handler(_event("POST", "/risk-assessments/run"), None)

        assert resp["statusCode"] == 200
        assert _body(resp)["failed"] == ["c3"]
        service.run_risk_analysis.assert_called_once_with("user-42")


class TestSegmentsHandler:
    def test_generate_defaults_to_system_user(self):
        from handlers.segments import lambda_handler

        service = MagicMock()
        service.generate_segmentation.return_value = []
        event = _event("POST", "/segments/generate")
        event["requestContext"].pop("authorizer")
        with patch("handlers.segments._get_segmentation_service", return_value=service):
            resp = lambda_handler(event, None)

        assert resp["statusCode"] == 201
        service.generate_segmentation.assert_called_once_with("system")


class TestAuthHandler:
    @pytest.fixture
    def auth(self):
        mock = MagicMock()
        with patch("handlers.auth._get_auth_service", return_value=mock):
            yield mock

    def test_login(self, auth):
        from handlers.auth import lambda_handler

        auth.login.return_value = AuthSession(
            user=AuthUser(id="u1", username="jdoe"), access_token="at"
        )
        resp = lambda_handler(
            _event("POST", "/auth/login", body={"username": "jdoe", "password": "pw"}), None
        )
        assert resp["statusCode"] == 200
        assert _body(resp)["access_token"] == "at"

    def test_login_missing_password(self, auth):
        from handlers.auth import lambda_handler

        resp = lambda_handler(_event("POST", "/auth/login", body={"username": "jdoe"}), None)
        assert resp["statusCode"] == 422
        auth.login.assert_not_called()

    def test_login_rejected(self, auth):
        from handlers.auth import lambda_handler

        auth.login.side_effect = AuthenticationError("Invalid username or password")
        resp = lambda_handler(
            _event("POST", "/auth/login", body={"username": "jdoe", "password": "bad"}), None
        )
        assert resp["statusCode"] == 401

    def test_me_requires_token(self, auth):
        from handlers.auth import lambda_handler

        assert lambda_handler(_event("GET", "/auth/me"), None)["statusCode"] == 401

    def test_me_with_bearer_token(self, auth):
        from handlers.auth import lambda_handler

        auth.me.return_value = AuthUser(id="u1", username="jdoe")
        resp = lambda_handler(
            _event("GET", "/auth/me", headers={"Authorization": "Bearer tok"}), None
        )
        assert _body(resp)["id"] == "u1"
        auth.me.assert_called_once_with("tok")

    def test_logout(self, auth):
        from handlers.auth import lambda_handler

        resp = lambda_handler(
            _event("POST", "/auth/logout", headers={"authorization": "Bearer tok"}), None
        )
        assert resp["statusCode"] == 200
        auth.logout.assert_called_once_with("tok")


class TestPageHandlers:
    def test_dashboard(self):
        from handlers.dashboard import lambda_handler

        service = MagicMock()
        service.dashboard_metrics.return_value = DashboardMetrics(total_customers=7)
        service.risk_distribution.return_value = []
        service.segment_performance.return_value = []
        with patch("handlers.dashboard._get_analytics_service", return_value=service):
            body = _body(lambda_handler(_event("GET", "/dashboard"), None))

        assert body["metrics"]["total_customers"] == 7

    def test_analytics(self):
        from handlers.analytics import lambda_handler

        service = MagicMock()
        service.analytics_summary.return_value = AnalyticsSummary(total_transactions=12)
        with patch("handlers.analytics._get_analytics_service", return_value=service):
            body = _body(lambda_handler(_event("GET", "/analytics"), None))

        assert body["total_transactions"] == 12
