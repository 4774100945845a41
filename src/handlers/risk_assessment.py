"""Handlers for the risk assessment routes.

GET  /risk-assessments              assessment history with customer summaries
POST /risk-assessments/run          batch analysis over the riskiest customers
POST /risk-assessments/{id}/status  resolve or dismiss an assessment
"""

from typing import Optional

from models.risk import RecordStatus
from utils.error_handling import NotFoundError
from utils.http import (
    api_handler,
    current_user_id,
    json_response,
    parse_body,
    query_params,
    route_parts,
)
from utils.logging_config import get_logger
from utils.validators import ensure_enum, ensure_present, parse_positive_int

logger = get_logger(__name__)

_risk_service: Optional["RiskAssessmentService"] = None


def _get_risk_service():
    """Lazy-load RiskAssessmentService."""
    global _risk_service
    if _risk_service is None:
        from services.risk_service import RiskAssessmentService
        _risk_service = RiskAssessmentService()
    return _risk_service


@api_handler
def lambda_handler(event, context):
    method, parts = route_parts(event)
    service = _get_risk_service()

    if method == "GET" and len(parts) == 1:
        limit = parse_positive_int(query_params(event).get("limit"), "limit", 100, 500)
        assessments = service.list_assessments(limit)
        return json_response(
            200, {"assessments": [a.model_dump(mode="json") for a in assessments]}
        )

    if method == "POST" and parts[1:] == ["run"]:
        summary = service.run_risk_analysis(current_user_id(event))
        logger.info(
            "Risk analysis run finished",
            extra={"analyzed": summary.analyzed, "failed": len(summary.failed)},
        )
        return json_response(200, summary.model_dump(mode="json"))

    if method == "POST" and len(parts) == 3 and parts[2] == "status":
        raw_status = parse_body(event).get("status")
        ensure_present(raw_status, "status")
        status = ensure_enum(raw_status, RecordStatus, "status")
        assessment = service.update_status(parts[1], status)
        return json_response(200, assessment.model_dump(mode="json"))

    raise NotFoundError("Route not found")
