"""Handlers for GET /insights, POST /insights/generate and POST /insights/{id}/status."""

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
from utils.validators import ensure_enum, ensure_present, parse_positive_int

_insight_service: Optional["InsightService"] = None


def _get_insight_service():
    """Lazy-load InsightService."""
    global _insight_service
    if _insight_service is None:
        from services.insight_service import InsightService
        _insight_service = InsightService()
    return _insight_service


@api_handler
def lambda_handler(event, context):
    method, parts = route_parts(event)
    service = _get_insight_service()

    if method == "GET" and len(parts) == 1:
        limit = parse_positive_int(query_params(event).get("limit"), "limit", 50, 500)
        insights = service.list_insights(limit)
        return json_response(200, {"insights": [i.model_dump(mode="json") for i in insights]})

    if method == "POST" and parts[1:] == ["generate"]:
        insights = service.generate_insights(current_user_id(event))
        return json_response(201, {"insights": [i.model_dump(mode="json") for i in insights]})

    if method == "POST" and len(parts) == 3 and parts[2] == "status":
        raw_status = parse_body(event).get("status")
        ensure_present(raw_status, "status")
        status = ensure_enum(raw_status, RecordStatus, "status")
        insight = service.update_status(parts[1], status)
        return json_response(200, insight.model_dump(mode="json"))

    raise NotFoundError("Route not found")
