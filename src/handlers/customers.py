"""Handlers for the customer profile routes.

GET  /customers                         list with search/risk/status filters
POST /customers/seed                    generate sample data
GET  /customers/{id}                    single profile
GET  /customers/{id}/insights           AI insights for one customer
GET  /customers/{id}/recommendations    AI product recommendations
GET  /customers/{id}/clv                predicted lifetime value
"""

from typing import Optional

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
from utils.validators import parse_positive_int

logger = get_logger(__name__)

MAX_LIST_LIMIT = 1000
MAX_SEED_COUNT = 1000

_customer_service: Optional["CustomerService"] = None


def _get_customer_service():
    """Lazy-load CustomerService."""
    global _customer_service
    if _customer_service is None:
        from services.customer_service import CustomerService
        _customer_service = CustomerService()
    return _customer_service


@api_handler
def lambda_handler(event, context):
    method, parts = route_parts(event)
    service = _get_customer_service()

    if method == "GET" and len(parts) == 1:
        params = query_params(event)
        customers = service.search(
            search=params.get("search"),
            risk=params.get("risk") or "all",
            status=params.get("status") or "all",
            limit=parse_positive_int(params.get("limit"), "limit", 500, MAX_LIST_LIMIT),
        )
        return json_response(
            200,
            {"customers": [c.model_dump(mode="json") for c in customers], "count": len(customers)},
        )

    if method == "POST" and parts[1:] == ["seed"]:
        body = parse_body(event)
        count = parse_positive_int(body.get("count"), "count", 100, MAX_SEED_COUNT)
        summary = service.seed(current_user_id(event), count=count, seed=body.get("seed"))
        logger.info("Sample data seeded", extra=summary.as_dict())
        return json_response(201, summary.as_dict())

    if method == "GET" and len(parts) == 2:
        return json_response(200, service.get_customer(parts[1]).model_dump(mode="json"))

    if method == "GET" and len(parts) == 3:
        customer_id, view = parts[1], parts[2]
        if view == "insights":
            insights = service.customer_insights(customer_id)
            return json_response(200, {"insights": [i.model_dump(mode="json") for i in insights]})
        if view == "recommendations":
            recommendations = service.product_recommendations(customer_id)
            return json_response(
                200, {"recommendations": [r.model_dump(mode="json") for r in recommendations]}
            )
        if view == "clv":
            return json_response(
                200, {"customer_id": customer_id, "predicted_clv": service.predict_clv(customer_id)}
            )

    raise NotFoundError("Route not found")
