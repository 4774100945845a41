"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

One Lambda keeps warm caches (customer profiles, database engine) shared
across routes while the code stays organized by page.
"""

from typing import Callable, Tuple

from utils.http import json_response

from . import (
    ai_insights,
    analytics,
    auth,
    customers,
    dashboard,
    health_check,
    risk_assessment,
    segments,
)


def _route_table() -> Tuple[Tuple[str, Callable], ...]:
    # Looked up per call so tests can monkeypatch module handlers.
    return (
        ("GET /health", health_check.lambda_handler),
        ("POST /auth/", auth.lambda_handler),
        ("GET /auth/", auth.lambda_handler),
        ("GET /dashboard", dashboard.lambda_handler),
        ("GET /analytics", analytics.lambda_handler),
        ("GET /customers", customers.lambda_handler),
        ("POST /customers/", customers.lambda_handler),
        ("GET /segments", segments.lambda_handler),
        ("POST /segments/", segments.lambda_handler),
        ("GET /insights", ai_insights.lambda_handler),
        ("POST /insights/", ai_insights.lambda_handler),
        ("GET /risk-assessments", risk_assessment.lambda_handler),
        ("POST /risk-assessments/", risk_assessment.lambda_handler),
    )


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    Routes on "METHOD path" prefixes; each page module dispatches its own
    sub-paths and maps errors to JSON responses.
    """
    http = event.get("requestContext", {}).get("http", {})
    route_key = f"{http.get('method', '').upper()} {http.get('path', '')}"

    for prefix, handler in _route_table():
        if route_key == prefix or route_key.startswith(prefix.rstrip("/") + "/"):
            return handler(event, context)

    return json_response(404, {"message": "Route not found", "route": route_key})
