"""Handler for GET /analytics."""

from typing import Optional

from utils.http import api_handler, json_response

_analytics_service: Optional["AnalyticsService"] = None


def _get_analytics_service():
    """Lazy-load AnalyticsService."""
    global _analytics_service
    if _analytics_service is None:
        from services.analytics_service import AnalyticsService
        _analytics_service = AnalyticsService()
    return _analytics_service


@api_handler
def lambda_handler(event, context):
    summary = _get_analytics_service().analytics_summary()
    return json_response(200, summary.model_dump(mode="json"))
