"""Handler for GET /dashboard."""

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
    """Headline metrics plus the risk and segment charts."""
    service = _get_analytics_service()
    return json_response(
        200,
        {
            "metrics": service.dashboard_metrics().model_dump(mode="json"),
            "risk_distribution": [s.model_dump(mode="json") for s in service.risk_distribution()],
            "segment_performance": [
                s.model_dump(mode="json") for s in service.segment_performance()
            ],
        },
    )
