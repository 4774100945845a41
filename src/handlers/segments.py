"""Handlers for the segmentation routes.

GET  /segments                  stored segments, newest first
POST /segments/generate         run segmentation and persist the result
POST /segments/seed             insert the predefined segment catalogue
GET  /segments/{id}/customers   customers assigned to one segment
"""

from typing import Optional

from utils.error_handling import NotFoundError
from utils.http import api_handler, current_user_id, json_response, route_parts

_segmentation_service: Optional["SegmentationService"] = None


def _get_segmentation_service():
    """Lazy-load SegmentationService."""
    global _segmentation_service
    if _segmentation_service is None:
        from services.segmentation_service import SegmentationService
        _segmentation_service = SegmentationService()
    return _segmentation_service


@api_handler
def lambda_handler(event, context):
    method, parts = route_parts(event)
    service = _get_segmentation_service()

    if method == "GET" and len(parts) == 1:
        segments = service.list_segments()
        return json_response(200, {"segments": [s.model_dump(mode="json") for s in segments]})

    if method == "POST" and parts[1:] == ["generate"]:
        results = service.generate_segmentation(current_user_id(event))
        return json_response(201, {"segments": [r.model_dump(mode="json") for r in results]})

    if method == "POST" and parts[1:] == ["seed"]:
        inserted = service.seed_segments(current_user_id(event))
        return json_response(201, {"inserted": inserted})

    if method == "GET" and len(parts) == 3 and parts[2] == "customers":
        customers = service.segment_customers(parts[1])
        return json_response(
            200,
            {
                "segment_id": parts[1],
                "customers": [c.model_dump(mode="json") for c in customers],
            },
        )

    raise NotFoundError("Route not found")
