"""Helpers for API Gateway HTTP API (payload v2) events."""

import functools
import json
import uuid
from typing import Any, Callable, Dict, List

from pydantic import ValidationError as PydanticValidationError

from utils.error_handling import AppError, ValidationError, to_response
from utils.logging_config import get_logger

logger = get_logger(__name__)


def json_response(status: int, body: Any) -> Dict:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": body if isinstance(body, str) else json.dumps(body, default=str),
    }


def route_parts(event: Dict) -> tuple[str, List[str]]:
    """Return the upper-cased method and the non-empty path segments."""
    http = event.get("requestContext", {}).get("http", {})
    method = (http.get("method") or "").upper()
    path = http.get("path") or event.get("rawPath") or ""
    return method, [part for part in path.split("/") if part]


def parse_body(event: Dict) -> Dict:
    """Decode a JSON request body; missing bodies become an empty dict."""
    raw = event.get("body")
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def query_params(event: Dict) -> Dict:
    return event.get("queryStringParameters") or {}


def current_user_id(event: Dict) -> str:
    """User id from the Cognito JWT authorizer claims."""
    claims = (
        event.get("requestContext", {})
        .get("authorizer", {})
        .get("jwt", {})
        .get("claims", {})
    )
    return claims.get("sub") or "system"


def bearer_token(event: Dict) -> str:
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    value = headers.get("authorization", "")
    if value.lower().startswith("bearer "):
        return value[7:].strip()
    return value.strip()


def api_handler(func: Callable) -> Callable:
    """Map handler exceptions onto JSON error responses.

    AppError keeps its status, pydantic validation errors become 422 and
    anything else is logged with a correlation id and returned as 500.
    """

    @functools.wraps(func)
    def wrapper(event, context):
        try:
            return func(event, context)
        except AppError as exc:
            return to_response(exc)
        except PydanticValidationError as exc:
            return json_response(
                422, {"message": "Invalid input", "status": "error", "errors": exc.errors()}
            )
        except Exception:
            correlation_id = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
            logger.exception(
                "Unhandled error", extra={"correlation_id": correlation_id}
            )
            return json_response(
                500,
                {
                    "message": "Internal server error",
                    "status": "error",
                    "correlation_id": correlation_id,
                },
            )

    return wrapper
