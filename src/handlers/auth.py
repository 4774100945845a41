"""Handlers for /auth/login, /auth/logout and /auth/me."""

from typing import Optional

from models.auth import LoginRequest
from utils.error_handling import AuthenticationError, NotFoundError
from utils.http import api_handler, bearer_token, json_response, parse_body, route_parts
from utils.logging_config import get_logger

logger = get_logger(__name__)

_auth_service: Optional["AuthService"] = None


def _get_auth_service():
    """Lazy-load AuthService."""
    global _auth_service
    if _auth_service is None:
        from services.auth_service import AuthService
        _auth_service = AuthService()
    return _auth_service


@api_handler
def lambda_handler(event, context):
    method, parts = route_parts(event)
    action = parts[1] if len(parts) > 1 else ""

    if method == "POST" and action == "login":
        request = LoginRequest.model_validate(parse_body(event))
        session = _get_auth_service().login(request.username, request.password)
        return json_response(200, session.model_dump(mode="json"))

    if method == "POST" and action == "logout":
        _get_auth_service().logout(bearer_token(event) or None)
        return json_response(200, {"message": "Logged out"})

    if method == "GET" and action == "me":
        token = bearer_token(event)
        if not token:
            raise AuthenticationError()
        user = _get_auth_service().me(token)
        return json_response(200, user.model_dump(mode="json"))

    raise NotFoundError("Route not found")
