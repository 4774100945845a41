"""
Cognito-backed authentication.

Keeps the signed-in session for the current process and notifies
subscribers whenever it changes (login, logout).
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List, Optional

import boto3
from botocore.exceptions import ClientError

from models.auth import AuthSession, AuthUser
from utils.error_handling import AuthenticationError
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

AuthListener = Callable[[Optional[AuthUser]], None]

_REJECTED_CODES = {"NotAuthorizedException", "UserNotFoundException"}


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


class AuthService:
    """Login/logout/current-user operations over a Cognito app client."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        region: Optional[str] = None,
        settings: Optional[AppSettings] = None,
    ):
        settings = settings or AppSettings.from_environment()
        self.client_id = client_id or settings.cognito_client_id
        self.client = boto3.client(
            "cognito-idp", region_name=region or settings.bedrock_region
        )
        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []
        self._lock = Lock()

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def login(self, username: str, password: str) -> AuthSession:
        try:
            response = self.client.initiate_auth(
                ClientId=self.client_id,
                AuthFlow="USER_PASSWORD_AUTH",
                AuthParameters={"USERNAME": username, "PASSWORD": password},
            )
        except ClientError as exc:
            if _error_code(exc) not in _REJECTED_CODES:
                raise
            logger.info("Login rejected", extra={"username": username})
            raise AuthenticationError("Invalid username or password")

        result = response.get("AuthenticationResult")
        if not result:
            # MFA / new-password challenges are not supported here.
            raise AuthenticationError(
                f"Additional challenge required: {response.get('ChallengeName', 'unknown')}"
            )

        user = self._lookup_user(result["AccessToken"])
        session = AuthSession(
            user=user,
            access_token=result["AccessToken"],
            id_token=result.get("IdToken"),
            refresh_token=result.get("RefreshToken"),
            expires_in=result.get("ExpiresIn", 3600),
        )
        self._session = session
        logger.info("User logged in", extra={"user_id": user.id})
        self._notify(user)
        return session

    def me(self, access_token: Optional[str] = None) -> AuthUser:
        """Current user for the given token, else for the stored session."""
        if access_token:
            return self._lookup_user(access_token)
        if self._session:
            return self._session.user
        raise AuthenticationError()

    def logout(self, access_token: Optional[str] = None) -> None:
        """Sign out the given token, else the stored session.

        The stored session is cleared when it owns the signed-out token.
        """
        session = self._session
        token = access_token or (session.access_token if session else None)
        if token is None:
            return
        try:
            self.client.global_sign_out(AccessToken=token)
        except Exception as exc:
            logger.warning("Global sign-out failed", extra={"error": str(exc)})
        if session is None or session.access_token != token:
            return
        self._session = None
        logger.info("User logged out", extra={"user_id": session.user.id})
        self._notify(None)

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Subscribe to session changes; returns an unsubscribe callable.

        The listener is called immediately with the current user.
        """
        with self._lock:
            self._listeners.append(listener)
        self._call(listener, self._session.user if self._session else None)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _lookup_user(self, access_token: str) -> AuthUser:
        try:
            response = self.client.get_user(AccessToken=access_token)
        except ClientError as exc:
            if _error_code(exc) not in _REJECTED_CODES:
                raise
            raise AuthenticationError("Access token is invalid or expired")
        attributes = {a["Name"]: a["Value"] for a in response.get("UserAttributes", [])}
        return AuthUser(
            id=attributes.get("sub", response["Username"]),
            username=response["Username"],
            email=attributes.get("email"),
        )

    def _notify(self, user: Optional[AuthUser]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            self._call(listener, user)

    def _call(self, listener: AuthListener, user: Optional[AuthUser]) -> None:
        try:
            listener(user)
        except Exception as exc:
            logger.warning("Auth listener failed", extra={"error": str(exc)})
