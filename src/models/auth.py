"""Authentication models."""

from typing import Optional

from pydantic import BaseModel


class AuthUser(BaseModel):
    """Signed-in user as reported by Cognito."""

    id: str
    username: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    """Tokens returned by a successful login."""

    user: AuthUser
    access_token: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: int = 3600


class LoginRequest(BaseModel):
    username: str
    password: str
