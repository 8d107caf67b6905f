"""
Authentication Dependency for FastAPI.

The session credential is an HS256 JWT issued by the auth collaborator:
    sub → user UUID
    exp, iat, aud, iss → required

It is read from (first match wins):
    1. Authorization: Bearer <token>
    2. the session cookie (Config.SESSION_COOKIE)
    3. ?token=<token> (WebSocket only; browsers cannot set headers there)

Only the identity is decided here; conversation access is the membership
authority's job.
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from starlette.websockets import WebSocket

from chat_relay.config.settings import Config
from chat_relay.domain.exceptions import UnauthorizedError
from chat_relay.domain.value_objects import UserId


@dataclass
class AuthUser:
    user_id: UserId

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("AuthUser must have a user_id defined.")


security = HTTPBearer(auto_error=False)


def decode_session_token(token: Optional[str]) -> UserId:
    """
    Verify a session token and return its subject.

    Raises:
        UnauthorizedError: token missing, expired, invalid, or without a UUID sub
    """
    if not token:
        raise UnauthorizedError("Missing session token")
    if not Config.SESSION_SECRET:
        raise UnauthorizedError("Session verification is not configured")

    try:
        claims = jwt.decode(
            token,
            Config.SESSION_SECRET,
            algorithms=["HS256"],
            audience=Config.SESSION_AUDIENCE,
            issuer=Config.SESSION_ISSUER,
            options={"require": ["exp", "iat", "aud", "iss"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(f"Invalid token: {str(e)}") from e

    try:
        return UserId(claims.get("sub") or "")
    except ValueError as e:
        raise UnauthorizedError("Missing or invalid sub claim in token") from e


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Extract and validate user from the session token.

    Raises:
        HTTPException 401 if token is missing, invalid, or expired
    """
    token = (
        credentials.credentials
        if credentials
        else request.cookies.get(Config.SESSION_COOKIE)
    )
    try:
        user_id = decode_session_token(token)
    except UnauthorizedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        ) from e

    return AuthUser(user_id=user_id)


def websocket_user_id(websocket: WebSocket) -> UserId:
    """
    Identity of a WebSocket upgrade request.

    Raises:
        UnauthorizedError: no valid session token on the request
    """
    token = None
    authorization = websocket.headers.get("authorization", "")
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        token = value.strip()
    if not token:
        token = websocket.cookies.get(Config.SESSION_COOKIE)
    if not token:
        token = websocket.query_params.get("token")
    return decode_session_token(token)
