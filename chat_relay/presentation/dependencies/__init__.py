"""Request dependencies shared by the routers."""

from chat_relay.presentation.dependencies.auth import (
    AuthUser,
    decode_session_token,
    get_current_user,
    websocket_user_id,
)

__all__ = [
    "AuthUser",
    "decode_session_token",
    "get_current_user",
    "websocket_user_id",
]
