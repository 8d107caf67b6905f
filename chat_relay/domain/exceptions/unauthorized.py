"""
UnauthorizedError - Raised when an identity may not access a conversation.
Maps to: HTTP 401 / WebSocket close 1008 (upgrade refused)
"""


class UnauthorizedError(Exception):
    """Raised when a membership check fails or no identity is present"""

    def __init__(self, message: str = "You must be logged in to do that"):
        super().__init__(message)
