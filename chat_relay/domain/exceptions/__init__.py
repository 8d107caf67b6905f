"""
DOMAIN EXCEPTIONS

Raised by domain/application logic and caught by the presentation layer,
which maps them to HTTP status codes or WebSocket close codes.
"""

from chat_relay.domain.exceptions.unauthorized import UnauthorizedError
from chat_relay.domain.exceptions.data_access import DataAccessError
from chat_relay.domain.exceptions.malformed_input import MalformedInputError
from chat_relay.domain.exceptions.peer_disconnected import PeerDisconnectedError
from chat_relay.domain.exceptions.validation_error import DomainValidationError

__all__ = [
    "UnauthorizedError",
    "DataAccessError",
    "MalformedInputError",
    "PeerDisconnectedError",
    "DomainValidationError",
]
