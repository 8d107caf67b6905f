"""
PORTS - Interfaces that infrastructure implements

- persistence_gateway.py → generic data-access contract over named collections
- transport.py           → bidirectional message stream (WebSocket)
- repositories/          → message persistence used by the relay and history
"""

from chat_relay.domain.ports.persistence_gateway import (
    PersistenceGateway,
    Collections,
)
from chat_relay.domain.ports.transport import Frame, FrameKind, MessageStream

__all__ = [
    "PersistenceGateway",
    "Collections",
    "Frame",
    "FrameKind",
    "MessageStream",
]
