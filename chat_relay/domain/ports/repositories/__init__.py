"""
REPOSITORY PORTS - Data persistence interfaces

Infrastructure provides the implementations (gateway-backed, Redis-cached).
"""

from chat_relay.domain.ports.repositories.message_repository import MessageRepository

__all__ = [
    "MessageRepository",
]
