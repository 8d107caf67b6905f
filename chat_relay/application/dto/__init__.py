"""
DTOs - Data Transfer Objects for API output.

These are different from domain entities: DTOs are the JSON shapes clients
see, entities are what the application works with.
"""

from chat_relay.application.dto.chat import MessageDTO

__all__ = [
    "MessageDTO",
]
