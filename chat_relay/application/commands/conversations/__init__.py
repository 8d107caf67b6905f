"""Conversation commands."""

from .start_direct_conversation import (
    StartDirectConversationCommand,
    StartDirectConversationHandler,
    direct_conversation_id,
    extract_conversation_ids,
)

__all__ = [
    "StartDirectConversationCommand",
    "StartDirectConversationHandler",
    "direct_conversation_id",
    "extract_conversation_ids",
]
