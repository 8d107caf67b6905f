"""
API Routers - FastAPI endpoint definitions.
"""

from chat_relay.presentation.api.conversations import router as conversations_router
from chat_relay.presentation.api.metrics import router as metrics_router
from chat_relay.presentation.api.ws import router as ws_router

__all__ = [
    "conversations_router",
    "metrics_router",
    "ws_router",
]
