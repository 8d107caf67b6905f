"""Transport Layer - client connection adapters."""

from chat_relay.infrastructure.transport.websocket_stream import WebSocketMessageStream

__all__ = ["WebSocketMessageStream"]
