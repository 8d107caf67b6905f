"""
WebSocket Message Stream - MessageStream over a Starlette WebSocket.

Translates ASGI websocket events into transport Frames:
    websocket.receive (text)  → Frame(TEXT)
    websocket.receive (bytes) → Frame(BINARY)
    websocket.disconnect      → Frame(CLOSE, code)

Write failures on a gone peer surface as PeerDisconnectedError.
"""

import logging

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from chat_relay.domain.exceptions import PeerDisconnectedError
from chat_relay.domain.ports.transport import Frame, MessageStream

logger = logging.getLogger(__name__)


class WebSocketMessageStream(MessageStream):
    def __init__(self, websocket: WebSocket):
        self._websocket = websocket
        self._disconnected = False

    async def accept(self) -> None:
        await self._websocket.accept()

    async def receive(self) -> Frame:
        if self._disconnected:
            raise PeerDisconnectedError()
        try:
            event = await self._websocket.receive()
        except RuntimeError as e:
            self._disconnected = True
            raise PeerDisconnectedError() from e

        if event["type"] == "websocket.disconnect":
            self._disconnected = True
            return Frame.close_frame(event.get("code"))
        if event.get("text") is not None:
            return Frame.text_frame(event["text"])
        return Frame.binary_frame(event.get("bytes") or b"")

    async def send_text(self, text: str) -> None:
        if self._disconnected:
            raise PeerDisconnectedError()
        try:
            await self._websocket.send_text(text)
        except WebSocketDisconnect as e:
            self._disconnected = True
            raise PeerDisconnectedError(e.code) from e
        except (RuntimeError, OSError) as e:
            self._disconnected = True
            raise PeerDisconnectedError() from e

    async def close(self, code: int = 1000) -> None:
        if self._disconnected:
            return
        if self._websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self._websocket.close(code=code)
        except RuntimeError as e:
            logger.debug(f"[ws] Close after peer left: {e}")
        self._disconnected = True
