"""
Transport Port - one client's bidirectional message stream.
Implementation: chat_relay/infrastructure/transport/websocket_stream.py

Frames are tagged text / binary / close; the relay only interprets text and
close.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FrameKind(str, Enum):
    TEXT = "text"
    BINARY = "binary"
    CLOSE = "close"


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    text: Optional[str] = None
    data: Optional[bytes] = None
    code: Optional[int] = None

    @classmethod
    def text_frame(cls, text: str) -> Frame:
        return cls(kind=FrameKind.TEXT, text=text)

    @classmethod
    def binary_frame(cls, data: bytes) -> Frame:
        return cls(kind=FrameKind.BINARY, data=data)

    @classmethod
    def close_frame(cls, code: Optional[int] = None) -> Frame:
        return cls(kind=FrameKind.CLOSE, code=code)


class MessageStream(ABC):
    @abstractmethod
    async def accept(self) -> None:
        """Complete the handshake. Called once, after authorization."""
        ...

    @abstractmethod
    async def receive(self) -> Frame:
        """Next inbound frame. Raises PeerDisconnectedError on read failure."""
        ...

    @abstractmethod
    async def send_text(self, text: str) -> None:
        """Write one text frame. Raises PeerDisconnectedError if the peer is gone."""
        ...

    @abstractmethod
    async def close(self, code: int = 1000) -> None: ...
