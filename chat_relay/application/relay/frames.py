"""
Inbound frame parsing.

A text frame is either a structured payload (valid JSON, whose string
"content" field is the message) or raw text used verbatim. Only text that
fails to decode as JSON is raw. JSON that is not an object, or an object
without a string "content", is structured and carries no content.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional, Union

from chat_relay.domain.exceptions import MalformedInputError


@dataclass(frozen=True)
class StructuredFrame:
    content: Optional[str]  # None when there is no string "content"


@dataclass(frozen=True)
class RawFrame:
    text: str

    @property
    def content(self) -> str:
        return self.text


InboundFrame = Union[StructuredFrame, RawFrame]


def decode_structured(text: str) -> StructuredFrame:
    """Decode a JSON frame. Raises MalformedInputError if it is not valid JSON."""
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedInputError(f"Not a JSON payload: {e}") from e

    content = payload.get("content") if isinstance(payload, dict) else None
    return StructuredFrame(content=content if isinstance(content, str) else None)


def parse_inbound_frame(text: str) -> InboundFrame:
    try:
        return decode_structured(text)
    except MalformedInputError:
        return RawFrame(text)


def message_content(frame: InboundFrame) -> Optional[str]:
    """The content to relay, or None if the frame carries nothing to send."""
    content = frame.content
    if content is None or not content.strip():
        return None
    return content
