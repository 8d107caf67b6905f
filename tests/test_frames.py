"""
Unit tests for inbound frame parsing.

Run with: pytest tests/test_frames.py -v
"""

import pytest

from chat_relay.application.relay import (
    RawFrame,
    StructuredFrame,
    message_content,
    parse_inbound_frame,
)
from chat_relay.application.relay.frames import decode_structured
from chat_relay.domain.exceptions import MalformedInputError


class TestParseInboundFrame:
    def test_json_object_is_structured(self):
        frame = parse_inbound_frame('{"content": "hello"}')

        assert frame == StructuredFrame(content="hello")

    def test_plain_text_is_raw(self):
        assert parse_inbound_frame("hello") == RawFrame("hello")

    @pytest.mark.parametrize("text", ['"hello"', "42", "[1, 2]", "null", "true"])
    def test_json_that_is_not_an_object_carries_no_content(self, text):
        assert parse_inbound_frame(text) == StructuredFrame(content=None)

    def test_non_string_content_counts_as_missing(self):
        assert parse_inbound_frame('{"content": 5}') == StructuredFrame(content=None)
        assert parse_inbound_frame('{"text": "hi"}') == StructuredFrame(content=None)

    def test_decoder_raises_on_malformed_json(self):
        with pytest.raises(MalformedInputError):
            decode_structured("{not json")


class TestMessageContent:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ('{"content": "hello"}', "hello"),
            ("hello", "hello"),
            ('{"content": "   "}', None),
            ("", None),
            ("   ", None),
            ('{"other": 1}', None),
            ('{"content": "  padded  "}', "  padded  "),
            ('"hi"', None),
            ("42", None),
            ("[1, 2]", None),
            ("null", None),
        ],
    )
    def test_content_extraction(self, text, expected):
        assert message_content(parse_inbound_frame(text)) == expected
