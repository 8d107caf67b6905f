"""chat-relay: real-time conversation fan-out relay."""

__version__ = "1.0.0"
