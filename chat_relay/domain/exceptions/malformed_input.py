"""
MalformedInputError - An inbound frame could not be decoded as a structured
payload. Never surfaced: the frame falls back to raw text.
"""


class MalformedInputError(ValueError):
    pass
