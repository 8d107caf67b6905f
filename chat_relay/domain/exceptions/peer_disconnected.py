"""
PeerDisconnectedError - The remote side of a connection went away.
Normal termination, not an error condition.
"""


class PeerDisconnectedError(Exception):
    def __init__(self, code: int | None = None):
        super().__init__(f"Peer disconnected (code={code})")
        self.code = code
