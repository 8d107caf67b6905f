"""
DataAccessError - Raised when the persistence gateway is unreachable or
rejects an operation.
Maps to: HTTP 502 Bad Gateway on read paths
"""


class DataAccessError(Exception):
    """Exception raised for persistence gateway failures."""

    def __init__(self, message: str = "Database error"):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Database error: {self.message}"
