"""
DomainValidationError - Raised when a business rule is violated.
Maps to: HTTP 400 Bad Request
"""


class DomainValidationError(Exception):
    """Exception raised for domain validation errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
