"""
UserId Value Object - the authenticated identity behind a connection.

Taken from the session token subject. It is the sender stamped on every
relayed message and one half of a membership row.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserId:
    value: str  # canonical lowercase UUID

    def __post_init__(self):
        if not self.value:
            raise ValueError("UserId cannot be empty")

        object.__setattr__(self, "value", str(UUID(str(self.value))))

    def __str__(self) -> str:
        return self.value
