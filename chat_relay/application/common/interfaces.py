"""
Base interfaces for CQRS pattern.

Usage:
    @dataclass(frozen=True)
    class StartDirectConversationCommand(Command[ConversationId]):
        user_id: UserId
        friend_id: UserId

    class StartDirectConversationHandler(CommandHandler[ConversationId]):
        def __init__(self, gateway: PersistenceGateway):
            self._gateway = gateway

        async def execute(self, cmd: StartDirectConversationCommand) -> ConversationId:
            ...
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

T = TypeVar("T")


class Command(ABC, Generic[T]):
    """Base class for write operations"""
    pass


class CommandHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, command: Command[T]) -> T:
        ...


class Query(ABC, Generic[T]):
    """Base class for read operations"""
    pass


class QueryHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, query: Query[T]) -> T:
        ...
