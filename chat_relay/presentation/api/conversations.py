"""
Conversations API Router - conversation discovery and message history.

Thin layer: only handles HTTP concerns (request/response). Business logic
lives in the application handlers, injected by Dishka.

Flow:
  HTTP Request → Router → Command/Query → Handler → Gateway → Database
                                  ↓
  HTTP Response ← Router ← Result ←
"""

from logging import getLogger
from fastapi import APIRouter, Depends, HTTPException, status
from dishka.integrations.fastapi import FromDishka, inject
from pydantic import BaseModel
from chat_relay.application.commands.conversations import (
    StartDirectConversationCommand,
    StartDirectConversationHandler,
)
from chat_relay.application.queries.conversations import (
    ListConversationsQuery,
    ListConversationsHandler,
)
from chat_relay.application.queries.chat import (
    GetChatHistoryQuery,
    GetChatHistoryHandler,
)
from chat_relay.application.dto.chat import MessageDTO
from chat_relay.domain.exceptions import (
    DataAccessError,
    DomainValidationError,
    UnauthorizedError,
)
from chat_relay.domain.value_objects import ConversationId, UserId
from chat_relay.presentation.dependencies.auth import AuthUser, get_current_user
from chat_relay.config.settings import Config

logger = getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class StartConversationRequest(BaseModel):
    """Request body for starting a direct conversation."""

    friend_id: str


class StartConversationResponse(BaseModel):
    conversation_id: str


class ListConversationsResponse(BaseModel):
    conversations: list[str]


class ConversationMessagesResponse(BaseModel):
    """
    Message history, oldest first:
    {
        "messages": [
            {"id": 1, "conversation_id": "uuid", "sender_id": "uuid",
             "content": "...", "message_type": "text", "created_at": "..."},
            ...
        ]
    }
    """

    messages: list[MessageDTO]


# ==================== ROUTER ====================

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _bad_gateway(e: DataAccessError) -> HTTPException:
    logger.error(f"[conversations] {e}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


# ==================== ENDPOINTS ====================


@router.post(
    "",
    response_model=StartConversationResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def start_conversation(
    request: StartConversationRequest,
    handler: FromDishka[StartDirectConversationHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Find or create the direct conversation with friend_id."""
    try:
        command = StartDirectConversationCommand(
            user_id=current_user.user_id,
            friend_id=UserId(request.friend_id),
        )
        conversation_id = await handler.execute(command)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except DataAccessError as e:
        raise _bad_gateway(e) from e

    return StartConversationResponse(conversation_id=conversation_id.value)


@router.get(
    "",
    response_model=ListConversationsResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def list_conversations(
    handler: FromDishka[ListConversationsHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Ids of every conversation the current user belongs to."""
    try:
        conversation_ids = await handler.execute(
            ListConversationsQuery(user_id=current_user.user_id)
        )
    except DataAccessError as e:
        raise _bad_gateway(e) from e

    return ListConversationsResponse(
        conversations=[conversation_id.value for conversation_id in conversation_ids]
    )


@router.get(
    "/{conversation_id}/messages",
    response_model=ConversationMessagesResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def get_messages(
    conversation_id: str,
    handler: FromDishka[GetChatHistoryHandler],
    current_user: AuthUser = Depends(get_current_user),
    limit: int = Config.CONVERSATION_MESSAGE_LIMIT,
):
    """Message history of a conversation the current user is a member of."""
    try:
        query = GetChatHistoryQuery(
            conversation_id=ConversationId(conversation_id),
            user_id=current_user.user_id,
            limit=limit,
        )
        messages = await handler.execute(query)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UnauthorizedError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except DataAccessError as e:
        raise _bad_gateway(e) from e

    return ConversationMessagesResponse(
        messages=[MessageDTO.from_entity(message) for message in messages]
    )
