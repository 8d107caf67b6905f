"""
Relay WebSocket Router.

    WS /ws/{conversation_id}

1. Resolve the caller's identity from the session token
2. Membership gate (RelayService.connect)
3. Accept and run the session until either side ends

Any failure in 1-2 closes the upgrade with 1008 (policy violation) before it
is accepted, so an unauthorized client never joins the channel.
"""

from logging import getLogger
from uuid import uuid4

from fastapi import APIRouter, WebSocket, status

from chat_relay.application.relay.service import RelayService
from chat_relay.config.logging_config import correlation_id_var
from chat_relay.domain.exceptions import UnauthorizedError
from chat_relay.domain.value_objects import ConversationId
from chat_relay.infrastructure.transport import WebSocketMessageStream
from chat_relay.presentation.dependencies.auth import websocket_user_id

logger = getLogger(__name__)

router = APIRouter(tags=["relay"])


@router.websocket("/ws/{conversation_id}")
async def relay(websocket: WebSocket, conversation_id: str):
    correlation_id_var.set(
        websocket.headers.get("X-Correlation-ID") or f"ws-{uuid4().hex[:12]}"
    )

    try:
        user_id = websocket_user_id(websocket)
        conversation = ConversationId(conversation_id)
    except (UnauthorizedError, ValueError) as e:
        logger.info(f"[ws] Rejected upgrade for {conversation_id}: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # The relay service is APP scoped; resolve it from the root container
    relay_service = await websocket.app.state.dishka_container.get(RelayService)
    try:
        session = await relay_service.connect(
            user_id, conversation, WebSocketMessageStream(websocket)
        )
    except UnauthorizedError as e:
        logger.info(f"[ws] Rejected {user_id} for {conversation}: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await session.run()
