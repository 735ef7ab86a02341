"""Realtime channel endpoint.

Frames in both directions are JSON objects ``{"event": ..., "data": ...}``.
Clients send ``place_bid`` and ``vote``; the server broadcasts ``new_bid``,
``vote_update`` and ``new_meme`` to every connection and replies ``error``
to the sender of a rejected or malformed frame.
"""

import json
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

from fastapi import WebSocket, status
from pydantic import BaseModel, ValidationError

from ..exceptions.base import InvalidMessageError, MemeHustleError
from ..models.schemas.memes import PlaceBidMessage, VoteMessage
from ..services.broadcaster import ConnectionManager, RealtimeConnection
from ..services.meme_service import MemeService
from ..utils.logging import get_logger
from .middleware.error_handler import channel_error_message

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_frame(raw: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """
    Split a raw frame into event name and payload.

    Args:
        raw: Text of the frame, or None for a binary frame

    Raises:
        InvalidMessageError: If the frame is not a JSON object with an event name
    """
    if raw is None:
        raise InvalidMessageError("Malformed message")
    try:
        message = json.loads(raw)
    except ValueError:
        raise InvalidMessageError("Malformed message")

    if not isinstance(message, dict) or not isinstance(message.get("event"), str):
        raise InvalidMessageError("Message must be an object with an event name")

    data = message.get("data") or {}
    if not isinstance(data, dict):
        raise InvalidMessageError("Message data must be an object")
    return message["event"], data


def _validate(model: Type[M], event: str, data: Dict[str, Any]) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidMessageError(
            f"Invalid {event} payload", details={"errors": e.errors(include_url=False)}
        )


async def _on_place_bid(service: MemeService, data: Dict[str, Any]) -> None:
    message = _validate(PlaceBidMessage, "place_bid", data)
    await service.place_bid(message.meme_id, message.user_id, message.credits)


async def _on_vote(service: MemeService, data: Dict[str, Any]) -> None:
    message = _validate(VoteMessage, "vote", data)
    await service.vote(message.meme_id, message.vote_type)


HANDLERS: Dict[str, Callable[[MemeService, Dict[str, Any]], Awaitable[None]]] = {
    "place_bid": _on_place_bid,
    "vote": _on_vote,
}


async def handle_frame(
    service: MemeService,
    manager: ConnectionManager,
    connection: RealtimeConnection,
    raw: Optional[str],
) -> None:
    """Run one inbound frame, replying ``error`` to the sender on failure."""
    event: Optional[str] = None
    try:
        event, data = parse_frame(raw)
        logger.debug("frame_received", connection=connection.id, event_name=event)
        handler = HANDLERS.get(event)
        if handler is None:
            raise InvalidMessageError(f"Unknown event: {event}")
        await handler(service, data)
    except MemeHustleError as e:
        logger.info(
            "frame_rejected", connection=connection.id, event_name=event, code=e.code.value
        )
        manager.send(connection, "error", {"message": channel_error_message(e, event)})


async def realtime_channel(websocket: WebSocket) -> None:
    """Serve one realtime connection until the client goes away."""
    settings = websocket.app.state.settings
    origin = websocket.headers.get("origin")
    if origin and origin not in settings.cors_origins:
        logger.warning("realtime_origin_rejected", origin=origin)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager: ConnectionManager = websocket.app.state.connections
    service: MemeService = websocket.app.state.meme_service
    connection = await manager.connect(websocket)
    reason: Any = None
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                reason = message.get("code")
                break
            await handle_frame(service, manager, connection, message.get("text"))
    finally:
        await manager.disconnect(connection, reason=reason)
