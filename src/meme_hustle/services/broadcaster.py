"""Realtime connection registry and broadcast fan-out."""

import asyncio
import itertools
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from ..utils.logging import get_logger

logger = get_logger(__name__)


def frame(event: str, data: Any) -> Dict[str, Any]:
    """Channel frame envelope."""
    return {"event": event, "data": data}


class RealtimeConnection:
    """One connected observer with its own ordered outbound queue."""

    _ids = itertools.count(1)

    def __init__(self, websocket: WebSocket) -> None:
        self.id = f"conn-{next(self._ids)}"
        self.websocket = websocket
        self.queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self.writer: Optional[asyncio.Task] = None

    def start(self) -> None:
        self.writer = asyncio.create_task(self._drain(), name=f"realtime-writer-{self.id}")

    def enqueue(self, message: Dict[str, Any]) -> None:
        self.queue.put_nowait(message)

    async def close(self) -> None:
        """Stop the writer once already queued messages are flushed."""
        self.queue.put_nowait(None)
        if self.writer is not None:
            await self.writer

    async def _drain(self) -> None:
        while True:
            message = await self.queue.get()
            if message is None:
                return
            try:
                await self.websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.info("realtime_send_failed", connection=self.id, error=str(e))
                return


class ConnectionManager:
    """Tracks connected observers and fans events out to them.

    ``broadcast`` and ``send`` only enqueue, so emitting never waits on a
    slow client. Each observer receives messages in emission order.
    """

    def __init__(self) -> None:
        self.connections: Set[RealtimeConnection] = set()

    async def connect(self, websocket: WebSocket) -> RealtimeConnection:
        await websocket.accept()
        connection = RealtimeConnection(websocket)
        connection.start()
        self.connections.add(connection)
        logger.info("client_connected", connection=connection.id, total=len(self.connections))
        return connection

    async def disconnect(self, connection: RealtimeConnection, reason: Any = None) -> None:
        if connection not in self.connections:
            return
        self.connections.discard(connection)
        await connection.close()
        logger.info(
            "client_disconnected",
            connection=connection.id,
            reason=reason,
            total=len(self.connections),
        )

    def broadcast(self, event: str, data: Any) -> None:
        """Send ``event`` to every connected observer."""
        message = frame(event, data)
        for connection in list(self.connections):
            connection.enqueue(message)
        logger.debug("broadcast", event_name=event, observers=len(self.connections))

    def send(self, connection: RealtimeConnection, event: str, data: Any) -> None:
        """Send ``event`` to a single observer."""
        connection.enqueue(frame(event, data))

    async def close_all(self) -> None:
        for connection in list(self.connections):
            await self.disconnect(connection, reason="server shutdown")
