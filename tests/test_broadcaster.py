"""Tests for the realtime connection manager."""

import asyncio
from typing import Any, List

import pytest
from starlette.websockets import WebSocketDisconnect

from meme_hustle.services.broadcaster import ConnectionManager, frame


class FakeWebSocket:
    """Collects sent frames; optionally slow or broken."""

    def __init__(self, delay: float = 0.0, broken: bool = False) -> None:
        self.delay = delay
        self.broken = broken
        self.accepted = False
        self.sent: List[Any] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: Any) -> None:
        if self.broken:
            raise WebSocketDisconnect(code=1006)
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append(data)


@pytest.mark.asyncio
async def test_broadcast_preserves_order_per_observer() -> None:
    manager = ConnectionManager()
    fast, slow = FakeWebSocket(), FakeWebSocket(delay=0.01)
    await manager.connect(fast)
    await manager.connect(slow)

    for index in range(5):
        manager.broadcast("vote_update", {"upvotes": index})
    await manager.close_all()

    expected = [frame("vote_update", {"upvotes": index}) for index in range(5)]
    assert fast.accepted and slow.accepted
    assert fast.sent == expected
    assert slow.sent == expected
    assert manager.connections == set()


@pytest.mark.asyncio
async def test_send_targets_one_connection() -> None:
    manager = ConnectionManager()
    first, second = FakeWebSocket(), FakeWebSocket()
    target = await manager.connect(first)
    await manager.connect(second)

    manager.send(target, "error", {"message": "Meme not found"})
    await manager.close_all()

    assert first.sent == [{"event": "error", "data": {"message": "Meme not found"}}]
    assert second.sent == []


@pytest.mark.asyncio
async def test_broken_observer_does_not_affect_others() -> None:
    manager = ConnectionManager()
    healthy, broken = FakeWebSocket(), FakeWebSocket(broken=True)
    await manager.connect(healthy)
    await manager.connect(broken)

    manager.broadcast("new_bid", {"credits": 10})
    manager.broadcast("new_bid", {"credits": 20})
    await manager.close_all()

    assert [message["data"]["credits"] for message in healthy.sent] == [10, 20]
    assert broken.sent == []


@pytest.mark.asyncio
async def test_disconnect_is_idempotent() -> None:
    manager = ConnectionManager()
    connection = await manager.connect(FakeWebSocket())

    await manager.disconnect(connection, reason=1000)
    await manager.disconnect(connection, reason=1000)

    assert manager.connections == set()


@pytest.mark.asyncio
async def test_broadcast_without_observers() -> None:
    ConnectionManager().broadcast("new_meme", {"id": "1"})
