"""Top-N leaderboard read cache."""

import asyncio
from typing import List, Set, Tuple

from ..exceptions.base import StoreError
from ..models.schemas.memes import MemeRecord
from ..repositories.meme_repository import MemeRepository
from ..utils.logging import get_logger

logger = get_logger(__name__)


class LeaderboardProjection:
    """Snapshot of the most upvoted memes.

    ``get`` never reads the store; it returns whatever the last successful
    ``refresh`` produced. A refresh builds the new snapshot aside and swaps
    it in whole, so readers never see a half-built list.
    """

    def __init__(self, repository: MemeRepository, size: int = 10) -> None:
        self.repository = repository
        self.size = size
        self._entries: Tuple[MemeRecord, ...] = ()
        self._started = 0
        self._applied = 0
        self._pending: Set[asyncio.Task] = set()

    def get(self) -> List[MemeRecord]:
        return list(self._entries)

    async def refresh(self) -> bool:
        """
        Rebuild the snapshot from the store.

        Returns:
            True if the snapshot was replaced, False if the previous snapshot
            was kept (store failure, or a newer refresh already landed)
        """
        self._started += 1
        generation = self._started
        try:
            memes = await self.repository.top_memes(self.size)
        except StoreError as e:
            logger.error("leaderboard_refresh_failed", error=e.message, kept=len(self._entries))
            return False

        if generation < self._applied:
            # A refresh that started later already swapped in a newer snapshot
            return False
        self._entries = tuple(memes)
        self._applied = generation
        logger.info("leaderboard_refreshed", meme_count=len(memes))
        return True

    def schedule_refresh(self) -> asyncio.Task:
        """Run ``refresh`` in the background without waiting for it."""
        task = asyncio.create_task(self.refresh(), name="leaderboard-refresh")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_for_pending(self) -> None:
        """Wait for every scheduled refresh to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
