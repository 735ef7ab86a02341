"""Meme operations shared by the REST and realtime transports.

Every mutation goes through ``MemeService`` so validation, store writes and
broadcasts are implemented once. A broadcast is only emitted after the store
write it describes has committed.
"""

from typing import List, Sequence

from ..cache.base import GenerationCache, caption_key, vibe_key
from ..dspy_modules.caption_generator import CaptionGenerator
from ..exceptions.base import GeneratorError, InvalidBidError, MemeNotFoundError
from ..models.schemas.memes import BidRecord, MemeRecord, VoteType
from ..repositories.meme_repository import MemeRepository
from ..utils.logging import get_logger
from .broadcaster import ConnectionManager
from .leaderboard import LeaderboardProjection

logger = get_logger(__name__)

CAPTION_FALLBACK = "YOLO to the moon!"
VIBE_FALLBACK = "Neon Crypto Chaos"


class MemeService:
    """Service coordinating the store, generator, cache, leaderboard and broadcasts."""

    def __init__(
        self,
        repository: MemeRepository,
        generator: CaptionGenerator,
        cache: GenerationCache,
        leaderboard: LeaderboardProjection,
        broadcaster: ConnectionManager,
    ) -> None:
        self.repository = repository
        self.generator = generator
        self.cache = cache
        self.leaderboard = leaderboard
        self.broadcaster = broadcaster

    async def list_memes(self) -> List[MemeRecord]:
        return await self.repository.list_memes()

    def get_leaderboard(self) -> List[MemeRecord]:
        return self.leaderboard.get()

    async def list_bids(self, meme_id: str) -> List[BidRecord]:
        """
        Accepted bids on a meme, oldest first.

        Raises:
            MemeNotFoundError: If the meme does not exist
        """
        if await self.repository.get_meme(meme_id) is None:
            raise MemeNotFoundError(meme_id)
        return await self.repository.list_bids(meme_id)

    async def vote(self, meme_id: str, vote_type: VoteType) -> int:
        """
        Apply an up or down vote.

        Args:
            meme_id: ID of the meme
            vote_type: ``"up"`` or ``"down"``

        Returns:
            The new upvote count

        Raises:
            MemeNotFoundError: If the meme does not exist
            StoreError: If the store write fails
        """
        delta = 1 if vote_type == "up" else -1
        upvotes = await self.repository.apply_vote(meme_id, delta)
        logger.info("vote_applied", meme_id=meme_id, vote_type=vote_type, upvotes=upvotes)

        self.leaderboard.schedule_refresh()
        self.broadcaster.broadcast("vote_update", {"memeId": meme_id, "upvotes": upvotes})
        return upvotes

    async def place_bid(self, meme_id: str, user_id: str, credits: int) -> MemeRecord:
        """
        Place a bid that must beat the meme's current highest bid.

        Args:
            meme_id: ID of the meme
            user_id: Opaque bidder token
            credits: Bid amount

        Returns:
            The updated meme

        Raises:
            MemeNotFoundError: If the meme does not exist
            InvalidBidError: If the bid is not higher than the current highest
            StoreError: If the store write fails
        """
        try:
            meme = await self.repository.place_bid(meme_id, user_id, credits)
        except InvalidBidError as e:
            logger.info(
                "bid_rejected", meme_id=meme_id, credits=credits, highest_bid=e.highest_bid
            )
            raise

        logger.info("bid_accepted", meme_id=meme_id, user_id=user_id, credits=credits)
        self.broadcaster.broadcast(
            "new_bid", {"memeId": meme_id, "userId": user_id, "credits": credits}
        )
        return meme

    async def create_meme(self, title: str, image_url: str, tags: Sequence[str]) -> MemeRecord:
        """
        Caption, store and announce a new meme.

        Cached captions and vibes are reused; only missing pieces are generated.

        Returns:
            The stored meme
        """
        tags = list(tags)
        caption = await self.cache.get(caption_key(title, tags))
        vibe = await self.cache.get(vibe_key(tags))
        logger.info(
            "generation_cache_lookup",
            caption_hit=caption is not None,
            vibe_hit=vibe is not None,
        )

        if caption is None:
            caption = await self._fresh_caption(title, tags)
        if vibe is None:
            vibe = await self._fresh_vibe(tags)

        meme = await self.repository.create_meme(
            title=title, image_url=image_url, tags=tags, caption=caption, vibe=vibe
        )
        self.broadcaster.broadcast("new_meme", meme.model_dump(mode="json"))
        return meme

    async def regenerate_content(self, meme_id: str) -> MemeRecord:
        """
        Generate a new caption and vibe for an existing meme, skipping the cache lookup.

        Raises:
            MemeNotFoundError: If the meme does not exist
        """
        meme = await self.repository.get_meme(meme_id)
        if meme is None:
            raise MemeNotFoundError(meme_id)

        caption = await self._fresh_caption(meme.title, meme.tags)
        vibe = await self._fresh_vibe(meme.tags)
        updated = await self.repository.update_content(meme_id, caption, vibe)
        logger.info("content_regenerated", meme_id=meme_id)
        return updated

    async def _fresh_caption(self, title: str, tags: List[str]) -> str:
        try:
            caption = await self.generator.generate_caption(title, tags)
        except GeneratorError as e:
            logger.warning("caption_generation_failed", title=title, error=e.message)
            return CAPTION_FALLBACK
        await self.cache.set(caption_key(title, tags), caption)
        return caption

    async def _fresh_vibe(self, tags: List[str]) -> str:
        try:
            vibe = await self.generator.generate_vibe(tags)
        except GeneratorError as e:
            logger.warning("vibe_generation_failed", tags=tags, error=e.message)
            return VIBE_FALLBACK
        await self.cache.set(vibe_key(tags), vibe)
        return vibe
