"""Store adapter for memes and bids."""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from ..database.connection import DatabaseConnectionManager
from ..exceptions.base import ErrorCode, InvalidBidError, MemeNotFoundError, StoreError
from ..models.database.memes import BidDB, MemeDB
from ..models.schemas.memes import BidRecord, MemeRecord
from ..utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def _store_errors(operation: str, code: ErrorCode = ErrorCode.STORE_QUERY_ERROR) -> Iterator[None]:
    """Translate SQLAlchemy failures into StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("store_operation_failed", operation=operation, error=str(e))
        raise StoreError(f"Failed to {operation}: {e}", code, original_error=e)


class MemeRepository:
    """Repository for meme and bid data.

    Every method runs in its own session and transaction. Results are returned
    as detached ``MemeRecord``/``BidRecord`` snapshots.
    """

    def __init__(self, db: DatabaseConnectionManager) -> None:
        self.db = db

    async def list_memes(self) -> List[MemeRecord]:
        """
        Get all memes, newest first.

        Returns:
            List of memes
        """
        with _store_errors("fetch memes"):
            async with self.db.get_session() as session:
                result = await session.execute(select(MemeDB).order_by(MemeDB.created_at.desc()))
                return [MemeRecord.model_validate(meme) for meme in result.scalars().all()]

    async def top_memes(self, limit: int) -> List[MemeRecord]:
        """
        Get the memes with the most upvotes.

        Args:
            limit: Maximum number of memes to return

        Returns:
            Memes ordered by upvotes, descending
        """
        with _store_errors("fetch leaderboard"):
            async with self.db.get_session() as session:
                result = await session.execute(
                    select(MemeDB).order_by(MemeDB.upvotes.desc()).limit(limit)
                )
                return [MemeRecord.model_validate(meme) for meme in result.scalars().all()]

    async def get_meme(self, meme_id: str) -> Optional[MemeRecord]:
        """
        Get a meme by ID.

        Args:
            meme_id: ID of the meme

        Returns:
            Meme data if found, None otherwise
        """
        with _store_errors("fetch meme"):
            async with self.db.get_session() as session:
                meme = await session.get(MemeDB, meme_id)
                return MemeRecord.model_validate(meme) if meme else None

    async def create_meme(
        self,
        *,
        title: str,
        image_url: str,
        tags: List[str],
        caption: Optional[str],
        vibe: Optional[str],
    ) -> MemeRecord:
        """
        Insert a new meme with zero votes and no bids.

        Returns:
            The stored meme
        """
        with _store_errors("store meme", ErrorCode.STORE_WRITE_ERROR):
            async with self.db.get_session() as session:
                async with session.begin():
                    meme = MemeDB(
                        title=title,
                        image_url=image_url,
                        tags=list(tags),
                        caption=caption,
                        vibe=vibe,
                        upvotes=0,
                        uploaded_by="anonymous_user",
                        highest_bid=0,
                        highest_bidder=None,
                    )
                    session.add(meme)
                    await session.flush()
                    record = MemeRecord.model_validate(meme)
        logger.info("meme_stored", meme_id=record.id)
        return record

    async def apply_vote(self, meme_id: str, delta: int) -> int:
        """
        Add ``delta`` to a meme's upvote count.

        Args:
            meme_id: ID of the meme
            delta: +1 for an upvote, -1 for a downvote

        Returns:
            The new upvote count

        Raises:
            MemeNotFoundError: If the meme does not exist
        """
        stmt = (
            update(MemeDB)
            .where(MemeDB.id == meme_id)
            .values(upvotes=MemeDB.upvotes + delta)
            .returning(MemeDB.upvotes)
            .execution_options(synchronize_session=False)
        )
        with _store_errors("update votes", ErrorCode.STORE_WRITE_ERROR):
            async with self.db.get_session() as session:
                async with session.begin():
                    upvotes = (await session.execute(stmt)).scalar_one_or_none()
        if upvotes is None:
            raise MemeNotFoundError(meme_id)
        return upvotes

    async def place_bid(self, meme_id: str, user_id: str, credits: int) -> MemeRecord:
        """
        Record a bid if it beats the current highest bid.

        The comparison and the update are a single conditional UPDATE, so two
        concurrent bids cannot both win against the same stale highest bid.
        The bid row is appended in the same transaction.

        Args:
            meme_id: ID of the meme
            user_id: Opaque bidder token
            credits: Bid amount

        Returns:
            The updated meme

        Raises:
            MemeNotFoundError: If the meme does not exist
            InvalidBidError: If ``credits`` does not exceed the highest bid
        """
        stmt = (
            update(MemeDB)
            .where(MemeDB.id == meme_id, MemeDB.highest_bid < credits)
            .values(highest_bid=credits, highest_bidder=user_id)
            .returning(MemeDB.id)
            .execution_options(synchronize_session=False)
        )
        with _store_errors("place bid", ErrorCode.STORE_WRITE_ERROR):
            async with self.db.get_session() as session:
                async with session.begin():
                    updated = (await session.execute(stmt)).scalar_one_or_none()
                    if updated is None:
                        highest_bid = await session.scalar(
                            select(MemeDB.highest_bid).where(MemeDB.id == meme_id)
                        )
                        if highest_bid is None:
                            raise MemeNotFoundError(meme_id)
                        raise InvalidBidError(meme_id, credits, highest_bid)

                    session.add(BidDB(meme_id=meme_id, user_id=user_id, credits=credits))
                    meme = await session.get(MemeDB, meme_id, populate_existing=True)
                    record = MemeRecord.model_validate(meme)
        return record

    async def update_content(self, meme_id: str, caption: str, vibe: str) -> MemeRecord:
        """
        Replace a meme's generated caption and vibe.

        Raises:
            MemeNotFoundError: If the meme does not exist
        """
        stmt = (
            update(MemeDB)
            .where(MemeDB.id == meme_id)
            .values(caption=caption, vibe=vibe)
            .returning(MemeDB.id)
            .execution_options(synchronize_session=False)
        )
        with _store_errors("update caption", ErrorCode.STORE_WRITE_ERROR):
            async with self.db.get_session() as session:
                async with session.begin():
                    if (await session.execute(stmt)).scalar_one_or_none() is None:
                        raise MemeNotFoundError(meme_id)
                    meme = await session.get(MemeDB, meme_id, populate_existing=True)
                    record = MemeRecord.model_validate(meme)
        return record

    async def list_bids(self, meme_id: str) -> List[BidRecord]:
        """
        Get the bids placed on a meme, oldest first.

        Args:
            meme_id: ID of the meme

        Returns:
            List of bids
        """
        with _store_errors("fetch bids"):
            async with self.db.get_session() as session:
                result = await session.execute(
                    select(BidDB).where(BidDB.meme_id == meme_id).order_by(BidDB.created_at)
                )
                return [BidRecord.model_validate(bid) for bid in result.scalars().all()]
