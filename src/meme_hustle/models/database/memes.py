"""Database models for memes and bids."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemeDB(Base):
    """
    Database model for memes.

    Attributes:
        id: Unique identifier for the meme
        title: Title given by the submitter
        image_url: URL of the meme image
        tags: Ordered list of short tags
        caption: Generated caption
        vibe: Generated vibe
        upvotes: Net vote count, may go negative
        uploaded_by: Submitter identifier
        highest_bid: Highest accepted bid in credits
        highest_bidder: Identifier of whoever placed the highest bid
        created_at: Timestamp when the meme was created
    """

    __tablename__ = "memes"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    caption = Column(Text, nullable=True)
    vibe = Column(Text, nullable=True)
    upvotes = Column(Integer, nullable=False, default=0, index=True)
    uploaded_by = Column(String, nullable=False, default="anonymous_user")
    highest_bid = Column(Integer, nullable=False, default=0)
    highest_bidder = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)


class BidDB(Base):
    """
    Database model for bids. Rows are append-only.

    Attributes:
        id: Unique identifier for the bid
        meme_id: The meme that was bid on
        user_id: Opaque bidder token
        credits: Bid amount
        created_at: Timestamp when the bid was accepted
    """

    __tablename__ = "bids"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    meme_id = Column(String, ForeignKey("memes.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    credits = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
