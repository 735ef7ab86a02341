"""Pydantic schemas for memes, bids and realtime channel payloads."""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VoteType = Literal["up", "down"]


def assume_utc(value: datetime) -> datetime:
    """Stores without timezone support hand back naive UTC timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MemeRecord(BaseModel):
    """
    Wire and service representation of a stored meme.

    Attributes:
        id: Unique identifier for the meme
        title: Title given by the submitter
        image_url: URL of the meme image
        tags: Ordered list of tags
        caption: Generated caption
        vibe: Generated vibe
        upvotes: Net vote count
        uploaded_by: Submitter identifier
        highest_bid: Highest accepted bid
        highest_bidder: Identifier of the highest bidder
        created_at: Creation timestamp
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier for the meme")
    title: str = Field(..., description="Meme title")
    image_url: str = Field(..., description="URL of the meme image")
    tags: List[str] = Field(default_factory=list, description="Meme tags")
    caption: Optional[str] = Field(None, description="Generated caption")
    vibe: Optional[str] = Field(None, description="Generated vibe")
    upvotes: int = Field(0, description="Net vote count")
    uploaded_by: str = Field("anonymous_user", description="Submitter identifier")
    highest_bid: int = Field(0, description="Highest accepted bid in credits")
    highest_bidder: Optional[str] = Field(None, description="Highest bidder identifier")
    created_at: datetime = Field(..., description="Creation timestamp")

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class BidRecord(BaseModel):
    """An accepted bid."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    meme_id: str
    user_id: str
    credits: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class MemeCreateRequest(BaseModel):
    """
    Schema for meme submission.

    Attributes:
        title: The meme title
        image_url: URL of the meme image (``imageUrl`` on the wire)
        tags: Tags describing the meme
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="The meme title", min_length=1, max_length=200)
    image_url: str = Field(..., alias="imageUrl", description="URL of the meme image", min_length=1)
    tags: List[str] = Field(default_factory=list, description="Tags describing the meme")

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: List[str]) -> List[str]:
        """Drop surrounding whitespace and empty tags, keeping order."""
        return [tag.strip() for tag in value if tag and tag.strip()]


class VoteRequest(BaseModel):
    """REST vote body."""

    vote_type: VoteType = Field(..., alias="voteType")


class BidRequest(BaseModel):
    """REST bid body."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    credits: int = Field(..., description="Credits offered")


class VoteResponse(BaseModel):
    """Result of a REST vote."""

    success: bool = True
    upvotes: int


class BidResponse(BaseModel):
    """Result of a REST bid."""

    success: bool = True
    meme: MemeRecord


class PlaceBidMessage(BaseModel):
    """Payload of the ``place_bid`` channel event."""

    model_config = ConfigDict(populate_by_name=True)

    meme_id: str = Field(..., alias="memeId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
    credits: int


class VoteMessage(BaseModel):
    """Payload of the ``vote`` channel event."""

    model_config = ConfigDict(populate_by_name=True)

    meme_id: str = Field(..., alias="memeId", min_length=1)
    vote_type: VoteType = Field(..., alias="voteType")
