"""Router for meme-related endpoints.

These are the request/response counterparts of the realtime channel; a
client using them still triggers broadcasts to channel observers but only
learns the outcome from the response body.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from ...models.schemas.memes import (
    BidRecord,
    BidRequest,
    BidResponse,
    MemeCreateRequest,
    MemeRecord,
    VoteRequest,
    VoteResponse,
)
from ...services.meme_service import MemeService
from ..dependencies import get_meme_service

router = APIRouter()


@router.get("", response_model=List[MemeRecord])
async def list_memes(service: MemeService = Depends(get_meme_service)) -> List[MemeRecord]:
    """List all memes, newest first."""
    return await service.list_memes()


@router.post("", response_model=MemeRecord, status_code=status.HTTP_201_CREATED)
async def create_meme(
    request: MemeCreateRequest,
    service: MemeService = Depends(get_meme_service),
) -> MemeRecord:
    """
    Submit a new meme.

    A caption and vibe are generated (or taken from the cache) before the
    meme is stored, and the stored meme is broadcast as ``new_meme``.

    Args:
        request: Title, image URL and tags
        service: Meme service

    Returns:
        The stored meme
    """
    return await service.create_meme(request.title, request.image_url, request.tags)


@router.post("/{meme_id}/vote", response_model=VoteResponse)
async def vote(
    meme_id: str,
    request: VoteRequest,
    service: MemeService = Depends(get_meme_service),
) -> VoteResponse:
    """Up- or down-vote a meme. Unknown memes yield 404."""
    upvotes = await service.vote(meme_id, request.vote_type)
    return VoteResponse(upvotes=upvotes)


@router.post("/{meme_id}/bid", response_model=BidResponse)
async def place_bid(
    meme_id: str,
    request: BidRequest,
    service: MemeService = Depends(get_meme_service),
) -> BidResponse:
    """Bid credits on a meme. Bids that do not beat the highest bid yield 400."""
    meme = await service.place_bid(meme_id, request.user_id, request.credits)
    return BidResponse(meme=meme)


@router.get("/{meme_id}/bids", response_model=List[BidRecord])
async def list_bids(
    meme_id: str,
    service: MemeService = Depends(get_meme_service),
) -> List[BidRecord]:
    """Accepted bids on a meme, oldest first. Unknown memes yield 404."""
    return await service.list_bids(meme_id)


@router.post("/{meme_id}/caption", response_model=MemeRecord)
async def regenerate_caption(
    meme_id: str,
    service: MemeService = Depends(get_meme_service),
) -> MemeRecord:
    """Generate a fresh caption and vibe for an existing meme."""
    return await service.regenerate_content(meme_id)
