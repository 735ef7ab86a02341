"""Leaderboard router."""

from typing import List

from fastapi import APIRouter, Depends

from ...models.schemas.memes import MemeRecord
from ...services.meme_service import MemeService
from ..dependencies import get_meme_service

router = APIRouter()


@router.get("/leaderboard", response_model=List[MemeRecord])
async def get_leaderboard(service: MemeService = Depends(get_meme_service)) -> List[MemeRecord]:
    """Most upvoted memes as of the last leaderboard refresh."""
    return service.get_leaderboard()
