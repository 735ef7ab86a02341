"""API dependencies."""

from fastapi import Request

from ..config.config import Settings
from ..database.connection import DatabaseConnectionManager
from ..services.meme_service import MemeService


def get_meme_service(request: Request) -> MemeService:
    """Service built for this application instance at startup."""
    return request.app.state.meme_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> DatabaseConnectionManager:
    return request.app.state.db
