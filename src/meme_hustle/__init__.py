"""MemeHustle: realtime meme sharing, voting and bidding backend."""

__version__ = "0.1.0"
