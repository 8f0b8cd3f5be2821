"""Database models for the Posterhub backend."""
from app.models.user import User
from app.models.poster import Poster
from app.models.payout import Payout
from app.models.support_message import SupportMessage

__all__ = [
    "User",
    "Poster",
    "Payout",
    "SupportMessage",
]
