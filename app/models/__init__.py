"""SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from app.models.user import User
from app.models.listing import Listing, FuelType, Transmission, MileageUnit, ListingStatus
from app.models.alert import Alert
from app.models.chat import ChatSession, ChatMessage, ChatSessionStatus, MessageRole

__all__ = [
    "User",
    "Listing",
    "FuelType",
    "Transmission",
    "MileageUnit",
    "ListingStatus",
    "Alert",
    "ChatSession",
    "ChatMessage",
    "ChatSessionStatus",
    "MessageRole",
]
