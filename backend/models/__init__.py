"""Models package for Mediator backend"""

from .common import get_session, CamelModel
from .types import UtcAwareDateTime
from .auth import User
from .friendship import FriendRequest, Friendship, RequestStatus
from .catalog import MediaItem, MediaList, MediaType, Rating, WatchedWith
from .collaboration import Collaboration

__all__ = [
    "CamelModel",
    "Collaboration",
    "FriendRequest",
    "Friendship",
    "MediaItem",
    "MediaList",
    "MediaType",
    "Rating",
    "RequestStatus",
    "User",
    "UtcAwareDateTime",
    "WatchedWith",
    "get_session",
]
