from .base import db, metadata, utcnow
from .users import User
from .profiles import Profile
from .swipes import Swipe, SwipeDirection
from .matches import Match

__all__ = [
    'db',
    'metadata',
    'utcnow',
    'User',
    'Profile',
    'Swipe',
    'SwipeDirection',
    'Match',
]
