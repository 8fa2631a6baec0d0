import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from models import SwipeDirection


class StorageError(Exception):
    """Base class for errors raised by a repository"""


class ConflictError(StorageError):
    """A write violated a uniqueness constraint"""

    def __init__(self, table: str, key: tuple):
        super().__init__(f"Duplicate key {key} in {table}")
        self.table = table
        self.key = key


class MissingReferenceError(StorageError):
    """A write referenced a row that does not exist"""

    def __init__(self, table: str, key: tuple):
        super().__init__(f"Unresolved reference {key} in {table}")
        self.table = table
        self.key = key


def require_ordered_pair(user_id_1: str, user_id_2: str):
    """Match rows store the pair in Python string order, smaller id first"""
    if not user_id_1 < user_id_2:
        raise ValueError(f"Match pair ({user_id_1}, {user_id_2}) is not in canonical order")


@dataclass(frozen=True)
class SwipeCursor:
    """
    Position in a newest-first swipe listing.

    Rows sort by (created_at, id) descending, so the id breaks ties between
    swipes stamped with the same time. Encoded as "<ISO timestamp>_<id>";
    a bare timestamp is accepted and skips every row at that instant.
    """
    created_at: datetime
    id: Optional[str] = None

    SEPARATOR = '_'

    @classmethod
    def from_dict(cls, swipe: dict) -> 'SwipeCursor':
        """Cursor positioned at a serialized swipe (SwipeRecord.to_dict())"""
        return cls(created_at=datetime.fromisoformat(swipe['created_at']), id=swipe['id'])

    @classmethod
    def decode(cls, raw: str) -> 'SwipeCursor':
        """Parse a cursor string. Raises ValueError when malformed."""
        timestamp, _, raw_id = raw.partition(cls.SEPARATOR)
        created_at = datetime.fromisoformat(timestamp)
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
        return cls(created_at=created_at, id=str(uuid.UUID(raw_id)) if raw_id else None)

    def encode(self) -> str:
        if self.id is None:
            return self.created_at.isoformat()
        return f"{self.created_at.isoformat()}{self.SEPARATOR}{self.id}"

    def precedes(self, record: 'SwipeRecord') -> bool:
        """True when record comes after this position in the listing"""
        if record.created_at != self.created_at or self.id is None:
            return record.created_at < self.created_at
        return record.id < self.id


@dataclass(frozen=True)
class SwipeRecord:
    id: str
    swiper_id: str
    swiped_id: str
    direction: SwipeDirection
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'swiper_id': self.swiper_id,
            'swiped_id': self.swiped_id,
            'direction': self.direction.value,
            'created_at': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class MatchRecord:
    id: str
    user_id_1: str
    user_id_2: str
    active: bool
    created_at: datetime

    @property
    def user_ids(self) -> tuple:
        return (self.user_id_1, self.user_id_2)

    def other_party(self, user_id: str) -> str:
        return self.user_id_2 if self.user_id_1 == user_id else self.user_id_1

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_ids': list(self.user_ids),
            'active': self.active,
            'created_at': self.created_at.isoformat(),
        }


class SwipeRepository(ABC):
    """
    Every read and write of swipes and matches goes through here.

    Implementations must enforce the two uniqueness rules themselves
    (one swipe per ordered pair, one match per canonical pair) and report
    violations as ConflictError. Callers never check before inserting.
    """

    @abstractmethod
    def insert_swipe(self, swiper_id: str, swiped_id: str,
                     direction: SwipeDirection) -> SwipeRecord:
        """Persist a swipe. Raises ConflictError or MissingReferenceError."""

    @abstractmethod
    def find_swipe(self, swiper_id: str, swiped_id: str,
                   direction: Optional[SwipeDirection] = None) -> Optional[SwipeRecord]:
        ...

    @abstractmethod
    def list_swipes(self, swiper_id: str,
                    direction: Optional[SwipeDirection] = None,
                    before: Optional[SwipeCursor] = None,
                    limit: Optional[int] = None) -> List[SwipeRecord]:
        """Swipes made by swiper_id, newest first by (created_at, id), after `before`."""

    @abstractmethod
    def insert_match(self, user_id_1: str, user_id_2: str) -> MatchRecord:
        """
        Persist an active match for a pair in canonical order.
        Raises ValueError for an unordered pair and ConflictError for an existing one.
        """

    @abstractmethod
    def find_match(self, user_id_1: str, user_id_2: str) -> Optional[MatchRecord]:
        ...

    @abstractmethod
    def list_active_matches(self, user_id: str) -> List[MatchRecord]:
        """Active matches involving user_id on either side, newest first."""
