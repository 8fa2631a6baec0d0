import itertools
import threading
import uuid
from typing import Dict, List, Optional, Tuple

from models import SwipeDirection, utcnow
from .base import (
    SwipeRepository,
    SwipeRecord,
    MatchRecord,
    ConflictError,
    require_ordered_pair,
)


class InMemorySwipeRepository(SwipeRepository):
    """
    Dict-backed repository for tests and local experiments.

    Rows are keyed by their unique key. Each table's lock makes the
    insert-if-absent atomic, standing in for a database unique index;
    reads take no lock.
    """

    def __init__(self):
        self._swipes: Dict[Tuple[str, str], SwipeRecord] = {}
        self._matches: Dict[Tuple[str, str], MatchRecord] = {}
        self._swipe_lock = threading.Lock()
        self._match_lock = threading.Lock()
        # tie-breaker for matches created within the same clock tick
        self._sequence = itertools.count()
        self._order: Dict[str, int] = {}

    def _newest_first(self, records):
        return sorted(
            records,
            key=lambda r: (r.created_at, self._order[r.id]),
            reverse=True,
        )

    def insert_swipe(self, swiper_id, swiped_id, direction):
        key = (swiper_id, swiped_id)
        with self._swipe_lock:
            if key in self._swipes:
                raise ConflictError('swipes', key)
            record = SwipeRecord(
                id=str(uuid.uuid4()),
                swiper_id=swiper_id,
                swiped_id=swiped_id,
                direction=SwipeDirection.parse(direction),
                created_at=utcnow(),
            )
            self._swipes[key] = record
        return record

    def find_swipe(self, swiper_id, swiped_id, direction=None):
        record = self._swipes.get((swiper_id, swiped_id))
        if record is None:
            return None
        if direction is not None and record.direction != SwipeDirection.parse(direction):
            return None
        return record

    def list_swipes(self, swiper_id, direction=None, before=None, limit=None) -> List[SwipeRecord]:
        wanted = SwipeDirection.parse(direction) if direction is not None else None
        records = [
            r for r in list(self._swipes.values())
            if r.swiper_id == swiper_id
            and (wanted is None or r.direction == wanted)
            and (before is None or before.precedes(r))
        ]
        records = sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)
        return records[:limit] if limit is not None else records

    def insert_match(self, user_id_1, user_id_2):
        require_ordered_pair(user_id_1, user_id_2)
        key = (user_id_1, user_id_2)
        with self._match_lock:
            if key in self._matches:
                raise ConflictError('matches', key)
            record = MatchRecord(
                id=str(uuid.uuid4()),
                user_id_1=user_id_1,
                user_id_2=user_id_2,
                active=True,
                created_at=utcnow(),
            )
            self._order[record.id] = next(self._sequence)
            self._matches[key] = record
        return record

    def find_match(self, user_id_1, user_id_2) -> Optional[MatchRecord]:
        return self._matches.get((user_id_1, user_id_2))

    def list_active_matches(self, user_id):
        records = [
            m for m in list(self._matches.values())
            if m.active and user_id in m.user_ids
        ]
        return self._newest_first(records)

    def count_swipes(self) -> int:
        return len(self._swipes)

    def count_matches(self) -> int:
        return len(self._matches)
