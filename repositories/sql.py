import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, Swipe, Match, SwipeDirection
from .base import (
    SwipeRepository,
    SwipeRecord,
    MatchRecord,
    StorageError,
    ConflictError,
    MissingReferenceError,
    SwipeCursor,
    require_ordered_pair,
)

logger = logging.getLogger(__name__)

# SQLSTATEs reported by PostgreSQL drivers
PG_UNIQUE_VIOLATION = '23505'
PG_FOREIGN_KEY_VIOLATION = '23503'


def _violation_matches(error: IntegrityError, sqlstate: str, sqlite_message: str) -> bool:
    orig = error.orig
    code = getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)
    if code:
        return code == sqlstate
    return sqlite_message in str(orig)


def _is_unique_violation(error: IntegrityError) -> bool:
    return _violation_matches(error, PG_UNIQUE_VIOLATION, 'UNIQUE constraint failed')


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    return _violation_matches(error, PG_FOREIGN_KEY_VIOLATION, 'FOREIGN KEY constraint failed')


def _after_cursor(cursor: SwipeCursor):
    if cursor.id is None:
        return Swipe.created_at < cursor.created_at
    return db.or_(
        Swipe.created_at < cursor.created_at,
        db.and_(
            Swipe.created_at == cursor.created_at,
            Swipe.id < uuid.UUID(cursor.id)
        )
    )


def _swipe_record(swipe: Swipe) -> SwipeRecord:
    return SwipeRecord(
        id=str(swipe.id),
        swiper_id=swipe.swiper_id,
        swiped_id=swipe.swiped_id,
        direction=SwipeDirection(swipe.direction),
        created_at=swipe.created_at,
    )


def _match_record(match: Match) -> MatchRecord:
    return MatchRecord(
        id=str(match.id),
        user_id_1=match.user_id_1,
        user_id_2=match.user_id_2,
        active=match.active,
        created_at=match.created_at,
    )


class SqlSwipeRepository(SwipeRepository):
    """Repository backed by the Flask-SQLAlchemy session.

    Each insert commits on its own so a later failure in the same request
    never rolls back a swipe that was already accepted.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _commit_insert(self, row, table: str, key: tuple):
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.debug(f"Integrity error on {table} {key}: {e.orig}")
            if _is_foreign_key_violation(e):
                raise MissingReferenceError(table, key) from e
            if _is_unique_violation(e):
                raise ConflictError(table, key) from e
            raise StorageError(f"Integrity error on {table} {key}: {e.orig}") from e
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def insert_swipe(self, swiper_id, swiped_id, direction):
        swipe = Swipe(
            swiper_id=swiper_id,
            swiped_id=swiped_id,
            direction=SwipeDirection.parse(direction).value,
        )
        self._commit_insert(swipe, Swipe.__tablename__, (swiper_id, swiped_id))
        return _swipe_record(swipe)

    def find_swipe(self, swiper_id, swiped_id, direction=None):
        query = self.session.query(Swipe).filter_by(swiper_id=swiper_id, swiped_id=swiped_id)
        if direction is not None:
            query = query.filter_by(direction=SwipeDirection.parse(direction).value)
        swipe = query.first()
        return _swipe_record(swipe) if swipe else None

    def list_swipes(self, swiper_id: str,
                    direction: Optional[SwipeDirection] = None,
                    before: Optional[SwipeCursor] = None,
                    limit: Optional[int] = None) -> List[SwipeRecord]:
        query = self.session.query(Swipe).filter(Swipe.swiper_id == swiper_id)
        if direction is not None:
            query = query.filter(Swipe.direction == SwipeDirection.parse(direction).value)
        if before is not None:
            query = query.filter(_after_cursor(before))
        query = query.order_by(Swipe.created_at.desc(), Swipe.id.desc())
        if limit is not None:
            query = query.limit(limit)
        return [_swipe_record(swipe) for swipe in query.all()]

    def insert_match(self, user_id_1, user_id_2):
        require_ordered_pair(user_id_1, user_id_2)
        match = Match(user_id_1=user_id_1, user_id_2=user_id_2, active=True)
        self._commit_insert(match, Match.__tablename__, (user_id_1, user_id_2))
        return _match_record(match)

    def find_match(self, user_id_1, user_id_2):
        match = self.session.query(Match).filter_by(user_id_1=user_id_1, user_id_2=user_id_2).first()
        return _match_record(match) if match else None

    def list_active_matches(self, user_id):
        matches = self.session.query(Match).filter(
            db.and_(
                db.or_(
                    Match.user_id_1 == user_id,
                    Match.user_id_2 == user_id
                ),
                Match.active.is_(True)
            )
        ).order_by(Match.created_at.desc()).all()
        return [_match_record(match) for match in matches]
