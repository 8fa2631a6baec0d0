import enum
import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class SwipeDirection(str, enum.Enum):
    LIKE = "LIKE"
    PASS = "PASS"

    @classmethod
    def parse(cls, value):
        """Accept LIKE/PASS or the client's RIGHT/LEFT, in any case."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid swipe direction: {value!r}")
        try:
            return _DIRECTION_ALIASES[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Invalid swipe direction: {value!r}") from None


_DIRECTION_ALIASES = {
    "LIKE": SwipeDirection.LIKE,
    "RIGHT": SwipeDirection.LIKE,
    "PASS": SwipeDirection.PASS,
    "LEFT": SwipeDirection.PASS,
}


class Swipe(db.Model, SerializerMixin):
    __tablename__ = "swipes"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    swiper_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    swiped_id = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    direction = db.Column(db.Enum('LIKE', 'PASS', name='swipe_direction'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # One decision per ordered pair, never on yourself
    __table_args__ = (
        db.UniqueConstraint('swiper_id', 'swiped_id', name='uq_swipe_pair'),
        db.CheckConstraint('swiper_id != swiped_id', name='check_no_self_swipe'),
        db.Index('idx_swipe_reciprocal', 'swiped_id', 'swiper_id', 'direction'),
        db.Index('idx_swiper_created', 'swiper_id', 'created_at'),
    )

    def __repr__(self):
        return f'<Swipe {self.swiper_id} -> {self.swiped_id} {self.direction}>'
