import uuid
from sqlalchemy import Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class Match(db.Model, SerializerMixin):
    __tablename__ = "matches"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id_1 = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id_2 = db.Column(db.String, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # user_id_1 sorts first by code point, checked by the repository before
    # insert; a SQL "<" would follow the database collation instead
    __table_args__ = (
        db.UniqueConstraint('user_id_1', 'user_id_2', name='uq_match_pair'),
    )

    def __repr__(self):
        return f'<Match {self.user_id_1} <-> {self.user_id_2}>'
