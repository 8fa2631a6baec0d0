# models/users.py
from sqlalchemy import Column, String, DateTime, Index, func
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class User(db.Model, SerializerMixin):
    __tablename__ = "users"

    # Primary Key (subject claim issued by the identity provider)
    id = Column(String, primary_key=True)

    # Basic Info
    name = Column(String(150), nullable=False, index=True)
    email = Column(String(150), unique=True, nullable=False)
    avatar_url = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)

    profile = db.relationship("Profile", back_populates="user", uselist=False)

    __table_args__ = (
        Index("ix_users_email_lower", func.lower(email), unique=True),
    )

    serialize_only = ('id', 'name', 'avatar_url')

    def __repr__(self):
        return f'<User {self.id}>'
