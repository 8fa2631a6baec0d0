import uuid
from sqlalchemy import Column, String, Integer, Text, Float, DateTime, Index, JSON, Uuid
from sqlalchemy_serializer import SerializerMixin
from .base import db, utcnow


class Profile(db.Model, SerializerMixin):
    __tablename__ = "profiles"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Foreign Key to User
    user_id = Column(String, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    # Profile Information
    age = Column(Integer, nullable=True)
    gender = Column(String(10), nullable=True)
    bio = Column(Text, nullable=True)
    interests = Column(JSON, nullable=True)  # Array of interest labels
    photos = Column(JSON, nullable=True)  # Array of photo URLs

    # Last known position, maintained by the discovery service
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="profile")

    __table_args__ = (
        Index("idx_profile_age_gender", "age", "gender"),
    )

    # Public fields embedded in swipe history and match listings
    serialize_only = ('age', 'gender', 'bio', 'interests', 'photos')

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self):
        return f'<Profile {self.user_id}>'
