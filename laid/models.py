import enum
import uuid

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey,
    Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from .utils import utcnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class SwipeDirection(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Credentials: password for email accounts, provider id for social ones
    password_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), unique=True, nullable=True)
    apple_id = Column(String(255), unique=True, nullable=True)
    facebook_id = Column(String(255), unique=True, nullable=True)
    instagram_id = Column(String(255), unique=True, nullable=True)

    # Verification & Trust
    email_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String(128), nullable=True, index=True)
    verification_token_expires = Column(DateTime, nullable=True)
    is_verified_user = Column(Boolean, nullable=False, default=False)  # Manual trust flag
    is_suspended = Column(Boolean, nullable=False, default=False)

    # Dating Profile
    profile_complete = Column(Boolean, nullable=False, default=False)
    display_name = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    interests = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    photos = relationship(
        "ProfilePhoto", back_populates="user", cascade="all, delete-orphan",
        order_by="ProfilePhoto.photo_order",
    )
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def primary_photo_url(self):
        return self.photos[0].photo_url if self.photos else None


class ProfilePhoto(Base):
    __tablename__ = 'profile_photos'
    __table_args__ = (UniqueConstraint('user_id', 'photo_order', name='uq_photo_order_per_user'),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    photo_url = Column(String(2048), nullable=False)
    photo_order = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="photos")


class Swipe(Base):
    __tablename__ = 'swipes'

    # Append-only history; the same pair may appear more than once
    id = Column(Integer, primary_key=True, autoincrement=True)
    swiper_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    swiped_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    direction = Column(Enum(SwipeDirection, values_callable=lambda e: [m.value for m in e]), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Match(Base):
    __tablename__ = 'matches'
    __table_args__ = (
        UniqueConstraint('user1_id', 'user2_id', name='uq_match_pair'),
        CheckConstraint('user1_id < user2_id', name='ck_match_canonical_order'),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user1_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    user2_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    messages = relationship("Message", back_populates="match", cascade="all, delete-orphan")

    def counterpart_of(self, user_id: str) -> str:
        return self.user2_id if user_id == self.user1_id else self.user1_id


class Message(Base):
    __tablename__ = 'messages'

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(36), ForeignKey('matches.id', ondelete='CASCADE'), nullable=False, index=True)
    sender_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    match = relationship("Match", back_populates="messages")
    sender = relationship("User")


class RefreshToken(Base):
    __tablename__ = 'refresh_tokens'

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    # SHA-256 of the actual token; the raw value is never stored
    token_hash = Column(String(64), unique=True, nullable=False)

    # Lifecycle
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, nullable=False, default=False)
    revoked_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="refresh_tokens")
