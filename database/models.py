"""
SQLAlchemy ORM models.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Column widths; the session manager rejects longer input up front.
USERNAME_MAX_LENGTH = 64
EMAIL_MAX_LENGTH = 255
FULLNAME_MAX_LENGTH = 128


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(USERNAME_MAX_LENGTH), unique=True, nullable=False, index=True)
    email = Column(String(EMAIL_MAX_LENGTH), unique=True, nullable=False, index=True)
    fullname = Column(String(FULLNAME_MAX_LENGTH), nullable=False)
    avatar = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Plaintext staged by ``set_password``; hashed and cleared on a validated save.
    _pending_password = None

    def set_password(self, plaintext: str) -> None:
        self._pending_password = plaintext

    def identity_claims(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "email": self.email,
            "username": self.username,
            "fullname": self.fullname,
        }


# Columns exposed by the sanitized projection.
PUBLIC_COLUMNS = (
    User.user_id,
    User.username,
    User.email,
    User.fullname,
    User.avatar,
    User.cover_image,
    User.created_at,
    User.updated_at,
)
