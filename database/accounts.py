"""
Credential store — persistence for account records.

Every write is committed straight away.  The unique indexes on
``users.username`` / ``users.email`` are the source of truth for
uniqueness: an ``IntegrityError`` on insert is surfaced as
``DuplicateKeyError`` regardless of what any earlier pre-check said.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.password import hash_password
from database.models import PUBLIC_COLUMNS, User
from utils.errors import AccountValidationError, DuplicateKeyError
from utils.validators import is_blank, normalize_identity

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


class CredentialStore:
    def __init__(
        self,
        session: AsyncSession,
        hasher: Callable[[str], str] = hash_password,
    ):
        self._session = session
        self._hash = hasher

    # ── Lookups ──────────────────────────────────────────────────────────

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User)
            .where(
                or_(
                    User.username == normalize_identity(username),
                    User.email == normalize_identity(email),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(User.email == normalize_identity(email))
        )
        return result.scalar_one_or_none()

    async def find_by_refresh_token(self, token: str) -> Optional[User]:
        if not token:
            return None
        result = await self._session.execute(
            select(User).where(User.refresh_token == token).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_public(self, user_id: str | uuid.UUID) -> Optional[Dict[str, Any]]:
        """Read the sanitized projection (no password hash, no refresh token)."""
        try:
            uid = _to_uuid(user_id)
        except ValueError:
            return None
        result = await self._session.execute(
            select(*PUBLIC_COLUMNS).where(User.user_id == uid)
        )
        row = result.mappings().one_or_none()
        if row is None:
            return None
        data = dict(row)
        data["user_id"] = str(data["user_id"])
        return data

    # ── Writes ───────────────────────────────────────────────────────────

    async def create(self, fields: Dict[str, Any]) -> User:
        """
        Insert a new account.

        ``fields`` carries the plaintext ``password``; it is hashed here and
        never stored.  Raises ``DuplicateKeyError`` when the username or
        email is already taken.
        """
        user = User(
            username=normalize_identity(fields["username"]),
            email=normalize_identity(fields["email"]),
            fullname=fields["fullname"].strip(),
            avatar=fields["avatar"],
            cover_image=fields.get("cover_image") or "",
        )
        user.set_password(fields["password"])
        self._apply(user, validate=True)
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.info("Duplicate account rejected by storage: %s", user.username)
            raise DuplicateKeyError("username or email already exists") from exc
        logger.info("Created account %s (%s)", user.username, user.user_id)
        return user

    async def save(self, user: User, *, validate: bool = True) -> User:
        """
        Persist mutations on ``user``.

        ``validate=False`` skips the record checks; it is what token updates
        use.  A password staged with ``User.set_password`` is hashed only on
        a validated save.
        """
        self._apply(user, validate=validate)
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateKeyError("username or email already exists") from exc
        return user

    def _apply(self, user: User, *, validate: bool) -> None:
        if not validate:
            return
        for name in ("username", "email", "fullname", "avatar"):
            if is_blank(getattr(user, name)):
                raise AccountValidationError(f"{name} is required")
        user.username = normalize_identity(user.username)
        user.email = normalize_identity(user.email)
        if user._pending_password is not None:
            user.password_hash = self._hash(user._pending_password)
            user._pending_password = None
        if is_blank(user.password_hash):
            raise AccountValidationError("password is required")
