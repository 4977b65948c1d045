"""
Session manager — register, login and logout.

Account state machine: ``Anonymous -> Authenticated -> Anonymous``.  The
only persisted session state is the single refresh token stored on the
account; login replaces it and logout clears it.

All failures are raised as ``ApiError`` subclasses so the transport can
translate them in one place.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from auth.password import PASSWORD_MAX_BYTES, verify_password
from auth.tokens import TokenIssuer
from database.accounts import CredentialStore
from database.models import EMAIL_MAX_LENGTH, FULLNAME_MAX_LENGTH, USERNAME_MAX_LENGTH
from media.base import MediaStorage
from utils.errors import (
    BadRequest,
    Conflict,
    DuplicateKeyError,
    InternalError,
    MediaUploadError,
    NotFound,
    TokenError,
    Unauthorized,
    UploadFailed,
)
from utils.schemas import AccountPublic, LoginResult
from utils.validators import any_blank, is_blank, too_long

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenIssuer,
        media: MediaStorage,
        password_verifier=verify_password,
    ):
        self._store = store
        self._tokens = tokens
        self._media = media
        self._verify_password = password_verifier

    # ── Register ─────────────────────────────────────────────────────────

    async def register(
        self,
        fullname: Optional[str],
        email: Optional[str],
        username: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str] = None,
        cover_path: Optional[str] = None,
    ) -> AccountPublic:
        if any_blank([fullname, email, username, password]):
            raise BadRequest("All fields are required")
        for name, value, limit in (
            ("username", username, USERNAME_MAX_LENGTH),
            ("email", email, EMAIL_MAX_LENGTH),
            ("fullname", fullname, FULLNAME_MAX_LENGTH),
        ):
            if too_long(value, limit):
                raise BadRequest(f"{name} must be at most {limit} characters")
        if len(password.encode()) > PASSWORD_MAX_BYTES:
            raise BadRequest(f"password must be at most {PASSWORD_MAX_BYTES} bytes")

        existing = await self._store.find_by_username_or_email(username, email)
        if existing is not None:
            raise Conflict("User with email or username already exists")

        if is_blank(avatar_path):
            raise BadRequest("Avatar file is required")

        try:
            avatar_url = await self._media.upload(avatar_path)
        except MediaUploadError as exc:
            logger.warning("Avatar upload failed for %s: %s", username, exc)
            raise UploadFailed("Avatar upload failed") from exc

        cover_url = ""
        if not is_blank(cover_path):
            try:
                cover_url = await self._media.upload(cover_path)
            except MediaUploadError as exc:
                logger.warning("Cover image upload failed for %s: %s", username, exc)

        try:
            user = await self._store.create(
                {
                    "fullname": fullname,
                    "email": email,
                    "username": username,
                    "password": password,
                    "avatar": avatar_url,
                    "cover_image": cover_url,
                }
            )
        except DuplicateKeyError as exc:
            self._log_orphaned_media(username, avatar_url, cover_url)
            raise Conflict("User with email or username already exists") from exc

        created = await self._store.get_public(user.user_id)
        if created is None:
            self._log_orphaned_media(username, avatar_url, cover_url)
            raise InternalError("User registration failed")
        return AccountPublic.model_validate(created)

    @staticmethod
    def _log_orphaned_media(username: str, *urls: str) -> None:
        orphaned = [url for url in urls if url]
        if orphaned:
            logger.warning(
                "Registration of %s failed after upload; orphaned media: %s",
                username,
                ", ".join(orphaned),
            )

    # ── Login ────────────────────────────────────────────────────────────

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        if is_blank(email) or not password:
            raise BadRequest("Email and password are required")

        user = await self._store.find_by_email(email)
        if user is None:
            raise NotFound("User not found")

        if not self._verify_password(password, user.password_hash):
            logger.info("Login rejected for %s: bad password", user.username)
            raise Unauthorized("Invalid credentials")

        claims = user.identity_claims()
        access_token = self._tokens.issue_access_token(claims)
        refresh_token = self._tokens.issue_refresh_token(claims)

        user.refresh_token = refresh_token
        await self._store.save(user, validate=False)
        logger.info("Login: %s (%s)", user.username, user.user_id)

        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            user_id=str(user.user_id),
        )

    # ── Logout ───────────────────────────────────────────────────────────

    async def logout(self, refresh_token: Optional[str]) -> bool:
        """
        Clear the stored refresh token that matches ``refresh_token``.

        Returns ``True`` when an account was found and signed out.  A
        missing cookie or unknown token is not an error.
        """
        if not refresh_token:
            return False

        user = await self._store.find_by_refresh_token(refresh_token)
        if user is None:
            return False

        user.refresh_token = None
        await self._store.save(user, validate=False)
        logger.info("Logout: %s (%s)", user.username, user.user_id)
        return True

    # ── Current account ──────────────────────────────────────────────────

    def verify_access_token(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise Unauthorized("Unauthorized request")
        try:
            return self._tokens.verify(token)
        except TokenError as exc:
            logger.debug("Access token rejected: %s", exc)
            raise Unauthorized("Invalid or expired access token") from exc

    async def get_account(self, user_id: str) -> AccountPublic:
        account = await self._store.get_public(user_id)
        if account is None:
            raise NotFound("User not found")
        return AccountPublic.model_validate(account)
