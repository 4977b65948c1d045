"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_session_manager`` and
``get_current_user_claims``, which the account routes are wired from.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.session_manager import SessionManager
from auth.tokens import TokenIssuer
from config.settings import config
from database.accounts import CredentialStore
from database.session import get_db_session
from media.base import MediaStorage
from media.registry import get_media_storage

_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built from the configured secrets."""
    return TokenIssuer.from_settings(config)


def get_session_manager(
    session: AsyncSession = Depends(db_session),
    tokens: TokenIssuer = Depends(get_token_issuer),
    media: MediaStorage = Depends(get_media_storage),
) -> SessionManager:
    return SessionManager(CredentialStore(session), tokens, media)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user_claims(
    token: Optional[str] = Depends(get_bearer_token),
    manager: SessionManager = Depends(get_session_manager),
) -> Dict[str, Any]:
    """
    Verify the Bearer access token and return its claims.

    Missing, tampered and expired tokens all end as ``Unauthorized``.
    """
    return manager.verify_access_token(token)
