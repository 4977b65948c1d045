"""
Signed token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256:
``<payload>.<hex signature>``.  Access and refresh tokens use separate
secrets, injected at construction; ``TokenIssuer.from_settings`` reads
them from ``config`` (env vars: ``ACCESS_TOKEN_SECRET``,
``REFRESH_TOKEN_SECRET``).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Dict

from utils.errors import ExpiredTokenError, InvalidTokenError

ACCESS = "access"
REFRESH = "refresh"

# Claims carried by each token kind.
_REFRESH_CLAIMS = ("user_id",)


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(data: str) -> bytes:
    return urlsafe_b64decode(data + "=" * (-len(data) % 4))


class TokenIssuer:
    """Mints and verifies access / refresh tokens."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: int = 86400,
        refresh_ttl: int = 604800,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Token secrets must be non-empty")
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}

    @classmethod
    def from_settings(cls, settings) -> "TokenIssuer":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            access_ttl=settings.access_token_expiry_seconds,
            refresh_ttl=settings.refresh_token_expiry_seconds,
        )

    @property
    def refresh_ttl(self) -> int:
        return self._ttls[REFRESH]

    def issue_access_token(self, claims: Dict[str, Any]) -> str:
        return self._sign(ACCESS, dict(claims))

    def issue_refresh_token(self, claims: Dict[str, Any]) -> str:
        return self._sign(REFRESH, {k: claims[k] for k in _REFRESH_CLAIMS})

    def verify(self, token: str, kind: str = ACCESS) -> Dict[str, Any]:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidTokenError`` for malformed tokens, bad signatures
        and tokens of the wrong kind; ``ExpiredTokenError`` once ``exp``
        has passed.
        """
        if kind not in self._secrets:
            raise ValueError(f"Unknown token kind: {kind}")
        if not token or not isinstance(token, str):
            raise InvalidTokenError("missing token")

        parts = token.split(".")
        if len(parts) != 2:
            raise InvalidTokenError("bad format")
        encoded, sig = parts
        try:
            raw, sig_bytes = encoded.encode("ascii"), sig.encode("ascii")
        except UnicodeError as exc:
            raise InvalidTokenError("bad signature") from exc
        expected_sig = self._signature(kind, raw)
        if not hmac.compare_digest(sig_bytes, expected_sig.encode()):
            raise InvalidTokenError("bad signature")

        try:
            payload = json.loads(_b64decode(encoded))
        except ValueError as exc:
            raise InvalidTokenError("bad payload") from exc
        if not isinstance(payload, dict) or payload.get("typ") != kind:
            raise InvalidTokenError("wrong token type")
        if payload.get("exp", 0) < time.time():
            raise ExpiredTokenError("token expired")
        return payload

    # ── internals ────────────────────────────────────────────────────────

    def _sign(self, kind: str, claims: Dict[str, Any]) -> str:
        now = int(time.time())
        payload = {
            **claims,
            "typ": kind,
            "iat": now,
            "exp": now + self._ttls[kind],
            "jti": uuid.uuid4().hex,
        }
        encoded = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return encoded + "." + self._signature(kind, encoded.encode())

    def _signature(self, kind: str, raw: bytes) -> str:
        return hmac.new(self._secrets[kind].encode(), raw, hashlib.sha256).hexdigest()
