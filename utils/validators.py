"""
Input validators and identity normalisation shared by the session manager
and the credential store.
"""

from __future__ import annotations

from typing import Iterable, Optional


def is_blank(value: Optional[str]) -> bool:
    """``True`` for ``None``, empty and whitespace-only strings."""
    return value is None or not str(value).strip()


def any_blank(values: Iterable[Optional[str]]) -> bool:
    return any(is_blank(v) for v in values)


def normalize_identity(value: str) -> str:
    """Usernames and emails are stored trimmed and lowercase."""
    return value.strip().lower()


def too_long(value: Optional[str], limit: int) -> bool:
    """``True`` when the trimmed value has more than ``limit`` characters."""
    return value is not None and len(value.strip()) > limit
