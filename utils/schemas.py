"""
Pydantic schemas for the account service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════════════════════════


class AccountPublic(_CamelModel):
    """Sanitized projection: never carries the password hash or refresh token."""

    user_id: str
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    # Optional so that missing fields become a 400 from the session manager
    # instead of a schema error.
    email: Optional[str] = None
    password: Optional[str] = None


class LoginData(_CamelModel):
    access_token: str


class LoginResult(BaseModel):
    access_token: str
    refresh_token: str
    user_id: str


# ═══════════════════════════════════════════════════════════════════════════════
# Response envelope
# ═══════════════════════════════════════════════════════════════════════════════


class ApiResponse(_CamelModel):
    status_code: int
    data: Any = None
    message: str = "Success"
    success: bool = True

    @classmethod
    def build(cls, status_code: int, data: Any = None, message: str = "Success") -> "ApiResponse":
        return cls(
            status_code=status_code,
            data=data,
            message=message,
            success=status_code < 400,
        )


class ApiErrorResponse(_CamelModel):
    status_code: int
    message: str
    success: bool = False
    errors: List[Any] = Field(default_factory=list)
