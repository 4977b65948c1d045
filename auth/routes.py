"""
Account API routes — register, login, logout, current user.

Route prefix: /api/v1/users
"""

from __future__ import annotations

import logging
import pathlib
import shutil
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from auth.dependencies import get_current_user_claims, get_session_manager
from auth.session_manager import SessionManager
from config.settings import config
from media.base import MediaStorage
from utils.schemas import ApiResponse, LoginData, LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _envelope(status_code: int, data: Any, message: str) -> JSONResponse:
    body = ApiResponse.build(status_code, data, message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, mode="json"),
    )


def _cookie_options() -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": config.cookie_secure,
        "samesite": "strict",
    }


def _copy_to(upload: UploadFile, target: pathlib.Path) -> None:
    upload.file.seek(0)
    with target.open("wb") as fh:
        shutil.copyfileobj(upload.file, fh)


async def _stash_upload(upload: Optional[UploadFile], temp_files: List[str]) -> Optional[str]:
    """Write a multipart upload to the temp dir; ``None`` when nothing was sent."""
    if upload is None or not upload.filename:
        return None
    temp_dir = pathlib.Path(config.upload_temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    suffix = pathlib.Path(upload.filename).suffix.lower()
    target = temp_dir / f"{uuid.uuid4().hex}{suffix}"
    await run_in_threadpool(_copy_to, upload, target)
    temp_files.append(str(target))
    return str(target)


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    fullname: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Register a new user with an avatar and an optional cover image."""
    temp_files: List[str] = []
    try:
        avatar_path = await _stash_upload(avatar, temp_files)
        cover_path = await _stash_upload(cover_image, temp_files)
        account = await manager.register(
            fullname=fullname,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_path=cover_path,
        )
    finally:
        for path in temp_files:
            MediaStorage.discard(path)

    logger.info("Registered user %s (%s)", account.username, account.user_id)
    return _envelope(
        status.HTTP_201_CREATED,
        account.model_dump(by_alias=True, mode="json"),
        "User registered successfully",
    )


@router.post("/login")
async def login(
    req: LoginRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Login with email + password; the refresh token goes into a cookie."""
    result = await manager.login(req.email, req.password)

    data = LoginData(access_token=result.access_token).model_dump(by_alias=True)
    response = _envelope(status.HTTP_200_OK, data, "Login successful")
    response.set_cookie(
        config.refresh_cookie_name,
        result.refresh_token,
        max_age=config.refresh_token_expiry_seconds,
        **_cookie_options(),
    )
    return response


@router.post("/logout")
async def logout(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Clear the session bound to the refresh-token cookie, if any."""
    await manager.logout(request.cookies.get(config.refresh_cookie_name))

    response = _envelope(status.HTTP_200_OK, {}, "Logged out successfully")
    response.delete_cookie(config.refresh_cookie_name, **_cookie_options())
    return response


@router.get("/me")
async def current_user(
    claims: Dict[str, Any] = Depends(get_current_user_claims),
    manager: SessionManager = Depends(get_session_manager),
) -> JSONResponse:
    """Return the authenticated user's account."""
    account = await manager.get_account(claims.get("user_id", ""))
    return _envelope(
        status.HTTP_200_OK,
        account.model_dump(by_alias=True, mode="json"),
        "Current user fetched successfully",
    )
