"""Dependency injection for service singletons and the logged-in user."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from loguru import logger

from karaoke.backend import config
from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.services.music_generator import AIMusicGenerator, get_music_generator
from karaoke.backend.services.supabase_client import SupabaseClient, SupabaseError, get_supabase_client


def get_supabase() -> SupabaseClient:
    try:
        return get_supabase_client()
    except SupabaseError as e:
        logger.error(f"[auth] Supabase client unavailable: {e}")
        raise HTTPException(503, "Backend storage is not configured")


def get_generator() -> AIMusicGenerator:
    return get_music_generator()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    supabase: SupabaseClient = Depends(get_supabase),
) -> AuthUser:
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(401, "Silakan login terlebih dahulu!")
    try:
        data = supabase.get_user(token)
    except SupabaseError as e:
        if e.status_code in (401, 403):
            raise HTTPException(401, "Silakan login terlebih dahulu!")
        raise HTTPException(502, f"Auth check failed: {e.message}")
    return AuthUser.model_validate(data)


def is_admin(user: AuthUser) -> bool:
    if user.email and user.email.lower() in config.ADMIN_EMAILS:
        return True
    return user.app_metadata.get("role") == "admin"


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not is_admin(user):
        raise HTTPException(403, "Akses Ditolak: Anda tidak memiliki akses admin untuk halaman ini.")
    return user
