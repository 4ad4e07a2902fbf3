"""
Core dependencies for session resolution and route protection
"""

import hmac
import logging
from fastapi import Depends, Header, HTTPException, Request, status
from supabase import Client
from typing import Optional
from app.config.settings import settings
from app.database.supabase_client import SupabaseClient, get_supabase
from app.modules.auth.schemas import AuthUser
from app.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

INTERNAL_EMAIL_HEADER = "x-totl-internal-email-key"


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def extract_access_token(request: Request) -> Optional[str]:
    """Bearer header first (API clients), then the session cookie (browser)."""
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return request.cookies.get(settings.session_cookie_name) or None


def get_access_token(request: Request) -> Optional[str]:
    return extract_access_token(request)


def get_optional_user(
    token: Optional[str] = Depends(get_access_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[AuthUser]:
    return auth_service.resolve_user(token)


def get_current_user(user: Optional[AuthUser] = Depends(get_optional_user)) -> AuthUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user


def get_user_supabase(token: Optional[str] = Depends(get_access_token)) -> Client:
    """Per-request client scoped to the caller's session so row-level security applies."""
    if not token:
        return SupabaseClient.get_client()
    return SupabaseClient.get_user_client(token)


def require_internal_email_key(
    provided: Optional[str] = Header(default=None, alias=INTERNAL_EMAIL_HEADER),
) -> None:
    """Internal email senders are only callable by our own server code."""
    expected = settings.get_internal_email_key()
    if not expected or not provided or not hmac.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
