from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import RedirectResponse
from supabase import Client
from typing import Optional
from app.config.settings import settings
from app.core.dependencies import get_access_token, get_auth_service, get_optional_user, get_user_supabase
from app.database.supabase_client import SupabaseClient
from app.modules.auth.schemas import (
    AuthUser, LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
)
from app.modules.auth.service import AuthService
from app.modules.boot.service import BootService
from app.modules.routing.decide import safe_return_url
from app.modules.routing.paths import PATHS

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service)
):
    """Login, set the session cookie and report where the user should land"""
    token, user = service.login(login_data)
    user_client: Client = SupabaseClient.get_user_client(token)
    boot = BootService(user_client, user).get_boot_state(post_auth=True, return_url_raw=login_data.return_url)
    _set_session_cookie(response, token)
    return LoginResponse(
        access_token=token,
        user_id=user.id,
        email=user.email or login_data.email,
        next_path=boot.next_path if boot else PATHS.TALENT_DASHBOARD,
    )


@router.get("/callback")
async def auth_callback(
    code: Optional[str] = None,
    link_type: Optional[str] = Query(default=None, alias="type"),
    next_url: Optional[str] = Query(default=None, alias="next"),
    returnUrl: Optional[str] = None,
    user: Optional[AuthUser] = Depends(get_optional_user),
    supabase: Client = Depends(get_user_supabase),
    service: AuthService = Depends(get_auth_service),
):
    """
    Landing for Supabase email links and post-auth redirects.

    ?type=recovery forwards to a safe `next` (the password reset page).
    ?code= is an email verification: the code is exchanged for a session, the
    profile's email_verified flag is synced and the user lands on /login?verified=true.
    Anything else repairs the profile and redirects to the boot state's next path.
    """
    if link_type == "recovery":
        return RedirectResponse(safe_return_url(next_url) or PATHS.HOME, status_code=303)

    if code:
        try:
            token, verified_user = service.exchange_code(code)
        except HTTPException:
            return RedirectResponse(f"{PATHS.LOGIN}?verified=false", status_code=303)
        BootService(SupabaseClient.get_user_client(token), verified_user).get_boot_state()
        response = RedirectResponse(f"{PATHS.LOGIN}?verified=true", status_code=303)
        _set_session_cookie(response, token)
        return response

    if user is None:
        return RedirectResponse(PATHS.LOGIN, status_code=303)
    boot = BootService(supabase, user).get_boot_state(
        post_auth=True, return_url_raw=returnUrl
    )
    return RedirectResponse(boot.next_path, status_code=303)


@router.post("/signout")
async def signout(
    token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout, clear the session cookie and land on the signed-out login page"""
    if token:
        service.logout(token)
    response = RedirectResponse(f"{PATHS.LOGIN}?signedOut=true", status_code=303)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response
