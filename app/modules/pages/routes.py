"""
Page payload endpoints.

Each page path the request gate protects has a JSON counterpart here, so the
gate's redirects can be exercised end to end. Payloads are per-user and never
cached.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import Optional
from app.database.supabase_client import maybe_row
from app.modules.boot.routes import get_boot_service
from app.modules.boot.service import BootService
from app.modules.pages.schemas import PagePayload
from app.modules.routing.paths import PATHS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def _page(response: Response, page: str, service: BootService, **extra) -> PagePayload:
    response.headers["Cache-Control"] = "no-store"
    return PagePayload(page=page, boot=service.get_boot_state(), **extra)


@router.get(PATHS.HOME, response_model=PagePayload)
async def home_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "home", service)


@router.get(PATHS.LOGIN, response_model=PagePayload)
async def login_page(
    response: Response,
    signedOut: Optional[str] = None,
    verified: Optional[str] = None,
    returnUrl: Optional[str] = None,
    service: BootService = Depends(get_boot_service),
):
    # verified=true|false is set by the email verification callback
    verified_flag = {"true": True, "false": False}.get(verified or "")
    return _page(
        response, "login", service,
        signed_out=signedOut == "true", verified=verified_flag, return_url=returnUrl,
    )


@router.get(PATHS.CHOOSE_ROLE, response_model=PagePayload)
async def choose_role_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "choose-role", service)


@router.get(PATHS.ONBOARDING, response_model=PagePayload)
async def onboarding_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "onboarding", service)


@router.get(PATHS.SUSPENDED, response_model=PagePayload)
async def suspended_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "suspended", service)


@router.get(PATHS.TALENT_DASHBOARD, response_model=PagePayload)
async def talent_dashboard_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "talent-dashboard", service)


@router.get(PATHS.CLIENT_DASHBOARD, response_model=PagePayload)
async def client_dashboard_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "client-dashboard", service)


@router.get(PATHS.ADMIN_DASHBOARD, response_model=PagePayload)
async def admin_dashboard_page(response: Response, service: BootService = Depends(get_boot_service)):
    return _page(response, "admin-dashboard", service)


@router.get(PATHS.CLIENT_PROFILE, response_model=PagePayload)
async def client_profile_page(
    response: Response,
    userId: Optional[str] = None,
    service: BootService = Depends(get_boot_service),
):
    """Own client profile, or with ?userId= an admin's read-only view of another client"""
    if not userId:
        return _page(response, "client-profile", service)

    viewer = service.profiles.get_profile_row("role") if service.user else None
    if not viewer or viewer.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Only admins can view other client profiles")

    try:
        result = service.supabase.table("client_profiles")\
            .select("*")\
            .eq("user_id", userId)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.error(f"Admin client profile lookup failed for {userId}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load client profile")

    client_profile = maybe_row(result)
    if client_profile is None:
        raise HTTPException(status_code=404, detail="Client profile not found")
    return _page(response, "client-profile", service, read_only=True, client_profile=client_profile)
