from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from supabase import Client
from typing import Optional
from app.core.dependencies import get_optional_user, get_user_supabase
from app.modules.auth.schemas import AuthUser
from app.modules.boot.schemas import ActionResult, BootState, FinishOnboardingRequest
from app.modules.boot.service import BootService
from app.modules.routing.paths import PATHS

router = APIRouter(tags=["boot"])


def get_boot_service(
    user: Optional[AuthUser] = Depends(get_optional_user),
    supabase: Client = Depends(get_user_supabase),
) -> BootService:
    return BootService(supabase, user)


@router.get("/boot", response_model=BootState)
async def get_boot_state(
    post_auth: bool = False,
    returnUrl: Optional[str] = None,
    service: BootService = Depends(get_boot_service),
):
    """Routing snapshot for the signed-in user"""
    boot = service.get_boot_state(post_auth=post_auth, return_url_raw=returnUrl)
    if boot is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return boot


@router.post("/onboarding/finish", response_model=ActionResult)
async def finish_onboarding(
    request: FinishOnboardingRequest,
    service: BootService = Depends(get_boot_service),
):
    """Save talent onboarding; returns where to go next or a user-facing error"""
    if service.user is None:
        return RedirectResponse(PATHS.LOGIN, status_code=303)
    return service.finish_onboarding(request)
