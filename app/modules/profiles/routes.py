from fastapi import APIRouter, Depends, HTTPException
from supabase import Client
from app.core.dependencies import get_current_user, get_user_supabase
from app.core.errors import ProfileRepairError
from app.modules.auth.schemas import AuthUser
from app.modules.profiles.schemas import EnsureProfileResult, ProfileSnapshot
from app.modules.profiles.service import ProfileService

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(
    user: AuthUser = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase),
) -> ProfileService:
    return ProfileService(supabase, user)


@router.get("/me", response_model=ProfileSnapshot)
async def get_my_profile(service: ProfileService = Depends(get_profile_service)):
    """Current user's profiles row"""
    row = service.get_profile_row()
    if row is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileSnapshot(**row)


@router.post("/ensure", response_model=EnsureProfileResult)
async def ensure_profile(service: ProfileService = Depends(get_profile_service)):
    """Create or repair the current user's profile from auth metadata"""
    try:
        return service.ensure_profile_exists()
    except ProfileRepairError as e:
        raise HTTPException(status_code=500, detail=str(e))
