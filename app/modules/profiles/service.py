import logging
from supabase import Client
from typing import Any, Dict, Optional
from app.core.errors import NotAuthenticatedError, ProfileRepairError
from app.database.supabase_client import is_unique_violation, maybe_row
from app.modules.auth.schemas import AuthUser
from app.modules.profiles.schemas import EnsureProfileResult, ProfileSnapshot

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, role, account_type, display_name, email_verified, is_suspended"


def build_display_name(user: AuthUser) -> str:
    """first + last from signup metadata, whichever half exists, else the email's local part."""
    first_name = (user.user_metadata.get("first_name") or "").strip()
    last_name = (user.user_metadata.get("last_name") or "").strip()
    if first_name and last_name:
        return f"{first_name} {last_name}"
    if first_name or last_name:
        return first_name or last_name
    if user.email and user.email.split("@")[0]:
        return user.email.split("@")[0]
    return "User"


class ProfileService:
    """Profile Repair: makes sure the signed-in user has a usable profiles row."""

    def __init__(self, supabase: Client, user: Optional[AuthUser]):
        self.supabase = supabase
        self.user = user

    def _require_user(self) -> AuthUser:
        if self.user is None:
            raise NotAuthenticatedError()
        return self.user

    def get_profile_row(self, columns: str = PROFILE_COLUMNS) -> Optional[Dict[str, Any]]:
        user = self._require_user()
        result = self.supabase.table("profiles")\
            .select(columns)\
            .eq("id", user.id)\
            .maybe_single()\
            .execute()
        return maybe_row(result)

    def _talent_row_exists(self, user_id: str) -> bool:
        result = self.supabase.table("talent_profiles")\
            .select("user_id")\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        return maybe_row(result) is not None

    def _insert_talent_row(self, user: AuthUser) -> None:
        try:
            self.supabase.table("talent_profiles").insert({
                "user_id": user.id,
                "first_name": (user.user_metadata.get("first_name") or "").strip(),
                "last_name": (user.user_metadata.get("last_name") or "").strip(),
            }).execute()
        except Exception as e:
            # Base profile is usable without it; onboarding upserts the row later
            logger.error(f"Error creating talent profile for {user.id}: {e}")

    def ensure_profile_exists(self) -> EnsureProfileResult:
        """
        Idempotent repair of the profiles row (and talent_profiles for talent users).

        Safe to call on every login and every boot-state computation: when the
        rows exist and fields are populated, no write is issued.
        """
        user = self._require_user()

        try:
            profile = self.get_profile_row()
        except Exception as e:
            logger.error(f"Error checking profile for {user.id}: {e}")
            raise ProfileRepairError("Failed to check existing profile", e)

        if profile is None:
            return self._create_profile(user)

        updated = False
        updates: Dict[str, Any] = {}
        if not (profile.get("display_name") or "").strip():
            updates["display_name"] = build_display_name(user)
        if profile.get("email_verified") != user.email_verified:
            updates["email_verified"] = user.email_verified

        if updates:
            try:
                self.supabase.table("profiles")\
                    .update(updates)\
                    .eq("id", user.id)\
                    .execute()
            except Exception as e:
                logger.error(f"Error updating profile for {user.id}: {e}")
                raise ProfileRepairError("Failed to update profile", e)
            profile = {**profile, **updates}
            updated = True

        # A crash between the two signup inserts leaves a talent without its domain row
        if profile.get("role") == "talent":
            try:
                has_talent_row = self._talent_row_exists(user.id)
            except Exception as e:
                logger.error(f"Error checking talent profile for {user.id}: {e}")
                has_talent_row = True
            if not has_talent_row:
                self._insert_talent_row(user)
                updated = True

        return EnsureProfileResult(created=False, updated=updated, profile=ProfileSnapshot(**profile))

    def _create_profile(self, user: AuthUser) -> EnsureProfileResult:
        role = user.user_metadata.get("role") or "talent"
        if role not in ("talent", "client", "admin"):
            role = "talent"
        row = {
            "id": user.id,
            "role": role,
            # MVP: every new account starts as talent; clients are promoted through the application flow
            "account_type": "talent",
            "display_name": build_display_name(user),
            "email_verified": user.email_verified,
        }
        try:
            self.supabase.table("profiles").insert(row).execute()
        except Exception as e:
            if is_unique_violation(e):
                # A concurrent request created it first
                existing = self.get_profile_row()
                if existing is not None:
                    return EnsureProfileResult(created=False, updated=False, profile=ProfileSnapshot(**existing))
            logger.error(f"Error creating profile for {user.id}: {e}")
            raise ProfileRepairError("Failed to create profile", e)

        logger.info(f"Repaired missing profile for user {user.id} (role={role})")
        if role == "talent":
            self._insert_talent_row(user)

        return EnsureProfileResult(created=True, updated=False, profile=ProfileSnapshot(**row, is_suspended=False))
