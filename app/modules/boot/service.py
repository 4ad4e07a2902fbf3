import logging
from supabase import Client
from typing import Optional
from app.core.errors import NotAuthenticatedError, ProfileRepairError
from app.database.supabase_client import maybe_row
from app.modules.auth.schemas import AuthUser
from app.modules.boot.schemas import (
    ActionResult, AdminDomain, BootState, ClientDomain, DomainProfile,
    FinishOnboardingRequest, TalentDomain, is_non_empty_text, needs_onboarding
)
from app.modules.profiles.service import ProfileService
from app.modules.routing.access import ProfileAccess
from app.modules.routing.decide import Redirect, decide_post_auth_redirect
from app.modules.routing.destination import determine_destination
from app.modules.routing.paths import ONBOARDING_PATH, PATHS

logger = logging.getLogger(__name__)


class BootService:
    def __init__(self, supabase: Client, user: Optional[AuthUser]):
        self.supabase = supabase
        self.user = user
        self.profiles = ProfileService(supabase, user)

    def _fetch_domain_row(self, table: str, columns: str, user_id: str) -> Optional[dict]:
        try:
            result = self.supabase.table(table)\
                .select(columns)\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            return maybe_row(result)
        except Exception as e:
            # Treated as a missing row; onboarding routing takes over
            logger.error(f"[boot] {table} query failed for {user_id}: {e}")
            return None

    def _load_domain(self, user_id: str, access: ProfileAccess, display_name: Optional[str]) -> DomainProfile:
        if access.is_admin:
            return AdminDomain()
        if access.role == "client" or access.account_type == "client":
            row = self._fetch_domain_row("client_profiles", "user_id, company_name", user_id)
            return ClientDomain(
                has_row=row is not None,
                company_name=(row or {}).get("company_name"),
            )
        row = self._fetch_domain_row("talent_profiles", "user_id, first_name, last_name", user_id)
        return TalentDomain(
            has_row=row is not None,
            display_name=display_name,
            first_name=(row or {}).get("first_name"),
            last_name=(row or {}).get("last_name"),
        )

    def get_boot_state(self, post_auth: bool = False, return_url_raw: Optional[str] = None) -> Optional[BootState]:
        """
        Snapshot of where the signed-in user belongs right now.

        post_auth marks a login/callback decision point: a safe returnUrl is
        honoured there. Returns None when nobody is signed in.
        """
        if self.user is None:
            return None
        user = self.user

        # Bootstrap gap repair; a failure degrades to has_profiles_row=False below
        try:
            self.profiles.ensure_profile_exists()
        except (ProfileRepairError, NotAuthenticatedError) as e:
            logger.error(f"[boot] ensure_profile_exists failed for {user.id}: {e}")

        try:
            profile = self.profiles.get_profile_row("role, account_type, display_name")
        except Exception as e:
            logger.error(f"[boot] profile query failed for {user.id}: {e}")
            profile = None

        access = ProfileAccess.from_row(profile) or ProfileAccess()
        raw_account_type = (profile or {}).get("account_type")
        account_type = raw_account_type if raw_account_type in ("talent", "client") else "unassigned"

        domain = self._load_domain(user.id, access, (profile or {}).get("display_name"))
        pending = needs_onboarding(domain)

        if pending and isinstance(domain, TalentDomain):
            next_path = ONBOARDING_PATH
        elif pending and isinstance(domain, ClientDomain):
            next_path = PATHS.CLIENT_PROFILE
        elif post_auth:
            decision = decide_post_auth_redirect(
                pathname=PATHS.LOGIN,
                profile=access,
                return_url_raw=return_url_raw,
                signed_out=False,
                fallback=PATHS.TALENT_DASHBOARD,
            )
            next_path = decision.to if isinstance(decision, Redirect) else determine_destination(access)
        else:
            next_path = determine_destination(access)

        return BootState(
            user_id=user.id,
            email=user.email,
            role=access.role,
            account_type=account_type,
            has_profiles_row=profile is not None,
            has_domain_profile_row=isinstance(domain, AdminDomain) or domain.has_row,
            needs_onboarding=pending,
            next_path=next_path,
        )

    def finish_onboarding(self, request: FinishOnboardingRequest) -> ActionResult:
        """
        Save the talent onboarding form. Never changes role or account_type:
        onboarding is not a promotion path.
        """
        if self.user is None:
            raise NotAuthenticatedError()
        user = self.user

        try:
            self.profiles.ensure_profile_exists()
        except ProfileRepairError as e:
            logger.error(f"[finish_onboarding] profile repair failed for {user.id}: {e}")
            return ActionResult.failure("Failed to initialize profile. Please try again.")

        full_name = " ".join(request.full_name.split())
        first_name, _, last_name = full_name.partition(" ")
        if not is_non_empty_text(first_name) or not is_non_empty_text(last_name):
            return ActionResult.failure("Please enter your first and last name.")

        try:
            self.supabase.table("profiles")\
                .update({"display_name": full_name})\
                .eq("id", user.id)\
                .execute()
        except Exception as e:
            logger.error(f"[finish_onboarding] profiles update failed for {user.id}: {e}")
            return ActionResult.failure("Failed to save your profile. Please try again.")

        def optional_text(value: Optional[str]) -> Optional[str]:
            return value.strip() if is_non_empty_text(value) else None

        try:
            self.supabase.table("talent_profiles").upsert(
                {
                    "user_id": user.id,
                    "first_name": first_name,
                    "last_name": last_name,
                    "location": optional_text(request.location),
                    "experience": optional_text(request.experience),
                    "portfolio_url": optional_text(request.website),
                },
                on_conflict="user_id",
            ).execute()
        except Exception as e:
            logger.error(f"[finish_onboarding] talent_profiles upsert failed for {user.id}: {e}")
            return ActionResult.failure("Failed to save talent details. Please try again.")

        boot = self.get_boot_state()
        return ActionResult.success(boot.next_path if boot else PATHS.TALENT_DASHBOARD)
