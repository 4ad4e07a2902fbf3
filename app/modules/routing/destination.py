from typing import Optional
from app.modules.routing.access import ProfileAccess
from app.modules.routing.paths import PATHS


def determine_destination(
    profile: Optional[ProfileAccess],
    fallback: str = PATHS.TALENT_DASHBOARD,
) -> str:
    """Canonical terminal for a user. Role wins over account_type; admin wins over everything."""
    if profile is None:
        return fallback
    if profile.role == "admin":
        return PATHS.ADMIN_DASHBOARD
    if profile.role == "client" or profile.account_type == "client":
        return PATHS.CLIENT_DASHBOARD
    if profile.role == "talent" or profile.account_type == "talent":
        return PATHS.TALENT_DASHBOARD
    # MVP: users with neither role nor account type land on the talent terminal
    return fallback
