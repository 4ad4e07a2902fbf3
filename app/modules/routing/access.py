from pydantic import BaseModel
from typing import Any, Mapping, Optional
from app.modules.routing.paths import (
    PATHS, PREFIXES, PUBLIC_CLIENT_PATHS, is_private_talent_path
)

ROLES = ("talent", "client", "admin")
ACCOUNT_TYPES = ("talent", "client", "unassigned")


class ProfileAccess(BaseModel):
    """Minimal routing view of a profiles row: only role and account_type matter here."""
    role: Optional[str] = None
    account_type: Optional[str] = None

    @classmethod
    def from_row(cls, row: Optional[Mapping[str, Any]]) -> Optional["ProfileAccess"]:
        if row is None:
            return None
        role = row.get("role")
        account_type = row.get("account_type")
        return cls(
            role=role if role in ROLES else None,
            # "unassigned" is stored but routes exactly like a missing account type
            account_type=account_type if account_type in ("talent", "client") else None,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def has_talent_access(profile: Optional[ProfileAccess]) -> bool:
    if profile is None:
        return False
    return profile.account_type == "talent" or profile.role == "talent"


def has_client_access(profile: Optional[ProfileAccess]) -> bool:
    if profile is None:
        return False
    return profile.account_type == "client" or profile.role == "client"


def needs_admin_access(path: str) -> bool:
    return path.startswith(PREFIXES.ADMIN)


def needs_client_access(path: str) -> bool:
    return path.startswith(PREFIXES.CLIENT) and path not in PUBLIC_CLIENT_PATHS


def needs_talent_access(path: str) -> bool:
    if path == PATHS.TALENT_LANDING:
        return False
    return is_private_talent_path(path)


def can_access_target(profile: Optional[ProfileAccess], target: str) -> bool:
    if needs_admin_access(target):
        return profile is not None and profile.is_admin
    if needs_client_access(target):
        return has_client_access(profile)
    if needs_talent_access(target):
        return has_talent_access(profile)
    return True


def is_routable(profile: Optional[ProfileAccess]) -> bool:
    """Admins always; everyone else only once account_type has resolved to talent or client."""
    if profile is None:
        return False
    if profile.is_admin:
        return True
    return profile.account_type in ("talent", "client")
