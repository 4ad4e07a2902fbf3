from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union


def is_non_empty_text(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


class AdminDomain(BaseModel):
    kind: Literal["admin"] = "admin"


class ClientDomain(BaseModel):
    kind: Literal["client"] = "client"
    has_row: bool = False
    company_name: Optional[str] = None


class TalentDomain(BaseModel):
    kind: Literal["talent"] = "talent"
    has_row: bool = False
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


DomainProfile = Annotated[Union[AdminDomain, ClientDomain, TalentDomain], Field(discriminator="kind")]


def needs_onboarding(domain: DomainProfile) -> bool:
    if isinstance(domain, AdminDomain):
        return False
    if isinstance(domain, ClientDomain):
        return not is_non_empty_text(domain.company_name)
    if isinstance(domain, TalentDomain):
        return not (
            is_non_empty_text(domain.display_name)
            and is_non_empty_text(domain.first_name)
            and is_non_empty_text(domain.last_name)
        )
    raise TypeError(f"Unknown domain profile: {domain!r}")


class BootState(BaseModel):
    """Per-request routing snapshot. Computed fresh every time, never cached."""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    account_type: str = "unassigned"
    has_profiles_row: bool = False
    has_domain_profile_row: bool = False
    needs_onboarding: bool = False
    next_path: str


class FinishOnboardingRequest(BaseModel):
    full_name: str
    location: Optional[str] = None
    experience: Optional[str] = None
    website: Optional[str] = None


class ActionResult(BaseModel):
    """Server-action outcome: ok with next_path, or a user-facing error string."""
    ok: bool
    next_path: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, next_path: str) -> "ActionResult":
        return cls(ok=True, next_path=next_path)

    @classmethod
    def failure(cls, error: str) -> "ActionResult":
        return cls(ok=False, error=error)
