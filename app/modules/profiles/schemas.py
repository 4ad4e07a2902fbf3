from pydantic import BaseModel
from typing import Optional


class ProfileSnapshot(BaseModel):
    id: str
    role: Optional[str] = None
    account_type: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: Optional[bool] = None
    is_suspended: Optional[bool] = None


class EnsureProfileResult(BaseModel):
    created: bool = False
    updated: bool = False
    profile: ProfileSnapshot
