from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    email_confirmed_at: Optional[datetime] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)
    app_metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def email_verified(self) -> bool:
        return self.email_confirmed_at is not None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    return_url: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    next_path: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Literal["talent", "client"] = "talent"


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str
