import logging
from supabase import Client
from app.database.supabase_client import SupabaseClient
from app.modules.auth.schemas import AuthUser, LoginRequest, RegisterRequest, RegisterResponse
from fastapi import HTTPException
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def _to_auth_user(user) -> AuthUser:
    return AuthUser(
        id=user.id,
        email=user.email,
        email_confirmed_at=getattr(user, "email_confirmed_at", None),
        user_metadata=user.user_metadata or {},
        app_metadata=user.app_metadata or {},
    )


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            # The signup trigger reads these to build profiles/talent_profiles
            user_metadata = {"role": register_data.role}
            if register_data.first_name:
                user_metadata["first_name"] = register_data.first_name.strip()
            if register_data.last_name:
                user_metadata["last_name"] = register_data.last_name.strip()

            # sign_up keeps the new session on the client it ran on when email confirmation is off
            auth_response = SupabaseClient.get_session_client().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully. Check your email to verify your account."
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed for {register_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail="Registration failed")

    def login(self, login_data: LoginRequest) -> Tuple[str, AuthUser]:
        """Authenticate user using Supabase Auth. Returns (access_token, user)."""
        try:
            auth_response = SupabaseClient.get_session_client().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return auth_response.session.access_token, _to_auth_user(auth_response.user)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed for {login_data.email}: {error_message}")
            raise HTTPException(status_code=500, detail="Login failed")

    def get_current_user(self, token: str) -> AuthUser:
        """Get current user from a Supabase access token. Raises 401 when the token is not usable."""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            return _to_auth_user(user_response.user)
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def resolve_user(self, token: Optional[str]) -> Optional[AuthUser]:
        """Like get_current_user, but an absent or rejected token simply means "signed out"."""
        if not token:
            return None
        try:
            return self.get_current_user(token)
        except HTTPException:
            return None

    def exchange_code(self, code: str) -> Tuple[str, AuthUser]:
        """Trade an email link's auth code for a session. Returns (access_token, user)."""
        try:
            auth_response = SupabaseClient.get_session_client().auth.exchange_code_for_session({"auth_code": code})
        except Exception as e:
            logger.warning(f"Auth code exchange failed: {e}")
            raise HTTPException(status_code=400, detail="Invalid or expired verification link")

        if not auth_response or not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=400, detail="Invalid or expired verification link")
        return auth_response.session.access_token, _to_auth_user(auth_response.user)

    def logout(self, token: str) -> bool:
        """Revoke the session behind this access token only"""
        try:
            self.supabase.auth.admin.sign_out(token, "local")
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False
