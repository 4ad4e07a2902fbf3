from supabase import create_client, Client
from postgrest.exceptions import APIError
from app.config.settings import settings

# PostgREST error codes
NO_ROWS_CODES = ("PGRST116", "204")
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use only for webhooks and Stripe customer bootstrap."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def get_session_client(cls) -> Client:
        """Fresh anon client for sign-in and code exchange, so the shared client never holds a user session."""
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """Fresh client whose table queries run under the caller's session (RLS applies)."""
        client = create_client(settings.supabase_url, settings.supabase_key)
        client.postgrest.auth(access_token)
        return client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def maybe_row(result):
    """Row from a maybe_single() query, or None. Newer SDKs return None instead of an empty response."""
    if result is None:
        return None
    return result.data or None


def is_no_rows_error(error: Exception) -> bool:
    return isinstance(error, APIError) and error.code in NO_ROWS_CODES


def is_unique_violation(error: Exception) -> bool:
    if not isinstance(error, APIError):
        return False
    if error.code == UNIQUE_VIOLATION_CODE:
        return True
    message = (error.message or "").lower()
    return "duplicate key" in message or "unique constraint" in message
