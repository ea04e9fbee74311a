from fastapi import HTTPException
from supabase import create_client, Client, ClientOptions
from app.config import settings


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
        """Client with service_role key; bypasses RLS. Falls back to the anon client."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def new_session_client(cls) -> Client:
        """Fresh anon client for sign-in, so a user session never leaks into the shared clients."""
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    """Data client. Role checks are enforced by the API, so it prefers the service key."""
    return SupabaseClient.get_service_client()


def get_admin_supabase() -> Client:
    """Client for the Auth admin API; requires the service role key."""
    if not settings.supabase_service_role_key:
        raise HTTPException(
            status_code=500,
            detail="Service role key not configured. Cannot manage auth users."
        )
    return SupabaseClient.get_service_client()


def get_session_supabase() -> Client:
    return SupabaseClient.new_session_client()


def list_all_auth_users(client: Client, per_page: int = 1000) -> list:
    """Every Auth user; the admin API returns one page per call."""
    users = []
    page = 1
    while True:
        batch = client.auth.admin.list_users(page=page, per_page=per_page)
        users.extend(batch)
        if len(batch) < per_page:
            return users
        page += 1
