from supabase import create_client, Client, ClientOptions
from app.config.settings import settings


def _stateless_options() -> ClientOptions:
    return ClientOptions(persist_session=False, auto_refresh_token=False)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared anon client. Never used to sign in, so it carries no user session."""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key, options=_stateless_options())
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Tenant filtering is applied in code."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key, options=_stateless_options()
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def new_auth_client(cls) -> Client:
        """Fresh anon client for one auth call; sign-in stores the session on it, not on a shared client."""
        return create_client(settings.supabase_url, settings.supabase_key, options=_stateless_options())

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_admin_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_auth_client() -> Client:
    return SupabaseClient.new_auth_client()


def first_row(query):
    """Execute `query` limited to one row; None when nothing matches."""
    result = query.limit(1).execute()
    return result.data[0] if result.data else None
