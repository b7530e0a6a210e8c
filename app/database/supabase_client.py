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
    def get_user_client(cls, access_token: str) -> Client:
        """Client acting as the user behind access_token, so RLS policies and auth.uid() see them.

        A fresh client per token keeps the shared anon client free of user headers.
        """
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
        )

    @classmethod
    def get_session_client(cls) -> Client:
        """Throwaway client for sign-in / sign-out calls, which store session state on the client they run on."""
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in maintenance scripts only."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()
