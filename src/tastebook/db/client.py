"""
Tastebook - Supabase Client.

Low-level client factory. Services receive a client as their first argument;
routes build one per request from the caller's access token so RLS applies.
"""

from supabase import Client, ClientOptions, create_client

from tastebook.config import settings

# Singleton client instances
_client: Client | None = None
_service_client: Client | None = None


def get_client() -> Client:
    """
    Get the anonymous Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_service_client() -> Client:
    """
    Get the service-role client used for token validation.

    Falls back to the anon key when no service role key is configured.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key or settings.supabase_anon_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """
    Build a client that acts as the user owning `access_token`.

    Not cached: each request carries its own token.
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
    )


def create_session_client() -> Client:
    """
    Build an uncached anonymous client for sign-up, sign-in and refresh.

    A sign-in rewrites the client's Authorization header, so these flows
    never run on the shared `get_client()` instance.
    """
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
