from typing import Any, Dict, Optional
from supabase import create_client, Client
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
        """Client with service_role key; bypasses RLS. Falls back to the anon client when no key is configured."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    """Dependency for cross-organization reads (membership checks, inviter lookup)."""
    return SupabaseClient.get_service_client()


def first_row(result) -> Optional[Dict[str, Any]]:
    """First row of a PostgREST response, or None when the query matched nothing."""
    if result is None or not result.data:
        return None
    data = result.data
    return data[0] if isinstance(data, list) else data
