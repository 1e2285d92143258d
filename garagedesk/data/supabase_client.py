from typing import Optional

from supabase import create_client, Client

from garagedesk.config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Singleton-style accessor for the Supabase client.
    """
    global _supabase_client

    if _supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError(
                "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing. "
                "Check your .env file."
            )
        _supabase_client = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    return _supabase_client


def count_rows(table_name: str) -> int:
    """
    Exact number of rows in `table_name`.
    Falls back to the length of the returned data when the count header is absent.
    """
    client = get_supabase_client()
    resp = client.table(table_name).select("id", count="exact").execute()

    if resp.count is not None:
        return int(resp.count)
    return len(resp.data or [])
