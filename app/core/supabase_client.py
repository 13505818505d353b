# app/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client

from app.core.config import get_settings


@lru_cache
def supabase_public() -> Client:
    """
    Create a Supabase client with the anon/public key.

    The storefront acts on behalf of the signed-in customer (or admin), so
    this client carries the auth session and every table read/write goes
    through row-level security.

    Built once by the composition root in app/main.py; services receive
    it by injection and never import it directly.
    """
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
