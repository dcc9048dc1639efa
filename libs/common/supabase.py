"""Supabase client factories.

The anon client is used for user-facing auth flows (password recovery
emails); the admin client carries the service role key and bypasses RLS,
so it must only be used server side.
"""

from functools import lru_cache

from supabase import Client, create_client

from libs.common.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


@lru_cache
def get_supabase_admin_client() -> Client:
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
