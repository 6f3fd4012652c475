import logging

from supabase import acreate_client

from .config import Settings
from .services.remote_store import RemoteStore, SupabaseStore, UnconfiguredStore

logger = logging.getLogger(__name__)


async def create_remote_store(settings: Settings) -> RemoteStore:
    """Build the remote store adapter for the configured supabase project"""
    if not settings.remote_store_configured:
        logger.error("Supabase is not configured; running from the local cache only")
        return UnconfiguredStore()

    client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return SupabaseStore(client)
