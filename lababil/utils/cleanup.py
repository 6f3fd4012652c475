"""Cleanup utilities for old remote data"""
import logging
from datetime import datetime, timedelta, timezone

from ..core.activity_logger import ACTIVITY_COLLECTION
from ..services.remote_store import RemoteStore

logger = logging.getLogger(__name__)


async def cleanup_old_activity_logs(store: RemoteStore, days: int = 90) -> int:
    """Delete activity logs older than ``days``; returns how many were removed"""
    cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()

    result = await store.query_by_field(ACTIVITY_COLLECTION, "createdAt", "<", cutoff)
    if not result.success:
        logger.warning("Could not list old activity logs: %s", result.error)
        return 0

    deleted = 0
    for entry in result.data:
        outcome = await store.delete(ACTIVITY_COLLECTION, entry["id"])
        if outcome.success:
            deleted += 1

    logger.info("Deleted %d activity logs older than %d days", deleted, days)
    return deleted
