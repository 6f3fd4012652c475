import logging
from typing import Dict

from pydantic import BaseModel

from ..core.activity_logger import ActivityLogger
from .local_cache import LocalCache
from .remote_store import RemoteStore
from .state import DEFAULT_CATEGORIES, parse_records

logger = logging.getLogger(__name__)

MIGRATED_COLLECTIONS = ("categories", "products", "sales", "purchases", "customers")


class MigrationReport(BaseModel):
    ran: bool
    migrated: Dict[str, int] = {}
    failed: int = 0


class MigrationService:
    """One-time copy of locally cached data into the remote store"""

    def __init__(self, store: RemoteStore, cache: LocalCache, activity: ActivityLogger):
        self.store = store
        self.cache = cache
        self.activity = activity

    async def run_if_needed(self) -> MigrationReport:
        if self.cache.migration_done():
            return MigrationReport(ran=False)

        logger.info("Running data migration to the remote store...")
        migrated: Dict[str, int] = {}
        failed = 0

        for collection in MIGRATED_COLLECTIONS:
            records = self.cache.read_collection(collection)
            if not isinstance(records, list):
                records = DEFAULT_CATEGORIES if collection == "categories" else []

            count = 0
            for entity in parse_records(collection, records):
                if not entity.id:
                    continue
                result = await self.store.create_with_id(collection, entity.id, entity.to_document())
                if result.success:
                    count += 1
                else:
                    failed += 1
            migrated[collection] = count

        if failed:
            # Flag stays unset so the next start retries
            logger.warning("Migration failed for %d records, using local data", failed)
        else:
            self.cache.mark_migration_done()
            logger.info("Data migration completed: %s", migrated)
            await self.activity.log_activity(None, "migrate", "snapshot", details=migrated)

        return MigrationReport(ran=True, migrated=migrated, failed=failed)
