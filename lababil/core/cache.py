class CacheKeys:
    """Centralized cache key management"""

    # One key per entity collection, e.g. "lababil-products"
    COLLECTION = "{prefix}-{collection}"

    # Whole-state blob; peers re-read it when notified of a change
    SNAPSHOT = "{prefix}-data"

    # Set once local data has been copied to the remote store
    MIGRATION_DONE = "{prefix}-migration-done"

    @staticmethod
    def collection(prefix: str, collection: str) -> str:
        return CacheKeys.COLLECTION.format(prefix=prefix, collection=collection)

    @staticmethod
    def snapshot(prefix: str) -> str:
        return CacheKeys.SNAPSHOT.format(prefix=prefix)

    @staticmethod
    def migration_done(prefix: str) -> str:
        return CacheKeys.MIGRATION_DONE.format(prefix=prefix)
