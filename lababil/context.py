"""Application context: every collaborator, wired once at startup"""
from dataclasses import dataclass
from typing import Any, Optional

from .config import Settings, get_settings
from .core.activity_logger import ActivityLogger
from .core.notifier import ChangeNotifier
from .core.security import HeaderIdentityProvider
from .database import create_remote_store
from .services.catalog_service import CatalogService
from .services.category_service import CategoryService
from .services.local_cache import LocalCache
from .services.migration_service import MigrationService
from .services.redis import RedisClient
from .services.remote_store import RemoteStore
from .services.reporting_service import ReportingService
from .services.snapshot_service import SnapshotService
from .services.state import DomainState
from .services.transaction_service import TransactionService


@dataclass
class AppContext:
    settings: Settings
    store: RemoteStore
    redis: RedisClient
    cache: LocalCache
    notifier: ChangeNotifier
    state: DomainState
    activity: ActivityLogger
    transactions: TransactionService
    categories: CategoryService
    catalog: CatalogService
    reports: ReportingService
    snapshots: SnapshotService
    migration: MigrationService
    identity_provider: Any


def build_context(
    settings: Settings,
    store: RemoteStore,
    redis_client: RedisClient,
    identity_provider: Optional[Any] = None,
    clock=None,
) -> AppContext:
    cache = LocalCache(redis_client, prefix=settings.CACHE_PREFIX)
    notifier = ChangeNotifier(redis_client, channel=settings.SYNC_CHANNEL)
    state = DomainState(store, cache, notifier)
    activity = ActivityLogger(store)

    return AppContext(
        settings=settings,
        store=store,
        redis=redis_client,
        cache=cache,
        notifier=notifier,
        state=state,
        activity=activity,
        transactions=TransactionService(state, store, activity, timezone=settings.TIMEZONE, clock=clock),
        categories=CategoryService(state, store, activity),
        catalog=CatalogService(state, store, activity),
        reports=ReportingService(state, timezone=settings.TIMEZONE),
        snapshots=SnapshotService(state, activity),
        migration=MigrationService(store, cache, activity),
        identity_provider=identity_provider or HeaderIdentityProvider(),
    )


async def create_context(settings: Optional[Settings] = None) -> AppContext:
    settings = settings or get_settings()
    store = await create_remote_store(settings)
    redis_client = RedisClient(settings.REDIS_URL)
    return build_context(settings, store, redis_client)
