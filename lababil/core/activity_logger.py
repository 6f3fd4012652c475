import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..models.activity import ActivityLog
from ..models.user import Identity
from ..services.remote_store import RemoteStore

logger = logging.getLogger(__name__)

ACTIVITY_COLLECTION = "activity_logs"


class ActivityLogger:
    """Records who did what in the remote store's activity log"""

    def __init__(self, store: RemoteStore):
        self.store = store

    async def log_activity(
        self,
        identity: Optional[Identity],
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Log user activity; a failed write is reported in the log only"""
        activity = ActivityLog(
            id=uuid.uuid4().hex,
            username=identity.username if identity else "system",
            role=identity.role.value if identity else "system",
            action=action,
            resource=resource,
            resource_id=resource_id,
            details=details,
            created_at=datetime.now(timezone.utc),
        )

        result = await self.store.create_with_id(ACTIVITY_COLLECTION, activity.id, activity.to_document())
        if not result.success:
            logger.warning("Could not record %s %s activity: %s", action, resource, result.error)
        return result.success
