from datetime import datetime
from typing import Any, Dict, Optional

from .base import Document


class ActivityLog(Document):
    id: str
    username: str
    role: str
    action: str  # "create", "update", "delete", "import", "migrate"
    resource: str  # "sale", "purchase", "product", "category", "settings", ...
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime
