import logging
from typing import List, Optional

from ..core.activity_logger import ActivityLogger
from ..core.errors import DuplicateError, EmptyNameError, LababilError, PersistenceError
from ..core.permissions import Section, ensure_section_allowed
from ..core.results import OperationResult
from ..models.inventory import Category
from ..models.user import Identity
from .remote_store import RemoteStore
from .state import DomainState

logger = logging.getLogger(__name__)


class CategoryService:
    """Category registry with case-insensitive unique names"""

    def __init__(self, state: DomainState, store: RemoteStore, activity: ActivityLogger):
        self.state = state
        self.store = store
        self.activity = activity

    def exists(self, name: str) -> bool:
        wanted = name.strip().lower()
        return any(category.name.lower() == wanted for category in self.state.categories)

    def sorted_names(self) -> List[str]:
        return sorted((category.name for category in self.state.categories), key=str.lower)

    async def add_category(self, name: Optional[str], identity: Optional[Identity] = None) -> OperationResult:
        try:
            if identity is not None:
                ensure_section_allowed(identity, Section.PRODUCTS)

            trimmed = (name or "").strip()
            if not trimmed:
                raise EmptyNameError("Category name cannot be empty")
            if self.exists(trimmed):
                raise DuplicateError("Category already exists")

            category = Category(id=trimmed, name=trimmed)
            result = await self.store.create_with_id("categories", category.id, category.to_document())
            if not result.success:
                logger.error("Error saving category %s: %s", trimmed, result.error)
                raise PersistenceError("Failed to save category")

            self.state.mutate(lambda: self.state.categories.append(category), "categories")
            await self.activity.log_activity(identity, "create", "category", category.id)
            return OperationResult.success(category)
        except LababilError as e:
            logger.info("Category rejected: %s", e.message)
            return OperationResult.failure(e)
