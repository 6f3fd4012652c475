from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import LababilError


@dataclass
class OperationResult:
    """Outcome of a core operation; errors are returned, not raised"""

    ok: bool
    value: Any = None
    error: Optional[LababilError] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: LababilError) -> "OperationResult":
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


@dataclass
class CommitResult(OperationResult):
    # Product ids whose new stock could not be pushed to the remote store
    unsynced_products: List[str] = field(default_factory=list)

    @property
    def record(self) -> Any:
        return self.value
