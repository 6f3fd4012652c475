"""Whole-state export and import.

The snapshot is one JSON object with the keys ``products, sales, purchases,
customers, categories, settings`` holding the collections verbatim, plus
export metadata. It is the backup format and the offline cache format.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.activity_logger import ActivityLogger
from ..core.errors import ImportFormatError, LababilError
from ..core.permissions import Section, ensure_section_allowed
from ..core.results import OperationResult
from ..models.settings import StoreSettings
from ..models.user import Identity
from .state import ENTITY_MODELS, DomainState

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "2.0.0"

EXPECTED_SHAPES = {
    "products": list,
    "sales": list,
    "purchases": list,
    "customers": list,
    "categories": list,
    "settings": dict,
}


class ImportReport(BaseModel):
    imported: List[str]
    skipped: List[str] = []


def _parse_strict(collection: str, records: List[Any]) -> List[Any]:
    model = ENTITY_MODELS[collection]
    entities = []
    for position, record in enumerate(records):
        try:
            entities.append(model.model_validate(record))
        except PydanticValidationError as e:
            raise ImportFormatError(
                f"Invalid {collection} record at position {position}: {e.errors()[0]['msg']}"
            )
    if collection == "categories":
        entities = _unique_categories(entities)
    return entities


def _unique_categories(categories: List[Any]) -> List[Any]:
    seen = set()
    unique = []
    for category in categories:
        key = category.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(category)
    return unique


class SnapshotService:
    def __init__(self, state: DomainState, activity: ActivityLogger):
        self.state = state
        self.activity = activity

    def export_snapshot(self, identity: Identity) -> OperationResult:
        try:
            ensure_section_allowed(identity, Section.SETTINGS)
        except LababilError as e:
            return OperationResult.failure(e)

        data = self.state.to_snapshot()
        data.update(
            {
                "exportDate": datetime.now(timezone.utc).isoformat(),
                "version": SNAPSHOT_VERSION,
                "exportedBy": identity.username,
            }
        )
        return OperationResult.success(data)

    @staticmethod
    def export_filename(day: Optional[datetime] = None) -> str:
        day = day or datetime.now(timezone.utc)
        return f"lababil-sales-backup-{day.date().isoformat()}.json"

    @staticmethod
    def dumps(snapshot: Dict[str, Any]) -> str:
        return json.dumps(snapshot, indent=2)

    async def import_snapshot(self, raw: Union[str, bytes, Dict[str, Any]], identity: Identity) -> OperationResult:
        """Replace in-memory state with a snapshot; all-or-nothing per import"""
        try:
            ensure_section_allowed(identity, Section.SETTINGS)
            report = self._replace_from(self._decode(raw))
        except LababilError as e:
            logger.warning("Import error: %s", e.message)
            return OperationResult.failure(e)

        await self.activity.log_activity(identity, "import", "snapshot", details=report.model_dump())
        logger.info("Data imported: %s", ", ".join(report.imported))
        return OperationResult.success(report)

    @staticmethod
    def _decode(raw: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                raise ImportFormatError("Invalid file format")
        if not isinstance(raw, dict):
            raise ImportFormatError("Invalid file format")
        return raw

    def _replace_from(self, data: Dict[str, Any]) -> ImportReport:
        updates: Dict[str, Any] = {}
        skipped = []
        for key, shape in EXPECTED_SHAPES.items():
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, shape):
                logger.warning("Ignoring %s in import: expected a %s", key, shape.__name__)
                skipped.append(key)
                continue

            if key == "settings":
                try:
                    updates[key] = StoreSettings.model_validate({**self.state.settings.to_document(), **value})
                except PydanticValidationError as e:
                    raise ImportFormatError(f"Invalid settings: {e.errors()[0]['msg']}")
            else:
                updates[key] = _parse_strict(key, value)

        if not updates:
            raise ImportFormatError("Snapshot contains no importable data")

        self.state.mutate(lambda: self.state.replace(updates), *updates)
        return ImportReport(imported=list(updates), skipped=skipped)
