"""Generic in-memory entity store."""

import itertools
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Generic, Optional, TypeVar

from hr_admin.exceptions import NotFoundError
from hr_admin.models import Entity
from hr_admin.validation import build_entity

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=Entity)

Validator = Callable[[Mapping[str, Any]], dict]

IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def utcnow() -> datetime:
    return datetime.now(UTC)


class EntityStore(Generic[EntityT]):
    """Insertion-ordered collection of one entity type, keyed by id.

    Every compound operation (validate, check, mutate) runs under the store's
    lock. Validation happens before anything is written, so a rejected create
    or update leaves the collection exactly as it was.

    Ids come from a per-store counter that starts above the highest seeded id.
    """

    entity_name = "Entity"

    def __init__(
        self,
        model: type[EntityT],
        validator: Validator,
        seed: Iterable[EntityT] = (),
    ):
        self._model = model
        self._validate = validator
        self._rows: dict[int, EntityT] = {}
        self._lock = threading.RLock()
        for entity in seed:
            self._rows[entity.id] = entity
        self._ids = itertools.count(max(self._rows, default=0) + 1)
        self._tracks_updates = "updated_at" in model.model_fields

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def find_all(self) -> list[EntityT]:
        with self._lock:
            return list(self._rows.values())

    def find_by_id(self, entity_id: int) -> Optional[EntityT]:
        with self._lock:
            return self._rows.get(entity_id)

    def get(self, entity_id: int) -> EntityT:
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} {entity_id} not found")
        return entity

    def create(self, fields: Mapping[str, Any]) -> EntityT:
        with self._lock:
            record = self._validate(
                {k: v for k, v in fields.items() if k not in IMMUTABLE_FIELDS}
            )
            self.check_unique(record, exclude_id=None)
            now = utcnow()
            record["id"] = next(self._ids)
            record["created_at"] = now
            if self._tracks_updates:
                record["updated_at"] = now
            entity = build_entity(self._model, record)
            self._rows[entity.id] = entity
        logger.info("Created %s %s", self.entity_name, entity.id)
        return entity

    def update(self, entity_id: int, changes: Mapping[str, Any]) -> EntityT:
        with self._lock:
            current = self.get(entity_id)
            record = current.model_dump()
            record.update(
                {k: v for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
            )
            if self._tracks_updates:
                record["updated_at"] = utcnow()
            record = self._validate(record)
            self.check_unique(record, exclude_id=entity_id)
            entity = build_entity(self._model, record)
            self._rows[entity_id] = entity
        logger.info("Updated %s %s (%s)", self.entity_name, entity_id, ", ".join(changes) or "no fields")
        return entity

    def remove(self, entity_id: int) -> None:
        with self._lock:
            if entity_id not in self._rows:
                raise NotFoundError(f"{self.entity_name} {entity_id} not found")
            del self._rows[entity_id]
        logger.info("Removed %s %s", self.entity_name, entity_id)

    def find_where(self, predicate: Callable[[EntityT], bool]) -> list[EntityT]:
        with self._lock:
            return [entity for entity in self._rows.values() if predicate(entity)]

    def check_unique(self, record: dict, exclude_id: Optional[int]) -> None:
        """Hook for subclasses enforcing unique keys; called under the lock."""
