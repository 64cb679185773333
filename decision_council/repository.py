"""In-memory store for issues, councils and sessions."""

import logging
import uuid
from typing import Generic, Protocol, TypeVar

from decision_council.errors import NotFoundError

logger = logging.getLogger(__name__)


class _HasId(Protocol):
    id: uuid.UUID


T = TypeVar("T", bound=_HasId)


class InMemoryRepository(Generic[T]):
    """Dict-backed repository. ``entity`` names the stored type in error messages."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        self._items: dict[uuid.UUID, T] = {}

    def get_by_id(self, entity_id: uuid.UUID) -> T:
        """Raises NotFoundError when nothing is stored under ``entity_id``."""
        try:
            return self._items[entity_id]
        except KeyError:
            raise NotFoundError(self.entity, entity_id) from None

    def find(self, entity_id: uuid.UUID) -> T | None:
        return self._items.get(entity_id)

    def add(self, item: T) -> T:
        if item.id in self._items:
            raise ValueError(f"{self.entity} {item.id} already exists")
        self._items[item.id] = item
        logger.debug("Added %s %s", self.entity, item.id)
        return item

    def update(self, item: T) -> T:
        if item.id not in self._items:
            raise NotFoundError(self.entity, item.id)
        self._items[item.id] = item
        return item

    def list(self) -> list[T]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)
