from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from shared.abstracts.abstract_store import AbstractStore

T = TypeVar("T")

Predicate = Callable[[T], bool]


class InMemoryStore(AbstractStore[T, Predicate], Generic[T]):
    """
    List-backed store with plain callables as predicates.

    Iteration order is insertion order. Staged entities are visible to later reads
    immediately and are tracked in `pending` until `save_changes()`.
    """

    def __init__(self, entities: Iterable[T] = (), entity_type: Optional[type] = None):
        self.items: List[T] = list(entities)
        self.pending: List[T] = []
        self._entity_type = entity_type

    @property
    def entity_type(self) -> Optional[type]:
        return self._entity_type

    def _matches(self, predicate: Optional[Predicate]) -> Iterable[T]:
        if predicate is None:
            return iter(list(self.items))
        return (e for e in list(self.items) if predicate(e))

    async def exists(self, predicate: Optional[Predicate]) -> bool:
        return any(True for _ in self._matches(predicate))

    async def first(self, predicate: Optional[Predicate]) -> Optional[T]:
        return next(iter(self._matches(predicate)), None)

    async def all(self, predicate: Optional[Predicate] = None) -> List[T]:
        return list(self._matches(predicate))

    async def count(self, predicate: Optional[Predicate] = None) -> int:
        return sum(1 for _ in self._matches(predicate))

    async def insert(self, entity: T) -> None:
        self.items.append(entity)
        self.pending.append(entity)

    async def insert_range(self, entities: Iterable[T]) -> None:
        batch = list(entities)
        self.items.extend(batch)
        self.pending.extend(batch)

    async def slice(self, predicate: Optional[Predicate], offset: int, limit: int) -> List[T]:
        start = max(offset, 0)
        return list(self._matches(predicate))[start:start + limit]

    async def save_changes(self) -> int:
        committed = len(self.pending)
        self.pending.clear()
        return committed
