from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")
P = TypeVar("P")


class AbstractStore(ABC, Generic[T, P]):
    """
    Minimal, backend-agnostic contract for one collection of entities of type T,
    filtered by store-native predicates of type P.

    A `None` predicate means "no filter". Inserts only stage entities; they become
    durable when the store's own `save_changes()` runs.
    """

    @property
    def entity_type(self) -> Optional[type]:
        """Entity class held by this store, when known."""
        return None

    @abstractmethod
    async def exists(self, predicate: Optional[P]) -> bool: ...

    @abstractmethod
    async def first(self, predicate: Optional[P]) -> Optional[T]:
        """First match in the store's iteration order, or None."""

    @abstractmethod
    async def all(self, predicate: Optional[P] = None) -> List[T]: ...

    @abstractmethod
    async def count(self, predicate: Optional[P] = None) -> int: ...

    @abstractmethod
    async def insert(self, entity: T) -> None: ...

    @abstractmethod
    async def insert_range(self, entities: Iterable[T]) -> None: ...

    @abstractmethod
    async def slice(self, predicate: Optional[P], offset: int, limit: int) -> List[T]:
        """Matches in iteration order, skipping `offset` and returning at most `limit`."""

    @abstractmethod
    async def save_changes(self) -> int: ...
