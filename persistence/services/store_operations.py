import inspect
import logging
from asyncio import Event
from typing import Any, Awaitable, Callable, Generic, Hashable, Iterable, List, Optional, TypeVar, Union

from app.core.config import settings
from persistence.services.cancellation import raise_if_cancelled
from persistence.services.field_accessor import resolve_bool_field
from shared.abstracts.abstract_store import AbstractStore
from shared.entities.page import Page
from shared.exceptions import InvalidPageRequest

T = TypeVar("T")
P = TypeVar("P")
K = TypeVar("K", bound=Hashable)

logger = logging.getLogger(__name__)


class StoreOperations(Generic[T, P]):
    """
    Guarded inserts, merges, batch dedup, soft delete and paging over one store.

    Each call is a short read-then-write against the store with no lock held between
    the two: concurrent callers racing on the same predicate can both stage an insert,
    and only a uniqueness constraint in the store resolves that. Nothing here commits;
    staged changes become durable on `store.save_changes()`.

    Every method takes an optional `cancel` event that is checked before each store call;
    once set, the operation stops with OperationCancelled. Cancelling the task itself
    still surfaces as asyncio.CancelledError.
    """

    def __init__(self, store: AbstractStore[T, P]):
        self.store = store

    # ---------- Guarded inserts ----------

    async def add_if_absent(self, predicate: P, entity: T, *, cancel: Optional[Event] = None) -> bool:
        """Stage `entity` unless some entity already matches `predicate`. Returns True if staged."""
        raise_if_cancelled(cancel)
        if await self.store.exists(predicate):
            logger.debug("add_if_absent: match exists, skipping insert")
            return False

        raise_if_cancelled(cancel)
        await self.store.insert(entity)
        logger.debug("add_if_absent: staged insert")
        return True

    async def upsert(
        self,
        predicate: P,
        entity: T,
        merge: Callable[[T, T], None],
        *,
        cancel: Optional[Event] = None,
    ) -> T:
        """
        Merge `entity` into the first match via `merge(existing, entity)`, or stage it
        as new. Returns whichever entity is now tracked by the store.
        """
        raise_if_cancelled(cancel)
        existing = await self.store.first(predicate)
        if existing is not None:
            merge(existing, entity)
            logger.debug("upsert: merged into existing entity")
            return existing

        raise_if_cancelled(cancel)
        await self.store.insert(entity)
        logger.debug("upsert: staged insert")
        return entity

    async def get_or_create(
        self,
        predicate: P,
        factory: Callable[[], Union[Awaitable[T], T]],
        *,
        cancel: Optional[Event] = None,
    ) -> T:
        """
        Return the first match, or build one with `factory` and stage it.
        The factory runs only on a miss; if it raises, nothing is staged.
        """
        raise_if_cancelled(cancel)
        found = await self.store.first(predicate)
        if found is not None:
            return found

        created = factory()
        if inspect.isawaitable(created):
            created = await created

        raise_if_cancelled(cancel)
        await self.store.insert(created)
        logger.debug("get_or_create: staged new entity from factory")
        return created

    # ---------- Batch ----------

    async def add_range_preserved(
        self,
        entities: Iterable[T],
        key_selector: Callable[[T], K],
        *,
        cancel: Optional[Event] = None,
    ) -> List[T]:
        """
        Stage, as a single batch, the candidates whose key is not already in the store.

        Existing keys come from one full scan at call start. Candidates are only compared
        against that snapshot, not against each other: two candidates sharing a new key
        are both staged.
        """
        candidates = list(entities)

        raise_if_cancelled(cancel)
        existing_keys = {key_selector(e) for e in await self.store.all(None)}
        fresh = [c for c in candidates if key_selector(c) not in existing_keys]

        raise_if_cancelled(cancel)
        await self.store.insert_range(fresh)
        logger.debug(
            "add_range_preserved: staged %d of %d candidates (%d existing keys)",
            len(fresh), len(candidates), len(existing_keys),
        )
        return fresh

    # ---------- Soft delete ----------

    async def soft_delete(
        self,
        predicate: P,
        field: Any,
        *,
        owner: Optional[type] = None,
        cancel: Optional[Event] = None,
    ) -> bool:
        """
        Set the boolean `field` to True on the first match, leaving every other field alone.

        `field` is a BoolField, a mapped attribute (`Widget.is_deleted`) or an attribute
        name with its `owner` type (the store's entity type by default). A descriptor that is
        not a settable bool of the store's entity type raises InvalidFieldDescriptor before
        the store is queried. No match is a no-op; returns whether an entity was flagged.
        """
        accessor = resolve_bool_field(field, owner, self.store.entity_type)

        raise_if_cancelled(cancel)
        target = await self.store.first(predicate)
        if target is None:
            logger.debug("soft_delete: no match for %s", accessor.name)
            return False

        accessor.set(target, True)
        logger.debug("soft_delete: flagged %s", accessor.name)
        return True

    # ---------- Paging ----------

    async def get_paged(
        self,
        predicate: P,
        page_number: int,
        page_size: Optional[int] = None,
        *,
        cancel: Optional[Event] = None,
    ) -> Page[T]:
        """
        One page of matches plus the total number of matches.

        Pages are 1-based and follow the store's iteration order. The count and the
        slice are separate reads, so a concurrent writer can make them disagree unless
        the store gives snapshot isolation.
        """
        size = settings.default_page_size if page_size is None else page_size
        _validate_page_request(page_number, size)
        offset = (page_number - 1) * size

        raise_if_cancelled(cancel)
        total = await self.store.count(predicate)

        raise_if_cancelled(cancel)
        items = await self.store.slice(predicate, offset, size)

        logger.debug("get_paged: page %d (size %d) -> %d of %d", page_number, size, len(items), total)
        return Page(items=items, total_count=total, page_number=page_number, page_size=size)


def _validate_page_request(page_number: int, page_size: int) -> None:
    if page_size <= 0:
        raise InvalidPageRequest("page_size", page_size, "must be a positive integer")
    if page_size > settings.max_page_size:
        raise InvalidPageRequest("page_size", page_size, f"must not exceed {settings.max_page_size}")
    if page_number <= 0:
        raise InvalidPageRequest("page_number", page_number, "pages are numbered from 1")
