from __future__ import annotations

from typing import Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, event, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.abstracts.abstract_store import AbstractStore

M = TypeVar("M")


class SqlAlchemyStore(AbstractStore[M, ColumnElement[bool]], Generic[M]):
    """
    Store over one mapped class, bound to an AsyncSession.

    Predicates are SQLAlchemy boolean expressions (`Widget.sku == "A"`), so filtering
    runs in the database. Iteration order is ascending primary key unless `order_by`
    is given; `first()` and `slice()` both follow it.

    Inserts go through `session.add`/`add_all` and are flushed by autoflush before the
    next read on the same session; nothing is committed until `save_changes()`.
    """

    def __init__(self, db: AsyncSession, model: Type[M], order_by: Optional[Sequence] = None):
        self.db = db
        self.model = model
        self.order_by = tuple(order_by) if order_by is not None else tuple(inspect(model).primary_key)
        self._written: Dict[int, object] = {}
        event.listen(db.sync_session, "before_flush", self._track_flush)
        event.listen(db.sync_session, "after_commit", self._forget_written)
        event.listen(db.sync_session, "after_soft_rollback", self._forget_written)

    @property
    def entity_type(self) -> Type[M]:
        return self.model

    def _track_flush(self, session, flush_context, instances) -> None:
        dirty = (o for o in session.dirty if session.is_modified(o))
        for obj in (*session.new, *dirty, *session.deleted):
            self._written[id(obj)] = obj

    def _forget_written(self, session, *args) -> None:
        self._written.clear()

    def _select(self, predicate: Optional[ColumnElement[bool]]):
        stmt = select(self.model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        return stmt.order_by(*self.order_by)

    async def exists(self, predicate: Optional[ColumnElement[bool]]) -> bool:
        inner = select(self.model)
        if predicate is not None:
            inner = inner.where(predicate)
        res = await self.db.execute(select(inner.exists()))
        return bool(res.scalar())

    async def first(self, predicate: Optional[ColumnElement[bool]]) -> Optional[M]:
        res = await self.db.execute(self._select(predicate).limit(1))
        return res.scalars().first()

    async def all(self, predicate: Optional[ColumnElement[bool]] = None) -> List[M]:
        res = await self.db.execute(self._select(predicate))
        return list(res.scalars().all())

    async def count(self, predicate: Optional[ColumnElement[bool]] = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        res = await self.db.execute(stmt)
        return int(res.scalar_one())

    async def insert(self, entity: M) -> None:
        self.db.add(entity)

    async def insert_range(self, entities: Iterable[M]) -> None:
        self.db.add_all(list(entities))

    async def slice(self, predicate: Optional[ColumnElement[bool]], offset: int, limit: int) -> List[M]:
        # negative OFFSET is an error on most backends
        stmt = self._select(predicate).offset(max(offset, 0)).limit(limit)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def save_changes(self) -> int:
        """
        Commit the session. Returns how many distinct objects were inserted, updated or
        deleted since the last commit or rollback, including rows autoflush already wrote.
        """
        await self.db.flush()
        changed = len(self._written)
        await self.db.commit()
        self._written.clear()
        return changed
