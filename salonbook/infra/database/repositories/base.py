"""Generic async repository for SQLAlchemy 2.0.

Guarded writes run in a savepoint so a unique-index violation can be reported
as the index name while the request transaction carries on.
"""
from __future__ import annotations

from typing import Any, ClassVar, Generic, Iterable, Optional, Tuple, TypeVar
from uuid import UUID

from sqlalchemy import and_, literal_column, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


def violated_constraint(exc: IntegrityError, names: Iterable[str]) -> Optional[str]:
    """Which of *names* an IntegrityError reports, if any."""
    cause = getattr(exc.orig, "__cause__", None)
    reported = getattr(cause, "constraint_name", None)
    text = f"{reported or ''} {exc.orig}"
    for name in names:
        if name in text:
            return name
    return None


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, id)  # type: ignore[return-value]

    async def exists(self, id: UUID) -> bool:
        pk_col = list(self.model.__table__.primary_key.columns)[0]
        stmt = select(literal_column("1")).where(pk_col == id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar() is not None

    async def create(self, data: dict[str, Any]) -> ModelT:
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance  # type: ignore[return-value]

    async def apply(self, instance: ModelT, data: dict[str, Any]) -> ModelT:
        for attr, value in data.items():
            setattr(instance, attr, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def create_guarded(
        self, data: dict[str, Any], constraints: Iterable[str]
    ) -> Tuple[Optional[ModelT], Optional[str]]:
        """Insert inside a savepoint.

        Returns ``(instance, None)`` or ``(None, constraint_name)`` when one of
        *constraints* rejected the row. The outer transaction stays usable.
        """
        instance = self.model(**data)
        try:
            async with self.session.begin_nested():
                self.session.add(instance)
                await self.session.flush()
        except IntegrityError as exc:
            name = violated_constraint(exc, constraints)
            if name is None:
                raise
            return None, name
        await self.session.refresh(instance)
        return instance, None  # type: ignore[return-value]

    async def apply_guarded(
        self, instance: ModelT, data: dict[str, Any], constraints: Iterable[str]
    ) -> Optional[str]:
        """Like create_guarded, for an update. On violation the instance is reloaded."""
        try:
            async with self.session.begin_nested():
                for attr, value in data.items():
                    setattr(instance, attr, value)
                await self.session.flush()
        except IntegrityError as exc:
            name = violated_constraint(exc, constraints)
            if name is None:
                raise
            await self.session.refresh(instance)
            return name
        await self.session.refresh(instance)
        return None

    async def upsert(self, lookup: dict[str, Any], values: dict[str, Any]) -> tuple[ModelT, bool]:
        """Update the row matching *lookup* with *values*, or create it. Returns (row, created)."""
        model_cls = self.model
        conditions = [getattr(model_cls, k) == v for k, v in lookup.items()]
        stmt = select(model_cls).where(and_(*conditions)).limit(1)
        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()
        if instance is not None:
            return await self.apply(instance, values), False  # type: ignore[return-value]
        instance = await self.create({**lookup, **values})
        return instance, True  # type: ignore[return-value]

    async def delete(self, id: UUID) -> bool:
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True

