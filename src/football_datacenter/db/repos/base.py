from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from football_datacenter.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    def __init__(self, session: Session, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def add(self, obj: ModelT, *, flush: bool = True) -> ModelT:
        self.session.add(obj)
        if flush:
            self.session.flush()  # assigns PKs, etc.
        return obj

    def get(self, id_: Any) -> ModelT | None:
        return self.session.get(self.model, id_)

    def first_where(self, *predicates: ColumnElement[bool]) -> ModelT | None:
        stmt = select(self.model).where(*predicates).limit(1)
        return self.session.execute(stmt).scalars().first()

    def all_where(self, *predicates: ColumnElement[bool]) -> list[ModelT]:
        stmt = select(self.model).where(*predicates)
        return list(self.session.execute(stmt).scalars().all())

    def list(self, *, offset: int = 0, limit: int | None = None) -> list[ModelT]:
        stmt = select(self.model).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def patch(self, obj: ModelT, changes: Mapping[str, Any], *, flush: bool = True) -> ModelT:
        for k, v in changes.items():
            if v is None:
                continue
            setattr(obj, k, v)
        if flush:
            self.session.flush()
        return obj

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class ProviderKeyedRepository(BaseRepository[ModelT]):
    """Repository for entities keyed by the provider's external numeric id.

    `upsert` is idempotent: the first call inserts, later calls with the same
    provider id update the stored row in place.
    """

    provider_id_field: str

    def find_by_provider_id(self, provider_id: int) -> ModelT | None:
        column = getattr(self.model, self.provider_id_field)
        return self.first_where(column == provider_id)

    def upsert(
        self, provider_id: int, values: Mapping[str, Any], *, flush: bool = True
    ) -> tuple[ModelT, bool]:
        """Insert or update by provider id. Returns (row, created)."""

        existing = self.find_by_provider_id(provider_id)
        if existing is None:
            obj = self.model(**{self.provider_id_field: provider_id}, **values)
            return self.add(obj, flush=flush), True

        return self.patch(existing, values, flush=flush), False
