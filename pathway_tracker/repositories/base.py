"""
Generic async repository shared by every model
"""

from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar, Union
from uuid import UUID

import structlog
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement, Select

from pathway_tracker.core.database import Base

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Lookup, paging and write helpers for one model

    Models with an ``is_deleted`` column are soft-deleted, and their deleted
    rows stay invisible unless a caller passes ``include_deleted=True``.
    Writes commit immediately; on a database error the session is rolled
    back and the error propagates.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.soft_deletes = hasattr(model, "is_deleted")

    @property
    def name(self) -> str:
        return self.model.__name__

    def _select(self, include_deleted: bool = False) -> Select:
        query = select(self.model)
        if self.soft_deletes and not include_deleted:
            query = query.where(self.model.is_deleted == False)
        return query

    def _where(self, query: Select, criteria: Optional[Dict[str, Any]]) -> Select:
        # None means "no filter"; lists become IN clauses
        for field, value in (criteria or {}).items():
            if value is None:
                continue
            column = getattr(self.model, field)
            query = query.where(column.in_(value) if isinstance(value, list) else column == value)
        return query

    async def get(
        self,
        db: AsyncSession,
        id: Union[UUID, str],
        include_deleted: bool = False
    ) -> Optional[ModelType]:
        result = await db.execute(self._select(include_deleted).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def page(
        self,
        db: AsyncSession,
        *,
        skip: int,
        limit: int,
        criteria: Optional[Dict[str, Any]] = None,
        clauses: Iterable[ColumnElement] = (),
    ) -> Tuple[List[ModelType], int]:
        """
        One page of rows, newest first, with the total number of matches

        Args:
            db: Database session
            skip: Rows to skip
            limit: Maximum rows returned
            criteria: Column equality filters; ``None`` values are ignored
            clauses: Additional SQL conditions, ANDed together

        Returns:
            Tuple of (rows, total)
        """
        query = self._where(self._select(), criteria)
        for clause in clauses:
            query = query.where(clause)

        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await db.execute(
            query.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        )
        rows = list(result.scalars().all())

        logger.debug("Page loaded", model=self.name, returned=len(rows), total=total, skip=skip)
        return rows, total

    async def _commit(self, db: AsyncSession, db_obj: ModelType, action: str) -> ModelType:
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"{self.name} {action} failed", error=str(e))
            raise
        await db.refresh(db_obj)
        logger.info(f"{self.name} {action}", id=str(db_obj.id))
        return db_obj

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        values = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**values)
        db.add(db_obj)
        return await self._commit(db, db_obj, "created")

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """Apply the given fields; schemas contribute only fields the client set"""
        changes = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(db_obj, field, value)
        return await self._commit(db, db_obj, "updated")

    async def remove(self, db: AsyncSession, *, db_obj: ModelType) -> None:
        if self.soft_deletes:
            db_obj.is_deleted = True
            db_obj.deleted_at = func.now()
            await self._commit(db, db_obj, "soft-deleted")
            return

        await db.delete(db_obj)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"{self.name} delete failed", error=str(e))
            raise
        logger.info(f"{self.name} deleted", id=str(db_obj.id))
