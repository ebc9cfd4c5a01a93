"""
Soft-delete read filter.

Every read path builds its WHERE clause from these helpers so logically
deleted rows (deleted_at set) are excluded for the primary entity and
for every joined entity alike.
"""
from typing import Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.models.mixins import SoftDeleteMixin

ModelT = TypeVar("ModelT", bound=SoftDeleteMixin)


def not_deleted(*models: Type[SoftDeleteMixin]) -> ColumnElement[bool]:
    """Predicate excluding deleted rows of each given model."""
    return and_(*(model.deleted_at.is_(None) for model in models))


def select_active(model: Type[ModelT]):
    """SELECT over non-deleted rows of a model."""
    return select(model).where(not_deleted(model))


async def get_active(db: AsyncSession, model: Type[ModelT], obj_id: UUID) -> Optional[ModelT]:
    """Fetch a non-deleted row by primary key, or None."""
    result = await db.execute(
        select_active(model).where(model.id == obj_id)
    )
    return result.scalar_one_or_none()
