"""
Schools API endpoints.

Reads are public; create, update and delete are admin-only. DELETE is a
soft delete.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.api.auth import require_admin
from app.schemas.base import DeleteResponse
from app.schemas.school import SchoolCreate, SchoolResponse, SchoolUpdate
from app.services.identity import Identity
from app.services import schools as school_service

router = APIRouter()


@router.get("", response_model=list[SchoolResponse])
async def list_schools(
    is_active: Optional[bool] = Query(None, alias="isActive", description="true: active only, false: deleted only"),
    db: AsyncSession = Depends(get_db)
):
    """List schools, each flagged with isActive."""
    return await school_service.list_schools(db, is_active=is_active)


@router.post("", response_model=SchoolResponse, status_code=201)
async def create_school(
    data: SchoolCreate,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await school_service.create_school(db, data)


@router.get("/{school_id}", response_model=SchoolResponse)
async def get_school(
    school_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get an active school with its authorized domain."""
    return await school_service.get_school(db, school_id)


@router.put("/{school_id}", response_model=SchoolResponse)
async def update_school(
    school_id: UUID,
    data: SchoolUpdate,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update name, domainId and/or logo.

    Returns 400 with a `details` map of field errors when validation fails.
    """
    return await school_service.update_school(db, school_id, data)


@router.delete("/{school_id}", response_model=DeleteResponse)
async def delete_school(
    school_id: UUID,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await school_service.delete_school(db, school_id)
    return DeleteResponse(success=True)
