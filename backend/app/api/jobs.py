"""
Jobs API endpoints.
Browse active job postings; company owners post and withdraw them.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.api.auth import get_current_identity
from app.schemas.job import JobCreate, JobResponse
from app.schemas.base import DeleteResponse
from app.services.identity import Identity
from app.services import jobs as job_service


router = APIRouter()


@router.get("", response_model=list[JobResponse])
async def list_jobs(
    company_id: Optional[UUID] = Query(None, alias="companyId", description="Filter by company"),
    db: AsyncSession = Depends(get_db)
):
    """Active jobs of active companies, newest first."""
    return await job_service.list_jobs(db, company_id=company_id)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    return await job_service.get_job(db, job_id)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    job: JobCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Post a job for a company the caller owns."""
    return await job_service.create_job(db, identity, job)


@router.delete("/{job_id}", response_model=DeleteResponse)
async def delete_job(
    job_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Withdraw a job posting (soft delete). Existing applications are kept."""
    await job_service.delete_job(db, identity, job_id)
    return DeleteResponse(success=True)
