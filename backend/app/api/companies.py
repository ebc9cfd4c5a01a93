"""
Company-side endpoints.

Applications received by the caller's companies; the detail view is the
target of the link in owner notification emails.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.api.auth import get_current_identity
from app.schemas.job_request import JobRequestDetail
from app.services.identity import Identity
from app.services.job_requests import get_application, list_company_applications

router = APIRouter()


@router.get("/job-requests", response_model=list[JobRequestDetail])
async def list_received_job_requests(
    status: Optional[str] = Query(None, description="Filter by status (PENDING, ACCEPTED, REJECTED)"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Applications to jobs of the caller's companies, newest first."""
    return await list_company_applications(db, identity, status=status)


@router.get("/job-requests/{job_request_id}", response_model=JobRequestDetail)
async def get_received_job_request(
    job_request_id: UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    return await get_application(db, identity, job_request_id)
