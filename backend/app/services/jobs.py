"""Job posting business logic."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ForbiddenError, NotFoundError
from app.models.company import Company
from app.models.job import Job
from app.schemas.job import JobCreate, JobResponse
from app.services.identity import Identity
from app.services.soft_delete import get_active, not_deleted

logger = logging.getLogger(__name__)


def build_job_response(job: Job, company: Company) -> JobResponse:
    return JobResponse(
        id=job.id,
        company_id=job.company_id,
        company_name=company.name,
        name=job.name,
        description=job.description,
        skills=job.skills,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def _active_jobs_query():
    return (
        select(Job, Company)
        .join(Company, Company.id == Job.company_id)
        .where(not_deleted(Job, Company))
    )


async def list_jobs(db: AsyncSession, company_id: Optional[UUID] = None) -> list[JobResponse]:
    """Active jobs of active companies, newest first."""
    query = _active_jobs_query()
    if company_id:
        query = query.where(Job.company_id == company_id)

    result = await db.execute(query.order_by(Job.created_at.desc()))
    return [build_job_response(job, company) for job, company in result.all()]


async def get_job(db: AsyncSession, job_id: UUID) -> JobResponse:
    result = await db.execute(_active_jobs_query().where(Job.id == job_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Job not found")
    return build_job_response(*row)


async def create_job(db: AsyncSession, identity: Identity, data: JobCreate) -> JobResponse:
    """Post a job for a company the caller owns (admins may post for any company)."""
    company = await get_active(db, Company, data.company_id)
    if company is None:
        raise NotFoundError("Company not found")

    if not (identity.is_admin or identity.owns_company(company.id)):
        raise ForbiddenError("Only owners of this company can post jobs")

    job = Job(
        company_id=company.id,
        name=data.name,
        description=data.description,
        skills=data.skills,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Created job {job.id}: {job.name} at {company.name}")
    return build_job_response(job, company)


async def delete_job(db: AsyncSession, identity: Identity, job_id: UUID) -> None:
    job = await get_active(db, Job, job_id)
    if job is None:
        raise NotFoundError("Job not found")

    if not (identity.is_admin or identity.owns_company(job.company_id)):
        raise ForbiddenError("Only owners of this company can delete its jobs")

    job.soft_delete()
    await db.commit()

    logger.info(f"Soft-deleted job {job_id}")
