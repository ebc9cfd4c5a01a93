"""
Student job request endpoints.

POST /students/job-requests        - apply to a job (student only)
GET  /students/job-requests        - list the caller's applications
PUT  /students/job-requests/{id}   - change status (owning company only)
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.api.auth import get_current_identity
from app.schemas.job_request import (
    JobRequestCreate,
    JobRequestCreatedResponse,
    JobRequestDetail,
    JobRequestResponse,
    JobRequestStatusUpdate,
    NotificationSummary,
)
from app.services.identity import Identity
from app.services.job_requests import (
    list_student_applications,
    set_status,
    submit_application,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=JobRequestCreatedResponse, status_code=201)
async def create_job_request(
    request: JobRequestCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Apply to a job.

    The application is created in PENDING state and every owner of the
    job's company is emailed. Notification failures do not fail the
    request; they are counted in the `notifications` field.

    Returns:
        201: Application created
        400: jobId missing or malformed, subject/message too long
        403: Caller is not a student (checked before the body)
        404: Job not found
        409: Already applied to this job
    """
    result = await submit_application(
        db,
        identity,
        job_id=request.job_id,
        subject=request.subject,
        message=request.message,
    )

    base = JobRequestResponse.model_validate(result.job_request)
    return JobRequestCreatedResponse(
        **base.model_dump(),
        notifications=NotificationSummary(
            sent=result.notifications.sent,
            failed=result.notifications.failed,
        ),
    )


@router.get("", response_model=list[JobRequestDetail])
async def list_job_requests(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """The caller's applications with job, company, student and user joined, newest first."""
    return await list_student_applications(db, identity)


@router.put("/{job_request_id}", response_model=JobRequestResponse)
async def update_job_request_status(
    job_request_id: UUID,
    update: JobRequestStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Set the status of an application (PENDING, ACCEPTED or REJECTED).

    Only owners of the job's company (or admins) may do this.
    """
    job_request = await set_status(db, identity, job_request_id, update.status)
    return job_request
