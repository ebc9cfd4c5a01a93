"""
Job request business logic.

Submission runs: student check → field validation → atomic insert (duplicate guard) →
outbox staging → commit → notification fan-out. Status changes go through
the state machine after an ownership check.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.company import Company
from app.models.job import Job
from app.models.job_request import JobRequest, JobRequestStatus
from app.models.student import Student
from app.models.user import User
from app.schemas.job_request import (
    CompanySummary,
    JobRequestDetail,
    JobSummary,
    StudentSummary,
    UserSummary,
)
from app.services.identity import Identity
from app.services.notifications import (
    DispatchSummary,
    dispatch_notifications,
    enqueue_application_notifications,
)
from app.services.soft_delete import not_deleted
from app.services.state_machine import (
    InvalidStatusError,
    InvalidTransitionError,
    parse_status,
    transition_job_request,
)

logger = logging.getLogger(__name__)

MAX_SUBJECT_LENGTH = 255
MAX_MESSAGE_LENGTH = 5000

ACTIVE_APPLICATION_INDEX = "uq_job_requests_student_job_active"
# SQLite names the columns rather than the index
SQLITE_ACTIVE_APPLICATION_VIOLATION = "UNIQUE constraint failed: job_requests.student_id, job_requests.job_id"


@dataclass
class SubmissionResult:
    job_request: JobRequest
    notifications: DispatchSummary


def is_duplicate_application(error: IntegrityError) -> bool:
    """True when the insert collided with the one-live-application-per-job index."""
    detail = str(error.orig)
    return ACTIVE_APPLICATION_INDEX in detail or SQLITE_ACTIVE_APPLICATION_VIOLATION in detail


def validate_submission(
    job_id: Union[str, UUID, None],
    subject: Optional[str],
    message: Optional[str],
) -> UUID:
    """Check the submitted fields and return the parsed job id."""
    if not job_id:
        raise BadRequestError("Job ID is required", {"jobId": "This field is required"})

    errors = {}
    parsed_job_id = None
    try:
        parsed_job_id = job_id if isinstance(job_id, UUID) else UUID(str(job_id))
    except ValueError:
        errors["jobId"] = "Must be a valid job ID"
    if subject and len(subject) > MAX_SUBJECT_LENGTH:
        errors["subject"] = f"Subject must be at most {MAX_SUBJECT_LENGTH} characters"
    if message and len(message) > MAX_MESSAGE_LENGTH:
        errors["message"] = f"Message must be at most {MAX_MESSAGE_LENGTH} characters"

    if errors:
        raise BadRequestError("Invalid data", errors)
    return parsed_job_id


async def submit_application(
    db: AsyncSession,
    identity: Identity,
    job_id: Union[str, UUID, None],
    subject: Optional[str] = None,
    message: Optional[str] = None,
) -> SubmissionResult:
    """
    Create a PENDING job request for the calling student and notify the company owners.

    Raises:
        ForbiddenError: caller has no student profile, whatever the payload
        BadRequestError: job_id missing or malformed, subject/message too long
        NotFoundError: job missing or deleted (or its company deleted)
        ConflictError: the student already has an active request for this job
    """
    # Role comes before any payload check: a non-student gets 403 whatever they send,
    # even a body that would otherwise be rejected as missing jobId
    if not identity.is_student:
        raise ForbiddenError("Only students can apply for jobs")

    job_id = validate_submission(job_id, subject, message)

    result = await db.execute(
        select(Job, Company)
        .join(Company, Company.id == Job.company_id)
        .where(
            Job.id == job_id,
            not_deleted(Job, Company)
        )
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Job not found")
    job, company = row

    job_request = JobRequest(
        student_id=identity.student_id,
        job_id=job.id,
        status=JobRequestStatus.PENDING.value,
        subject=subject,
        message=message,
    )
    db.add(job_request)

    # The partial unique index makes insert-if-absent atomic
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if not is_duplicate_application(e):
            raise
        logger.info(f"Duplicate application rejected: student {identity.student_id}, job {job_id}")
        raise ConflictError("You have already applied for this job")

    notifications = await enqueue_application_notifications(
        db,
        job_request,
        job,
        company,
        applicant_name=identity.full_name,
        applicant_email=identity.email,
    )

    await db.commit()
    await db.refresh(job_request)
    # Detached so a failed outcome write in dispatch cannot expire it
    db.expunge(job_request)

    logger.info(
        f"Created job request {job_request.id}: student {identity.student_id} → job {job.id} "
        f"({len(notifications)} owner notification(s) queued)"
    )

    summary = await dispatch_notifications(db, notifications)

    return SubmissionResult(job_request=job_request, notifications=summary)


async def set_status(
    db: AsyncSession,
    identity: Identity,
    job_request_id: UUID,
    new_status: Union[str, JobRequestStatus],
) -> JobRequest:
    """
    Change the status of a job request on behalf of the owning company.

    Raises:
        BadRequestError: status outside the enumeration
        NotFoundError: job request missing or deleted
        ForbiddenError: caller neither owns the job's company nor is admin
        ConflictError: transition disallowed (only when enforcement is enabled)
    """
    try:
        target = parse_status(new_status)
    except InvalidStatusError as e:
        raise BadRequestError(str(e), {"status": str(e)})

    result = await db.execute(
        select(JobRequest, Job)
        .join(Job, Job.id == JobRequest.job_id)
        .where(
            JobRequest.id == job_request_id,
            not_deleted(JobRequest)
        )
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Job request not found")
    job_request, job = row

    if not (identity.is_admin or identity.owns_company(job.company_id)):
        logger.warning(
            f"User {identity.user_id} attempted to change status of job request {job_request_id} "
            f"without owning company {job.company_id}"
        )
        raise ForbiddenError("Only the company that posted this job can update the request")

    try:
        return await transition_job_request(db, job_request, target)
    except InvalidTransitionError as e:
        raise ConflictError(str(e))


def _detail_query():
    """Job requests joined with job, company, student and user, all non-deleted."""
    return (
        select(JobRequest, Job, Company, Student, User)
        .join(Job, Job.id == JobRequest.job_id)
        .join(Company, Company.id == Job.company_id)
        .join(Student, Student.id == JobRequest.student_id)
        .join(User, User.id == Student.user_id)
        .where(not_deleted(JobRequest, Job, Company, Student, User))
    )


def build_job_request_detail(row) -> JobRequestDetail:
    job_request, job, company, student, user = row
    return JobRequestDetail(
        id=job_request.id,
        student_id=job_request.student_id,
        job_id=job_request.job_id,
        status=job_request.status,
        subject=job_request.subject,
        message=job_request.message,
        created_at=job_request.created_at,
        updated_at=job_request.updated_at,
        job=JobSummary(
            id=job.id,
            name=job.name,
            description=job.description,
            skills=job.skills,
            company=CompanySummary.model_validate(company),
        ),
        student=StudentSummary(
            id=student.id,
            school_id=student.school_id,
            skills=student.skills or "",
            availability=student.availability,
            user=UserSummary.model_validate(user),
        ),
    )


async def list_student_applications(db: AsyncSession, identity: Identity) -> list[JobRequestDetail]:
    """The calling student's applications, newest first."""
    if not identity.is_student:
        raise ForbiddenError("Only students can view job requests")

    result = await db.execute(
        _detail_query()
        .where(JobRequest.student_id == identity.student_id)
        .order_by(JobRequest.created_at.desc())
    )
    return [build_job_request_detail(row) for row in result.all()]


async def list_company_applications(
    db: AsyncSession,
    identity: Identity,
    status: Optional[str] = None,
) -> list[JobRequestDetail]:
    """Applications to jobs of the companies the caller owns, newest first."""
    if not identity.is_company_owner:
        raise ForbiddenError("Only company owners can view received applications")

    query = _detail_query().where(Company.id.in_(identity.company_ids))
    if status:
        try:
            query = query.where(JobRequest.status == parse_status(status).value)
        except InvalidStatusError as e:
            raise BadRequestError(str(e), {"status": str(e)})

    result = await db.execute(query.order_by(JobRequest.created_at.desc()))
    return [build_job_request_detail(row) for row in result.all()]


async def get_application(db: AsyncSession, identity: Identity, job_request_id: UUID) -> JobRequestDetail:
    """
    A single application, visible to the applicant, owners of the job's company and admins.

    Other callers get 404 so existence is not disclosed.
    """
    result = await db.execute(_detail_query().where(JobRequest.id == job_request_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Job request not found")

    job_request, _, company, _, _ = row
    allowed = (
        identity.is_admin
        or identity.owns_company(company.id)
        or (identity.student_id is not None and job_request.student_id == identity.student_id)
    )
    if not allowed:
        raise NotFoundError("Job request not found")

    return build_job_request_detail(row)
