"""Job request (application) Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class JobRequestCreate(CamelModel):
    """
    Body of POST /students/job-requests.

    Fields are checked by the service after the caller is known to be a
    student, so non-students get 403 whatever they send.
    """
    job_id: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class JobRequestStatusUpdate(CamelModel):
    """Body of PUT /students/job-requests/{id}."""
    status: str


class NotificationSummary(CamelModel):
    sent: int = 0
    failed: int = 0


class JobRequestResponse(CamelModel):
    id: UUID
    student_id: UUID
    job_id: UUID
    status: str
    subject: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JobRequestCreatedResponse(JobRequestResponse):
    """Created application plus the outcome of the owner notifications."""
    notifications: NotificationSummary


class CompanySummary(CamelModel):
    id: UUID
    name: str
    logo: Optional[str] = None


class JobSummary(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    skills: Optional[str] = None
    company: CompanySummary


class UserSummary(CamelModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class StudentSummary(CamelModel):
    id: UUID
    school_id: Optional[UUID] = None
    skills: str = ""
    availability: bool = True
    user: UserSummary


class JobRequestDetail(JobRequestResponse):
    """Application joined with its job, company, student and user."""
    job: JobSummary
    student: StudentSummary
