"""Database models"""
from app.models.user import User, UserRole
from app.models.school import School, AuthorizedSchoolDomain
from app.models.company import Company, CompanyOwner
from app.models.student import Student
from app.models.job import Job
from app.models.job_request import JobRequest, JobRequestStatus
from app.models.notification import NotificationOutbox, NotificationStatus

__all__ = [
    "User",
    "UserRole",
    "School",
    "AuthorizedSchoolDomain",
    "Company",
    "CompanyOwner",
    "Student",
    "Job",
    "JobRequest",
    "JobRequestStatus",
    "NotificationOutbox",
    "NotificationStatus",
]
