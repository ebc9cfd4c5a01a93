from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, text
import uuid

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class JobRequestStatus(str, Enum):
    """Valid statuses for a student's application to a job"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class JobRequest(SoftDeleteMixin, Base):
    """A student's application to a job posting."""
    __tablename__ = "job_requests"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    student_id = Column(GUID, ForeignKey("students.id"), nullable=False, index=True)
    job_id = Column(GUID, ForeignKey("jobs.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default=JobRequestStatus.PENDING.value)

    # Optional cover note from the student
    subject = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # One live application per (student, job); insert conflicts surface as IntegrityError
        Index(
            'uq_job_requests_student_job_active',
            'student_id',
            'job_id',
            unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
    )
