from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
import uuid

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class Job(SoftDeleteMixin, Base):
    __tablename__ = "jobs"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    company_id = Column(GUID, ForeignKey("companies.id"), nullable=False, index=True)

    # Job details
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    skills = Column(Text, nullable=True)  # Required skills, comma-separated

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
