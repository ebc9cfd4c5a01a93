"""Company and company-owner models."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
import uuid

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class Company(SoftDeleteMixin, Base):
    __tablename__ = "companies"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    logo = Column(String(500), nullable=True)  # URL from the file-storage service

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class CompanyOwner(Base):
    """Links a user to a company they manage. Owners receive application notifications."""
    __tablename__ = "company_owners"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    company_id = Column(GUID, ForeignKey("companies.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'company_id', name='uq_company_owner'),
    )
