"""School and authorized school domain models."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
import uuid

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class AuthorizedSchoolDomain(SoftDeleteMixin, Base):
    """Email domain a school is allowed to onboard students from (e.g. ecole-test.fr)."""
    __tablename__ = "authorized_school_domains"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    domain = Column(String(255), nullable=False, unique=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class School(SoftDeleteMixin, Base):
    __tablename__ = "schools"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    domain_id = Column(GUID, ForeignKey("authorized_school_domains.id"), nullable=False, index=True)
    logo = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
