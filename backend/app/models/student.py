from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
import uuid

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class Student(SoftDeleteMixin, Base):
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)

    # One user maps to at most one student profile
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    school_id = Column(GUID, ForeignKey("schools.id"), nullable=True, index=True)

    student_email = Column(String, nullable=True)  # School-issued address

    # Profile
    skills = Column(Text, nullable=False, default="")  # Comma-separated
    apprenticeship_rhythm = Column(String(255), nullable=True)  # e.g. "3 weeks company / 1 week school"
    description = Column(Text, nullable=True)
    previous_companies = Column(Text, nullable=True)
    availability = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def skill_list(self) -> list[str]:
        return [skill.strip() for skill in (self.skills or "").split(",") if skill.strip()]
