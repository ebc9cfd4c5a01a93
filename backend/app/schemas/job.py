"""Job-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field

from app.schemas.base import CamelModel


class JobBase(CamelModel):
    """Base schema with common job fields."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    skills: Optional[str] = None  # Comma-separated


class JobCreate(JobBase):
    """Schema for creating a job on behalf of a company."""
    company_id: UUID


class JobResponse(JobBase):
    """Schema for job response."""
    id: UUID
    company_id: UUID
    company_name: str
    created_at: datetime
    updated_at: datetime
