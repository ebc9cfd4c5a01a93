"""School-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class SchoolCreate(CamelModel):
    name: Optional[str] = None
    domain_id: Optional[UUID] = None
    logo: Optional[str] = None


class SchoolUpdate(CamelModel):
    """Partial update: only fields present in the body are changed."""
    name: Optional[str] = None
    domain_id: Optional[UUID] = None
    logo: Optional[str] = None


class DomainResponse(CamelModel):
    id: UUID
    domain: str


class SchoolResponse(CamelModel):
    id: UUID
    name: str
    domain_id: UUID
    logo: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    is_active: bool = True
    domain: Optional[DomainResponse] = None
