"""Authentication-related Pydantic schemas."""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr

from app.schemas.base import CamelModel


class MagicLinkRequest(BaseModel):
    """Request to send magic link email."""
    email: EmailStr


class MagicLinkResponse(BaseModel):
    """Response after requesting magic link."""
    message: str
    email: str


class VerifyTokenRequest(BaseModel):
    """Request to verify magic link token."""
    token: str


class IdentityResponse(CamelModel):
    """Authenticated caller with the role flags derived from their profiles."""
    user_id: UUID
    email: str
    full_name: Optional[str] = None
    is_admin: bool = False
    is_student: bool = False
    student_id: Optional[UUID] = None
    company_ids: list[UUID] = []
