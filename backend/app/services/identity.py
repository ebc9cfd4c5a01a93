"""
Caller identity passed explicitly into business operations.

The API layer resolves the authenticated user once per request and hands
the resulting Identity to services; services never look up the session.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company, CompanyOwner
from app.models.student import Student
from app.models.user import User
from app.services.soft_delete import not_deleted


@dataclass(frozen=True)
class Identity:
    user_id: UUID
    email: str
    full_name: str = ""
    is_admin: bool = False
    student_id: Optional[UUID] = None
    company_ids: FrozenSet[UUID] = field(default_factory=frozenset)

    @property
    def is_student(self) -> bool:
        return self.student_id is not None

    @property
    def is_company_owner(self) -> bool:
        return bool(self.company_ids)

    def owns_company(self, company_id: UUID) -> bool:
        return company_id in self.company_ids


async def resolve_identity(db: AsyncSession, user: User) -> Identity:
    """Build the caller's Identity from their user row and profile rows."""
    student_result = await db.execute(
        select(Student.id).where(
            Student.user_id == user.id,
            not_deleted(Student)
        )
    )
    student_id = student_result.scalar_one_or_none()

    owner_result = await db.execute(
        select(CompanyOwner.company_id)
        .join(Company, Company.id == CompanyOwner.company_id)
        .where(
            CompanyOwner.user_id == user.id,
            not_deleted(Company)
        )
    )
    company_ids = frozenset(owner_result.scalars().all())

    return Identity(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_admin=user.is_admin(),
        student_id=student_id,
        company_ids=company_ids,
    )
