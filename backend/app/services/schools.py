"""School management business logic."""
import logging
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import BadRequestError, NotFoundError
from app.models.school import AuthorizedSchoolDomain, School
from app.schemas.school import DomainResponse, SchoolCreate, SchoolResponse, SchoolUpdate
from app.services.soft_delete import get_active, not_deleted

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


async def validate_school_data(db: AsyncSession, data: dict, partial: bool = False) -> dict[str, str]:
    """
    Validate school fields.

    Returns a field → message map (wire names), empty when valid. With
    partial=True, absent fields are not required.
    """
    errors = {}

    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            errors["name"] = "Name is required"
        elif len(name) > MAX_NAME_LENGTH:
            errors["name"] = f"Name must be at most {MAX_NAME_LENGTH} characters"

    if "domain_id" in data or not partial:
        domain_id = data.get("domain_id")
        if not domain_id:
            errors["domainId"] = "Domain is required"
        elif await get_active(db, AuthorizedSchoolDomain, domain_id) is None:
            errors["domainId"] = "Unknown authorized domain"

    logo = data.get("logo")
    if logo:
        parsed = urlparse(logo)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors["logo"] = "Logo must be an http(s) URL"

    return errors


def build_school_response(school: School, domain: Optional[AuthorizedSchoolDomain] = None) -> SchoolResponse:
    return SchoolResponse(
        id=school.id,
        name=school.name,
        domain_id=school.domain_id,
        logo=school.logo,
        created_at=school.created_at,
        updated_at=school.updated_at,
        deleted_at=school.deleted_at,
        is_active=not school.is_deleted,
        domain=DomainResponse.model_validate(domain) if domain else None,
    )


async def list_schools(db: AsyncSession, is_active: Optional[bool] = None) -> list[SchoolResponse]:
    """
    All schools for the admin view, each flagged active or deleted.

    is_active=True keeps active schools only, False deleted ones only.
    """
    query = (
        select(School, AuthorizedSchoolDomain)
        .outerjoin(AuthorizedSchoolDomain, AuthorizedSchoolDomain.id == School.domain_id)
    )
    if is_active is True:
        query = query.where(not_deleted(School))
    elif is_active is False:
        query = query.where(School.deleted_at.is_not(None))

    result = await db.execute(query.order_by(School.name.asc()))
    return [build_school_response(school, domain) for school, domain in result.all()]


async def _get_school_row(db: AsyncSession, school_id: UUID):
    result = await db.execute(
        select(School, AuthorizedSchoolDomain)
        .outerjoin(AuthorizedSchoolDomain, AuthorizedSchoolDomain.id == School.domain_id)
        .where(School.id == school_id, not_deleted(School))
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("School not found")
    return row


async def get_school(db: AsyncSession, school_id: UUID) -> SchoolResponse:
    school, domain = await _get_school_row(db, school_id)
    return build_school_response(school, domain)


async def create_school(db: AsyncSession, data: SchoolCreate) -> SchoolResponse:
    fields = data.model_dump()
    errors = await validate_school_data(db, fields)
    if errors:
        raise BadRequestError("Invalid data", errors)

    school = School(
        name=fields["name"].strip(),
        domain_id=fields["domain_id"],
        logo=fields.get("logo"),
    )
    db.add(school)
    await db.commit()
    await db.refresh(school)

    logger.info(f"Created school {school.id}: {school.name}")
    return await get_school(db, school.id)


async def update_school(db: AsyncSession, school_id: UUID, data: SchoolUpdate) -> SchoolResponse:
    fields = data.model_dump(exclude_unset=True)
    errors = await validate_school_data(db, fields, partial=True)
    if errors:
        raise BadRequestError("Invalid data", errors)

    school, _ = await _get_school_row(db, school_id)

    for field, value in fields.items():
        if field == "name":
            value = value.strip()
        setattr(school, field, value)

    await db.commit()
    await db.refresh(school)

    logger.info(f"Updated school {school.id}: {', '.join(fields) or 'no fields'}")
    return await get_school(db, school.id)


async def delete_school(db: AsyncSession, school_id: UUID) -> None:
    """Soft-delete a school. Students keep their school_id but drop out of listings."""
    school = await get_active(db, School, school_id)
    if school is None:
        raise NotFoundError("School not found")

    school.soft_delete()
    await db.commit()

    logger.info(f"Soft-deleted school {school_id}")
