"""Student directory business logic."""
from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.school import School
from app.models.student import Student
from app.models.user import User
from app.schemas.student import StudentListItem
from app.services.soft_delete import not_deleted

# Skills mentioning one of these mark the profile as looking for an apprenticeship
APPRENTICESHIP_KEYWORDS = ("apprenticeship", "apprentice", "alternance", "alternant", "apprentissage", "apprenti")


def classify_profile(skills: list[str]) -> str:
    """apprenticeship if any skill mentions an apprenticeship keyword, internship otherwise."""
    for skill in skills:
        lowered = skill.lower()
        if any(keyword in lowered for keyword in APPRENTICESHIP_KEYWORDS):
            return "apprenticeship"
    return "internship"


async def list_students(db: AsyncSession, available: Optional[bool] = None) -> list[StudentListItem]:
    """
    Public student directory.

    Students of a deleted school are hidden along with deleted students and users.
    Students without a school are listed.
    """
    query = (
        select(Student, User, School)
        .join(User, User.id == Student.user_id)
        .outerjoin(School, School.id == Student.school_id)
        .where(
            not_deleted(Student, User),
            or_(Student.school_id.is_(None), not_deleted(School))
        )
    )
    if available is not None:
        query = query.where(Student.availability == available)

    result = await db.execute(query.order_by(User.last_name.asc(), User.first_name.asc()))

    students = []
    for student, user, school in result.all():
        skills = student.skill_list()
        students.append(StudentListItem(
            id=student.id,
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            school=school.name if school else "",
            skills=skills,
            kind=classify_profile(skills),
            availability=student.availability,
            description=student.description,
            apprenticeship_rhythm=student.apprenticeship_rhythm,
        ))
    return students
