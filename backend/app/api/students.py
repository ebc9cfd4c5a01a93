"""Student directory endpoint."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.student import StudentListItem
from app.services.students import list_students

router = APIRouter()


@router.get("", response_model=list[StudentListItem])
async def get_students(
    available: Optional[bool] = Query(None, description="Only students with this availability"),
    db: AsyncSession = Depends(get_db)
):
    """Browse students. Students of deleted schools are not listed."""
    return await list_students(db, available=available)
