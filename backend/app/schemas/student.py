"""Student listing schemas."""
from typing import Optional
from uuid import UUID

from app.schemas.base import CamelModel


class StudentListItem(CamelModel):
    id: UUID
    first_name: str = ""
    last_name: str = ""
    school: str = ""  # School name, empty when unattached
    skills: list[str] = []
    kind: str  # apprenticeship | internship
    availability: bool = True
    description: Optional[str] = None
    apprenticeship_rhythm: Optional[str] = None
