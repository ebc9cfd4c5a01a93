from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Index, text
import uuid
import enum

from app.database import Base
from app.database_types import GUID
from app.models.mixins import SoftDeleteMixin


class UserRole(str, enum.Enum):
    """Platform-wide role. Student/company-owner capabilities come from profile rows."""
    USER = "user"
    ADMIN = "admin"  # Manages schools and can act on any company's data


class User(SoftDeleteMixin, Base):
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, index=True)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    role = Column(
        SQLEnum(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.USER,
        index=True
    )

    # Magic link authentication
    magic_link_token = Column(String, nullable=True, index=True)
    magic_link_expires_at = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        # A soft-deleted account frees its email for a new sign-up
        Index(
            'uq_users_email_active',
            'email',
            unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN
