"""Shared column mixins."""
from datetime import datetime
from sqlalchemy import Column, DateTime


class SoftDeleteMixin:
    """
    Logical deletion through a nullable timestamp.

    Rows are never physically removed. Reads go through
    app.services.soft_delete so deleted rows are filtered uniformly.
    """
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = datetime.utcnow()
