from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index
import uuid

from app.database import Base
from app.database_types import GUID


class NotificationStatus(str, Enum):
    PENDING = "pending"  # Waiting for the worker, not yet claimed
    SENDING = "sending"  # Claimed by a sender; reclaimable once claimed_at is stale
    SENT = "sent"
    FAILED = "failed"    # Retried by the worker until max attempts


class NotificationOutbox(Base):
    """
    Outgoing email written in the same transaction as the job request.

    Delivery happens after commit, so mail-provider failures never touch
    the application record.
    """
    __tablename__ = "notification_outbox"

    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    job_request_id = Column(GUID, ForeignKey("job_requests.id"), nullable=False, index=True)

    recipient_email = Column(String, nullable=False)
    subject = Column(String(255), nullable=False)
    html_content = Column(Text, nullable=False)
    text_content = Column(Text, nullable=True)

    status = Column(String, nullable=False, default=NotificationStatus.PENDING.value)
    attempt_count = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    claimed_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_outbox_status', 'status', 'created_at'),
    )
