"""
State machine for job request statuses.
ALL status changes must go through this module.
"""
import logging
from datetime import datetime
from typing import Dict, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.job_request import JobRequest, JobRequestStatus

# Configure logger
logger = logging.getLogger(__name__)


# Allowed transitions when enforcement is enabled.
# Re-setting the current status is always a no-op move.
ALLOWED_TRANSITIONS: Dict[JobRequestStatus, list[JobRequestStatus]] = {
    JobRequestStatus.PENDING: [
        JobRequestStatus.PENDING,
        JobRequestStatus.ACCEPTED,
        JobRequestStatus.REJECTED,
    ],
    JobRequestStatus.ACCEPTED: [JobRequestStatus.ACCEPTED],  # Terminal state
    JobRequestStatus.REJECTED: [JobRequestStatus.REJECTED],  # Terminal state
}


class InvalidStatusError(ValueError):
    """Raised when a status value is outside the closed enumeration"""
    pass


class InvalidTransitionError(Exception):
    """Raised when an invalid status transition is attempted"""
    pass


def parse_status(value: Union[str, JobRequestStatus]) -> JobRequestStatus:
    """Coerce a raw value into a JobRequestStatus."""
    if isinstance(value, JobRequestStatus):
        return value
    try:
        return JobRequestStatus(value)
    except ValueError:
        raise InvalidStatusError(
            f"Invalid status {value!r}, expected one of "
            f"{', '.join(s.value for s in JobRequestStatus)}"
        )


def can_transition(from_status: JobRequestStatus, to_status: JobRequestStatus) -> bool:
    """Check if a transition is allowed without modifying the database"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


async def transition_job_request(
    db: AsyncSession,
    job_request: JobRequest,
    to_status: Union[str, JobRequestStatus],
    enforce: Optional[bool] = None,
) -> JobRequest:
    """
    Move a job request to a new status and persist it.

    Args:
        db: Database session
        job_request: The (already authorized) job request to update
        to_status: Target status
        enforce: Apply ALLOWED_TRANSITIONS. Defaults to settings.enforce_status_transitions.

    Returns:
        Updated JobRequest with a refreshed updated_at

    Raises:
        InvalidStatusError: If to_status is not an enumerated status
        InvalidTransitionError: If enforcement is on and the move is not allowed
    """
    target = parse_status(to_status)
    current = parse_status(job_request.status)

    if enforce is None:
        enforce = settings.enforce_status_transitions

    if enforce and not can_transition(current, target):
        raise InvalidTransitionError(
            f"Invalid transition from {current.value} to {target.value}"
        )

    job_request.status = target.value
    job_request.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(job_request)

    logger.info(
        f"Job request status transition: {current.value} → {target.value}",
        extra={
            "job_request_id": str(job_request.id),
            "from_status": current.value,
            "to_status": target.value,
        }
    )

    return job_request
