"""
Job application notifications.

Outbox rows are written in the same transaction as the job request
(enqueue_application_notifications). Delivery runs after commit
(dispatch_notifications): one concurrent send per recipient, each bounded
by a timeout, each failing on its own.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from sqlalchemy import select, update, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.company import Company, CompanyOwner
from app.models.job import Job
from app.models.job_request import JobRequest
from app.models.notification import NotificationOutbox, NotificationStatus
from app.models.user import User
from app.services.email import email_service, render_job_application_email
from app.services.soft_delete import not_deleted

logger = logging.getLogger(__name__)


@dataclass
class DispatchSummary:
    sent: int = 0
    failed: int = 0


def build_application_url(job_request_id) -> str:
    """Deep link to the company-side application detail view."""
    return f"{settings.get_frontend_url()}/company/applications/{job_request_id}"


async def get_company_owner_emails(db: AsyncSession, company_id) -> list[str]:
    """Emails of every active owner of a company (the notification fan-out set)."""
    result = await db.execute(
        select(User.email)
        .join(CompanyOwner, CompanyOwner.user_id == User.id)
        .where(
            CompanyOwner.company_id == company_id,
            not_deleted(User)
        )
        .order_by(User.email)
    )
    return list(dict.fromkeys(result.scalars().all()))


async def enqueue_application_notifications(
    db: AsyncSession,
    job_request: JobRequest,
    job: Job,
    company: Company,
    applicant_name: str,
    applicant_email: str,
) -> list[NotificationOutbox]:
    """
    Render the notification once and stage one outbox row per company owner.

    Does not commit: the caller commits together with the job request.
    Rows start out claimed by this request, so the worker leaves them alone
    until the claim goes stale.
    """
    recipients = await get_company_owner_emails(db, company.id)

    rendered = render_job_application_email(
        company_name=company.name,
        job_title=job.name,
        student_name=applicant_name,
        student_email=applicant_email,
        subject=job_request.subject,
        message=job_request.message,
        application_url=build_application_url(job_request.id),
    )

    notifications = []
    claimed_at = datetime.utcnow()
    for recipient in recipients:
        notification = NotificationOutbox(
            job_request_id=job_request.id,
            recipient_email=recipient,
            subject=rendered.subject,
            html_content=rendered.html_content,
            text_content=rendered.text_content,
            status=NotificationStatus.SENDING.value,
            claimed_at=claimed_at,
        )
        db.add(notification)
        notifications.append(notification)

    if not recipients:
        logger.warning(f"Company {company.id} has no owners to notify for job request {job_request.id}")

    return notifications


async def _deliver(notification: NotificationOutbox) -> Optional[str]:
    """
    Send one outbox message. Returns None on success, an error description otherwise.

    Never raises: a failing recipient must not affect the others.
    """
    try:
        delivered = await asyncio.wait_for(
            email_service.send_email(
                notification.recipient_email,
                notification.subject,
                notification.html_content,
                notification.text_content,
            ),
            timeout=settings.mail_dispatch_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Notification to {notification.recipient_email} timed out after "
            f"{settings.mail_dispatch_timeout_seconds}s"
        )
        return f"Timed out after {settings.mail_dispatch_timeout_seconds}s"
    except Exception as e:
        logger.error(f"Notification to {notification.recipient_email} failed: {str(e)}", exc_info=True)
        return str(e) or e.__class__.__name__

    if not delivered:
        logger.warning(f"Mail provider rejected notification to {notification.recipient_email}")
        return "Rejected by mail provider"
    return None


async def dispatch_notifications(
    db: AsyncSession,
    notifications: Sequence[NotificationOutbox],
) -> DispatchSummary:
    """
    Deliver outbox messages concurrently and record each outcome.

    Sends run in parallel; the session is only touched once they have all
    settled.
    """
    summary = DispatchSummary()
    if not notifications:
        return summary

    errors = await asyncio.gather(*(_deliver(n) for n in notifications))

    now = datetime.utcnow()
    for notification, error in zip(notifications, errors):
        notification.attempt_count += 1
        if error is None:
            notification.status = NotificationStatus.SENT.value
            notification.sent_at = now
            notification.last_error = None
            summary.sent += 1
        else:
            notification.status = NotificationStatus.FAILED.value
            notification.last_error = error
            summary.failed += 1

    try:
        await db.commit()
    except SQLAlchemyError as e:
        # Rows keep their claim and are picked up again once it goes stale
        await db.rollback()
        logger.error(
            f"Could not record outcome of {len(notifications)} notification(s): {str(e)}",
            exc_info=True
        )
        return summary

    logger.info(
        f"Dispatched {len(notifications)} notification(s): "
        f"{summary.sent} sent, {summary.failed} failed"
    )
    return summary


def _claimable():
    """Rows a sender may take: unclaimed or failed, or claimed long enough ago to be abandoned."""
    stale_before = datetime.utcnow() - timedelta(seconds=settings.notification_claim_timeout_seconds)
    return and_(
        NotificationOutbox.attempt_count < settings.notification_max_attempts,
        or_(
            NotificationOutbox.status.in_([
                NotificationStatus.PENDING.value,
                NotificationStatus.FAILED.value,
            ]),
            and_(
                NotificationOutbox.status == NotificationStatus.SENDING.value,
                NotificationOutbox.claimed_at < stale_before,
            ),
        ),
    )


async def flush_pending_notifications(db: AsyncSession, limit: int = 100) -> DispatchSummary:
    """
    Retry outbox rows that were never delivered.

    Picks claimable rows below the attempt ceiling, oldest first. Each row is
    claimed with a conditional UPDATE before sending, so rows a request is
    still delivering, or that another worker took first, are skipped.
    """
    result = await db.execute(
        select(NotificationOutbox.id)
        .where(_claimable())
        .order_by(NotificationOutbox.created_at.asc())
        .limit(limit)
        .with_for_update(skip_locked=True)
    )
    candidate_ids = result.scalars().all()

    claimed_ids = []
    for notification_id in candidate_ids:
        claim = await db.execute(
            update(NotificationOutbox)
            .where(NotificationOutbox.id == notification_id, _claimable())
            .values(status=NotificationStatus.SENDING.value, claimed_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if claim.rowcount == 1:
            claimed_ids.append(notification_id)
    await db.commit()

    if not claimed_ids:
        return DispatchSummary()

    result = await db.execute(
        select(NotificationOutbox)
        .where(NotificationOutbox.id.in_(claimed_ids))
        .order_by(NotificationOutbox.created_at.asc())
        .execution_options(populate_existing=True)
    )
    notifications = result.scalars().all()

    skipped = len(candidate_ids) - len(claimed_ids)
    if skipped:
        logger.info(f"{skipped} notification(s) were claimed by another sender")
    logger.info(f"Retrying {len(notifications)} undelivered notification(s)")
    return await dispatch_notifications(db, notifications)
