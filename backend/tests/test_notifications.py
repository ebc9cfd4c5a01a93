"""
Tests for owner notifications on new applications.

Validates:
- One delivery attempt per active company owner
- Failures and timeouts are isolated per recipient and never fail the request
- Sends run concurrently
- Outbox rows record each outcome and are retried by the worker
- Rows a sender has claimed are not sent twice
"""
import asyncio
import pytest
from datetime import datetime, timedelta
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import Job, JobRequest, NotificationOutbox, NotificationStatus, Student, User
from app.services.email import email_service, render_job_application_email
from app.services.notifications import (
    dispatch_notifications,
    flush_pending_notifications,
    get_company_owner_emails,
)
from app.worker import flush_once


async def outbox_rows(db: AsyncSession) -> list[NotificationOutbox]:
    result = await db.execute(
        select(NotificationOutbox)
        .order_by(NotificationOutbox.recipient_email)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def apply(client, job: Job, **fields):
    return await client.post("/api/students/job-requests", json={"jobId": str(job.id), **fields})


# =============================================================================
# Rendering
# =============================================================================

def test_render_escapes_user_text():
    rendered = render_job_application_email(
        company_name="Acme & Co",
        job_title="Backend Developer",
        student_name="Sam <b>Student</b>",
        student_email="sam@ecole-test.fr",
        subject="Motivation",
        message="<script>alert(1)</script>\nSecond line",
        application_url="http://localhost:3000/company/applications/42",
    )

    assert rendered.subject == "New application for: Backend Developer"
    assert "<script>" not in rendered.html_content
    assert "&lt;script&gt;" in rendered.html_content
    assert "Acme &amp; Co" in rendered.html_content
    assert "Sam &lt;b&gt;Student&lt;/b&gt;" in rendered.html_content
    assert "<br>Second line" in rendered.html_content
    assert "http://localhost:3000/company/applications/42" in rendered.text_content


# =============================================================================
# Recipients
# =============================================================================

@pytest.mark.asyncio
async def test_owner_emails_skip_deleted_users(db: AsyncSession, company, owners: list[User]):
    owners[1].soft_delete()
    await db.commit()

    assert await get_company_owner_emails(db, company.id) == ["owner1@acme.com"]


@pytest.mark.asyncio
async def test_deleted_owner_is_not_notified(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    sent_emails: list[dict]
):
    owners[0].soft_delete()
    await db.commit()

    response = await apply(student_client, job)

    assert response.status_code == 201
    assert response.json()["notifications"] == {"sent": 1, "failed": 0}
    assert [email["to"] for email in sent_emails] == ["owner2@acme.com"]


@pytest.mark.asyncio
async def test_company_without_owners(student_client, db: AsyncSession, job: Job, sent_emails: list[dict]):
    response = await apply(student_client, job)

    assert response.status_code == 201
    assert response.json()["notifications"] == {"sent": 0, "failed": 0}
    assert sent_emails == []
    assert await outbox_rows(db) == []


@pytest.mark.asyncio
async def test_outbox_rows_marked_sent(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    sent_emails: list[dict]
):
    response = await apply(student_client, job, subject="Motivation")
    job_request_id = response.json()["id"]

    rows = await outbox_rows(db)
    assert [row.recipient_email for row in rows] == ["owner1@acme.com", "owner2@acme.com"]
    for row in rows:
        assert str(row.job_request_id) == job_request_id
        assert row.status == NotificationStatus.SENT.value
        assert row.attempt_count == 1
        assert row.sent_at is not None
        assert row.last_error is None


# =============================================================================
# Failure isolation
# =============================================================================

@pytest.mark.asyncio
async def test_all_dispatches_failing_still_creates_application(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    monkeypatch
):
    attempts = []

    async def rejecting_send(to_email, subject, html_content, text_content=None):
        attempts.append(to_email)
        return False

    monkeypatch.setattr(email_service, "send_email", rejecting_send)

    response = await apply(student_client, job)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["notifications"] == {"sent": 0, "failed": 2}
    assert sorted(attempts) == ["owner1@acme.com", "owner2@acme.com"]

    job_request = await db.get(JobRequest, data["id"])
    assert job_request is not None

    for row in await outbox_rows(db):
        assert row.status == NotificationStatus.FAILED.value
        assert row.last_error == "Rejected by mail provider"


@pytest.mark.asyncio
async def test_one_recipient_raising_does_not_affect_others(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    monkeypatch
):
    async def flaky_send(to_email, subject, html_content, text_content=None):
        if to_email == "owner1@acme.com":
            raise ConnectionError("provider unreachable")
        return True

    monkeypatch.setattr(email_service, "send_email", flaky_send)

    response = await apply(student_client, job)

    assert response.status_code == 201
    assert response.json()["notifications"] == {"sent": 1, "failed": 1}

    failed, sent = await outbox_rows(db)
    assert failed.status == NotificationStatus.FAILED.value
    assert failed.last_error == "provider unreachable"
    assert sent.status == NotificationStatus.SENT.value


@pytest.mark.asyncio
async def test_slow_recipient_times_out(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    monkeypatch
):
    monkeypatch.setattr(settings, "mail_dispatch_timeout_seconds", 0.05)

    async def slow_send(to_email, subject, html_content, text_content=None):
        if to_email == "owner2@acme.com":
            await asyncio.sleep(5)
        return True

    monkeypatch.setattr(email_service, "send_email", slow_send)

    response = await apply(student_client, job)

    assert response.status_code == 201
    assert response.json()["notifications"] == {"sent": 1, "failed": 1}

    sent, timed_out = await outbox_rows(db)
    assert sent.status == NotificationStatus.SENT.value
    assert timed_out.status == NotificationStatus.FAILED.value
    assert timed_out.last_error.startswith("Timed out")


@pytest.mark.asyncio
async def test_sends_run_concurrently(
    student_client,
    job: Job,
    owners: list[User],
    monkeypatch
):
    """Each send waits for the other to start; sequential delivery would time out."""
    monkeypatch.setattr(settings, "mail_dispatch_timeout_seconds", 2.0)
    started = {email: asyncio.Event() for email in ("owner1@acme.com", "owner2@acme.com")}

    async def rendezvous_send(to_email, subject, html_content, text_content=None):
        started[to_email].set()
        other = next(email for email in started if email != to_email)
        await started[other].wait()
        return True

    monkeypatch.setattr(email_service, "send_email", rendezvous_send)

    response = await apply(student_client, job)

    assert response.json()["notifications"] == {"sent": 2, "failed": 0}


# =============================================================================
# Retry worker
# =============================================================================

@pytest.mark.asyncio
async def test_worker_retries_failed_notifications(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    monkeypatch
):
    async def rejecting_send(to_email, subject, html_content, text_content=None):
        return False

    monkeypatch.setattr(email_service, "send_email", rejecting_send)
    await apply(student_client, job)

    delivered = []

    async def working_send(to_email, subject, html_content, text_content=None):
        delivered.append(to_email)
        return True

    monkeypatch.setattr(email_service, "send_email", working_send)

    summary = await flush_once()

    assert summary.sent == 2
    assert summary.failed == 0
    assert sorted(delivered) == ["owner1@acme.com", "owner2@acme.com"]
    for row in await outbox_rows(db):
        assert row.status == NotificationStatus.SENT.value
        assert row.attempt_count == 2

    # Nothing left to retry
    summary = await flush_once()
    assert summary.sent == 0
    assert summary.failed == 0


@pytest.mark.asyncio
async def test_worker_stops_at_max_attempts(db: AsyncSession, student: Student, job: Job, monkeypatch):
    job_request = JobRequest(student_id=student.id, job_id=job.id)
    db.add(job_request)
    await db.commit()

    exhausted = NotificationOutbox(
        job_request_id=job_request.id,
        recipient_email="gone@acme.com",
        subject="New application for: Backend Developer",
        html_content="<p>hi</p>",
        status=NotificationStatus.FAILED.value,
        attempt_count=settings.notification_max_attempts,
    )
    pending = NotificationOutbox(
        job_request_id=job_request.id,
        recipient_email="owner1@acme.com",
        subject="New application for: Backend Developer",
        html_content="<p>hi</p>",
    )
    db.add_all([exhausted, pending])
    await db.commit()

    delivered = []

    async def working_send(to_email, subject, html_content, text_content=None):
        delivered.append(to_email)
        return True

    monkeypatch.setattr(email_service, "send_email", working_send)

    summary = await flush_pending_notifications(db)

    assert summary.sent == 1
    assert delivered == ["owner1@acme.com"]
    await db.refresh(exhausted)
    assert exhausted.status == NotificationStatus.FAILED.value
    assert exhausted.attempt_count == settings.notification_max_attempts



def outbox_row(job_request: JobRequest, recipient: str, **fields) -> NotificationOutbox:
    return NotificationOutbox(
        job_request_id=job_request.id,
        recipient_email=recipient,
        subject="New application for: Backend Developer",
        html_content="<p>hi</p>",
        **fields,
    )


@pytest.mark.asyncio
async def test_worker_skips_rows_a_request_is_still_sending(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    monkeypatch
):
    """A worker run during the request's own delivery must not email the owners again."""
    monkeypatch.setattr(settings, "mail_dispatch_timeout_seconds", 2.0)
    delivered = []
    both_started = asyncio.Event()
    release = asyncio.Event()

    async def slow_send(to_email, subject, html_content, text_content=None):
        delivered.append(to_email)
        if len(delivered) == 2:
            both_started.set()
        await release.wait()
        return True

    monkeypatch.setattr(email_service, "send_email", slow_send)

    request = asyncio.create_task(apply(student_client, job))
    await asyncio.wait_for(both_started.wait(), timeout=5)

    summary = await flush_once()
    release.set()
    response = await request

    assert summary.sent == 0
    assert summary.failed == 0
    assert response.json()["notifications"] == {"sent": 2, "failed": 0}
    assert sorted(delivered) == ["owner1@acme.com", "owner2@acme.com"]
    for row in await outbox_rows(db):
        assert row.status == NotificationStatus.SENT.value
        assert row.attempt_count == 1


@pytest.mark.asyncio
async def test_worker_reclaims_abandoned_sends(db: AsyncSession, student: Student, job: Job, sent_emails):
    job_request = JobRequest(student_id=student.id, job_id=job.id)
    db.add(job_request)
    await db.commit()

    stale = datetime.utcnow() - timedelta(seconds=settings.notification_claim_timeout_seconds + 60)
    abandoned = outbox_row(
        job_request, "owner1@acme.com",
        status=NotificationStatus.SENDING.value, claimed_at=stale,
    )
    in_flight = outbox_row(
        job_request, "owner2@acme.com",
        status=NotificationStatus.SENDING.value, claimed_at=datetime.utcnow(),
    )
    db.add_all([abandoned, in_flight])
    await db.commit()

    summary = await flush_pending_notifications(db)

    assert summary.sent == 1
    assert [email["to"] for email in sent_emails] == ["owner1@acme.com"]
    owner1_row, owner2_row = await outbox_rows(db)
    assert owner1_row.status == NotificationStatus.SENT.value
    assert owner2_row.status == NotificationStatus.SENDING.value
    assert owner2_row.attempt_count == 0


@pytest.mark.asyncio
async def test_failed_outcome_write_returns_summary(db: AsyncSession, student: Student, job: Job, sent_emails,
                                                    monkeypatch):
    """If the outcome cannot be saved, the caller still gets the summary and the row keeps its claim."""
    job_request = JobRequest(student_id=student.id, job_id=job.id)
    db.add(job_request)
    await db.commit()
    row = outbox_row(
        job_request, "owner1@acme.com",
        status=NotificationStatus.SENDING.value, claimed_at=datetime.utcnow(),
    )
    db.add(row)
    await db.commit()

    async def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)

    summary = await dispatch_notifications(db, [row])

    assert summary.sent == 1
    assert summary.failed == 0
    assert len(sent_emails) == 1
    await db.refresh(row)
    assert row.status == NotificationStatus.SENDING.value
    assert row.attempt_count == 0


@pytest.mark.asyncio
async def test_application_survives_failed_outcome_write(
    student_client,
    db: AsyncSession,
    job: Job,
    owners: list[User],
    sent_emails,
    monkeypatch
):
    original_commit = AsyncSession.commit

    async def commit_unless_recording_outcome(self):
        if any(isinstance(obj, NotificationOutbox) and obj.attempt_count for obj in self.dirty):
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        return await original_commit(self)

    monkeypatch.setattr(AsyncSession, "commit", commit_unless_recording_outcome)

    response = await apply(student_client, job)

    assert response.status_code == 201
    assert response.json()["status"] == "PENDING"
    assert response.json()["notifications"] == {"sent": 2, "failed": 0}
    for row in await outbox_rows(db):
        assert row.status == NotificationStatus.SENDING.value
        assert row.attempt_count == 0
