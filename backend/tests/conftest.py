"""
Pytest fixtures for testing.
"""
import os

# Settings require a database URL and secret key at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EMAIL_MODE", "dev")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import app.database
from app.database import Base
# Import ALL models so Base.metadata knows about all tables
from app.models import (
    AuthorizedSchoolDomain,
    Company,
    CompanyOwner,
    Job,
    School,
    Student,
    User,
    UserRole,
)
from app.services.email import email_service
from app.services.security import create_access_token

# Now import app (after we can override database)
from app.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # Use StaticPool to keep single connection alive and reuse it
    # This ensures all sessions see the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Replace the app's engine and sessionmaker so get_db() and the worker
    # use sessions connected to the DB with tables
    original_engine = app.database.engine
    original_sessionmaker = app.database.AsyncSessionLocal

    app.database.engine = test_engine
    app.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    session = async_session()

    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            print(f"Warning: Failed to close session: {e}")

        try:
            async with test_engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except Exception as e:
            print(f"Warning: Failed to drop tables: {e}")

        try:
            await test_engine.dispose()
        except Exception as e:
            print(f"Warning: Failed to dispose engine: {e}")

        app.database.engine = original_engine
        app.database.AsyncSessionLocal = original_sessionmaker


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Unauthenticated HTTP client.

    The db fixture already replaced app.database.engine with test engine,
    so all endpoints will automatically use the test database.
    """
    transport = ASGITransport(app=fastapi_app)

    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=True
    ) as client:
        yield client


@pytest_asyncio.fixture
async def client_for(db: AsyncSession) -> AsyncGenerator[Callable[[User], AsyncClient], None]:
    """
    Factory for clients authenticated as a given user via the auth_token cookie.

    Each call returns its own client so several roles can act in one test.
    """
    clients = []

    def make(user: User) -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=fastapi_app),
            base_url="http://test",
            follow_redirects=True,
        )
        client.cookies.set("auth_token", create_access_token(user.id))
        clients.append(client)
        return client

    yield make

    for client in clients:
        await client.aclose()


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict]:
    """Replace mail delivery with a recorder that always succeeds."""
    sent = []

    async def fake_send_email(to_email, subject, html_content, text_content=None):
        sent.append({
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content,
        })
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


async def create_user(db: AsyncSession, email: str, first_name: str = None, last_name: str = None,
                      role: UserRole = UserRole.USER) -> User:
    user = User(email=email, first_name=first_name, last_name=last_name, role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def school_domain(db: AsyncSession) -> AuthorizedSchoolDomain:
    domain = AuthorizedSchoolDomain(domain="ecole-test.fr")
    db.add(domain)
    await db.commit()
    await db.refresh(domain)
    return domain


@pytest_asyncio.fixture
async def school(db: AsyncSession, school_domain: AuthorizedSchoolDomain) -> School:
    school = School(name="Ecole Test", domain_id=school_domain.id, logo="https://cdn.example.com/ecole.png")
    db.add(school)
    await db.commit()
    await db.refresh(school)
    return school


@pytest_asyncio.fixture
async def company(db: AsyncSession) -> Company:
    company = Company(name="Acme Corp")
    db.add(company)
    await db.commit()
    await db.refresh(company)
    return company


@pytest_asyncio.fixture
async def owners(db: AsyncSession, company: Company) -> list[User]:
    """Two owners of `company`."""
    owner_one = await create_user(db, "owner1@acme.com", "Olivia", "Owner")
    owner_two = await create_user(db, "owner2@acme.com", "Oscar", "Owner")
    for owner in (owner_one, owner_two):
        db.add(CompanyOwner(user_id=owner.id, company_id=company.id))
    await db.commit()
    return [owner_one, owner_two]


@pytest_asyncio.fixture
async def owner(owners: list[User]) -> User:
    return owners[0]


@pytest_asyncio.fixture
async def student_user(db: AsyncSession) -> User:
    return await create_user(db, "sam.student@ecole-test.fr", "Sam", "Student")


@pytest_asyncio.fixture
async def student(db: AsyncSession, student_user: User, school: School) -> Student:
    student = Student(
        user_id=student_user.id,
        school_id=school.id,
        student_email=student_user.email,
        skills="Python, SQL, Alternance",
        apprenticeship_rhythm="3 weeks company / 1 week school",
        availability=True,
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


@pytest_asyncio.fixture
async def job(db: AsyncSession, company: Company) -> Job:
    job = Job(
        company_id=company.id,
        name="Backend Developer",
        description="Build APIs",
        skills="Python, FastAPI",
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await create_user(db, "admin@studylink.com", "Ada", "Admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def outsider(db: AsyncSession) -> User:
    """Authenticated user with neither a student profile nor a company."""
    return await create_user(db, "visitor@example.com", "Vic", "Visitor")


@pytest_asyncio.fixture
async def student_client(client_for, student: Student, student_user: User) -> AsyncClient:
    return client_for(student_user)


@pytest_asyncio.fixture
async def owner_client(client_for, owner: User) -> AsyncClient:
    return client_for(owner)


@pytest_asyncio.fixture
async def admin_client(client_for, admin_user: User) -> AsyncClient:
    return client_for(admin_user)
