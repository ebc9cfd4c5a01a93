"""
Authentication endpoints for magic link login.

Flow:
- POST /request-magic-link creates the user if needed and emails a one-time link
- POST /verify-token consumes the token and sets the httpOnly auth_token cookie
- Every other endpoint resolves the caller from that cookie

The cookie holds a signed JWT whose subject is the user id. The resolved
Identity is passed explicitly into service functions.
"""
import logging
from datetime import datetime, timedelta
from uuid import uuid4

from fastapi import APIRouter, Depends, Request, Response, Cookie
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.errors import ForbiddenError, UnauthenticatedError
from app.models.user import User, UserRole
from app.config import settings
from app.schemas.auth import (
    MagicLinkRequest,
    MagicLinkResponse,
    VerifyTokenRequest,
    IdentityResponse
)
from app.services.email import email_service
from app.services.identity import Identity, resolve_identity
from app.services.security import create_access_token, decode_access_token
from app.services.soft_delete import not_deleted

logger = logging.getLogger(__name__)
router = APIRouter()

AUTH_COOKIE = "auth_token"
AUTH_COOKIE_MAX_AGE = 86400 * 30  # 30 days


def build_identity_response(identity: Identity) -> IdentityResponse:
    return IdentityResponse(
        user_id=identity.user_id,
        email=identity.email,
        full_name=identity.full_name or None,
        is_admin=identity.is_admin,
        is_student=identity.is_student,
        student_id=identity.student_id,
        company_ids=sorted(identity.company_ids, key=str),
    )


# Authentication Dependencies
async def get_current_user(
    auth_token: str = Cookie(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user from httpOnly cookie.

    Raises:
        UnauthenticatedError: If the cookie is missing, not signed by us, expired,
            or does not match an active user
    """
    if not auth_token:
        raise UnauthenticatedError("Unauthorized")

    user_id = decode_access_token(auth_token)

    result = await db.execute(
        select(User).where(User.id == user_id, not_deleted(User))
    )
    user = result.scalar_one_or_none()

    if not user:
        raise UnauthenticatedError("Invalid token. User not found.")

    return user


async def get_current_identity(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Identity:
    """Dependency resolving the caller's Identity (student / company owner / admin flags)."""
    return await resolve_identity(db, current_user)


async def require_admin(
    identity: Identity = Depends(get_current_identity)
) -> Identity:
    """
    Dependency to require admin role.

    Raises:
        ForbiddenError: If user is not an admin
    """
    if not identity.is_admin:
        logger.warning(f"User {identity.email} attempted to access admin endpoint")
        raise ForbiddenError("Admin access required.")

    return identity


def get_client_ip(request: Request) -> str:
    """Client IP, honouring X-Forwarded-For from proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# Endpoints
@router.post("/request-magic-link", response_model=MagicLinkResponse)
async def request_magic_link(
    request: MagicLinkRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Request a magic link for passwordless login.

    In dev mode the email is written to the log; in prod mode it is sent.
    """
    result = await db.execute(
        select(User).where(User.email == request.email, not_deleted(User))
    )
    user = result.scalar_one_or_none()

    if not user:
        user = User(email=request.email, role=UserRole.USER)
        db.add(user)

    user.magic_link_token = uuid4().hex
    user.magic_link_expires_at = datetime.utcnow() + timedelta(
        minutes=settings.magic_link_ttl_minutes
    )

    await db.commit()

    magic_link = f"{settings.get_frontend_url()}/auth/verify?token={user.magic_link_token}"
    sent = await email_service.send_magic_link_email(user.email, magic_link, user.first_name)
    if not sent:
        logger.error(f"Magic link email to {user.email} could not be delivered")

    return MagicLinkResponse(
        message="Magic link sent! Check your email (or console in dev mode).",
        email=user.email
    )


@router.post("/verify-token", response_model=IdentityResponse)
async def verify_token(
    verify_request: VerifyTokenRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Verify magic link token and authenticate user.

    Tokens are single use: they are cleared on success and on expiry.
    """
    result = await db.execute(
        select(User).where(
            User.magic_link_token == verify_request.token,
            not_deleted(User)
        )
    )
    user = result.scalar_one_or_none()

    if not user:
        logger.warning(f"Invalid token attempt from IP: {get_client_ip(request)}")
        raise UnauthenticatedError("Invalid token. Please request a new magic link.")

    if user.magic_link_expires_at is None or user.magic_link_expires_at < datetime.utcnow():
        user.magic_link_token = None
        user.magic_link_expires_at = None
        await db.commit()
        raise UnauthenticatedError("Token expired. Please request a new magic link.")

    user.magic_link_token = None  # One-time use
    user.magic_link_expires_at = None
    user.last_login_at = datetime.utcnow()
    await db.commit()

    logger.info(f"Successful login: {user.email} from IP: {get_client_ip(request)}")

    response.set_cookie(
        key=AUTH_COOKIE,
        value=create_access_token(user.id),
        httponly=True,
        samesite="lax",
        max_age=AUTH_COOKIE_MAX_AGE,
        secure=settings.cookie_secure,
    )

    identity = await resolve_identity(db, user)
    return build_identity_response(identity)


@router.get("/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(get_current_identity)):
    """The authenticated caller and their role flags."""
    return build_identity_response(identity)


@router.post("/logout")
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user)
):
    """Logout user by clearing the authentication cookie."""
    response.delete_cookie(
        key=AUTH_COOKIE,
        httponly=True,
        samesite="lax"
    )

    logger.info(f"User logged out: {current_user.email}")

    return {"message": "Successfully logged out"}
