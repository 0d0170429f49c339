"""
API Dependencies

Shared dependencies for FastAPI endpoints
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.database import get_db
from netatrack.core.errors import AppError
from netatrack.core.monitoring import set_user_context
from netatrack.core.security import verify_token
from netatrack.models import Profile

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; reads are public so a missing token is not an error
security = HTTPBearer(auto_error=False)


def _display_name(payload: dict) -> Optional[str]:
    metadata = payload.get("user_metadata") or {}
    return metadata.get("full_name") or metadata.get("name") or payload.get("name")


async def _get_or_create_profile(db: AsyncSession, payload: dict) -> Profile:
    """Mirror the token's subject into profiles on first sight."""
    user_id = str(payload["sub"])
    profile = await db.get(Profile, user_id)
    if profile is not None:
        return profile

    profile = Profile(id=user_id, email=payload.get("email"), full_name=_display_name(payload))
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        # Created by a concurrent request
        await db.rollback()
        profile = await db.get(Profile, user_id)
    else:
        logger.info(f"Created profile for {user_id}")
    return profile


async def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """
    Resolve the caller for this request.

    No token, or one that fails verification, yields an anonymous context.
    Endpoints that need a signed-in caller depend on
    get_current_user_context instead.
    """
    request_id = getattr(request.state, "request_id", None)
    if not credentials:
        return RequestContext.anonymous(request_id)

    payload = verify_token(credentials.credentials)
    if not payload:
        logger.info("Ignoring invalid bearer token", extra={"request_id": request_id})
        return RequestContext.anonymous(request_id)

    profile = await _get_or_create_profile(db, payload)
    email = profile.email or payload.get("email")
    is_admin = bool(profile.is_admin) or (email or "").lower() in settings.admin_emails

    set_user_context(profile.id, email)
    return RequestContext(
        user_id=profile.id,
        email=email,
        name=profile.full_name,
        is_admin=is_admin,
        request_id=request_id,
    )


async def get_current_user_context(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """
    Dependency for endpoints that require a signed-in caller.

    Usage:
        @router.get("/endpoint")
        async def endpoint(ctx: RequestContext = Depends(get_current_user_context)):
            ...
    """
    if not ctx.is_authenticated:
        raise AppError.unauthorized()
    return ctx


async def require_admin(
    ctx: RequestContext = Depends(get_current_user_context),
) -> RequestContext:
    if not ctx.is_admin:
        raise AppError.forbidden()
    return ctx
