"""
Current user endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.deps import get_current_user_context
from netatrack.core.context import RequestContext
from netatrack.core.database import get_db
from netatrack.core.errors import AppError
from netatrack.models import Profile
from netatrack.schemas import EntityKind, ProfileView, UserVotesResponse
from netatrack.services.votes import get_user_votes

router = APIRouter()


@router.get("", response_model=ProfileView)
async def get_me(
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    profile = await db.get(Profile, ctx.user_id)
    if profile is None:
        raise AppError.not_found("profile", ctx.user_id)
    # Admin status may come from ADMIN_EMAILS rather than the row
    return ProfileView(id=profile.id, email=profile.email, full_name=profile.full_name, is_admin=ctx.is_admin)


@router.get("/votes", response_model=UserVotesResponse)
async def my_votes(
    kind: Optional[EntityKind] = None,
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    """The caller's votes as {itemId: "up" | "down"}, optionally for one kind."""
    return UserVotesResponse(votes=await get_user_votes(db, ctx, kind))
