"""
Vote ledger and featuring

cast_vote toggles a caller's up/down vote on an entity. The ledger row and
the entity's denormalized counters change in one transaction, and counters
move through single UPDATE statements (never read-modify-write), so they
keep tracking the ledger under concurrent votes.

    no vote   + up   -> upvoted    (upvotes + 1)
    upvoted   + up   -> no vote    (upvotes - 1)
    upvoted   + down -> downvoted  (upvotes - 1, downvotes + 1)

Decrements are floored at 0.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.cache import cache_delete, cache_get, cache_set, user_votes_key
from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.errors import AppError
from netatrack.core.monitoring import track_vote
from netatrack.models import ENTITY_MODELS, UserVote
from netatrack.schemas import EntityKind, VoteType

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = {
    VoteType.UP.value: "upvotes",
    VoteType.DOWN.value: "downvotes",
}

USER_VOTES_TTL = 600


@dataclass
class VoteOutcome:
    vote_type: Optional[str]
    upvotes: int
    downvotes: int


def _increment(column):
    return column + 1


def _decrement(column):
    return case((column > 0, column - 1), else_=0)


async def cast_vote(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    kind: Union[EntityKind, str],
    item_id: UUID,
    vote_type: Union[VoteType, str],
) -> VoteOutcome:
    """Apply one vote click and return the caller's resulting vote and the new counters."""
    if ctx is None or not ctx.is_authenticated:
        raise AppError.unauthorized("You must be logged in to vote")

    kind = EntityKind(kind).value
    vote_type = VoteType(vote_type).value
    model = ENTITY_MODELS[kind]

    try:
        if await db.scalar(select(model.id).where(model.id == item_id)) is None:
            raise AppError.not_found(kind, item_id)

        existing = (
            await db.execute(
                select(UserVote)
                .where(
                    UserVote.user_id == ctx.user_id,
                    UserVote.item_id == item_id,
                    UserVote.item_type == kind,
                )
                .with_for_update()
            )
        ).scalar_one_or_none()

        counters = {}
        if existing is None:
            db.add(UserVote(user_id=ctx.user_id, item_id=item_id, item_type=kind, vote_type=vote_type))
            column = COUNTER_COLUMNS[vote_type]
            counters[column] = _increment(getattr(model, column))
            new_vote, action = vote_type, "added"
        elif existing.vote_type == vote_type:
            await db.delete(existing)
            column = COUNTER_COLUMNS[vote_type]
            counters[column] = _decrement(getattr(model, column))
            new_vote, action = None, "removed"
        else:
            old_column = COUNTER_COLUMNS[existing.vote_type]
            new_column = COUNTER_COLUMNS[vote_type]
            existing.vote_type = vote_type
            counters[old_column] = _decrement(getattr(model, old_column))
            counters[new_column] = _increment(getattr(model, new_column))
            new_vote, action = vote_type, "switched"

        await db.flush()
        await db.execute(
            update(model)
            .where(model.id == item_id)
            .values(**counters)
            .execution_options(synchronize_session=False)
        )
        upvotes, downvotes = (
            await db.execute(select(model.upvotes, model.downvotes).where(model.id == item_id))
        ).one()
        await db.commit()

    except IntegrityError as e:
        # Another request inserted the first vote for this pair concurrently
        await db.rollback()
        logger.warning(f"Concurrent vote on {kind} {item_id} by {ctx.user_id}: {e}")
        raise AppError.conflict("Your vote changed in another request, please retry", code="VOTE_CONFLICT")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to record vote on {kind} {item_id}: {e}", exc_info=True)
        raise AppError.from_db_error(e, "Failed to record vote")

    await cache_delete(user_votes_key(ctx.user_id))
    track_vote(kind, action)
    logger.info(
        f"Vote {action} on {kind} {item_id}",
        extra={"user_id": ctx.user_id, "vote_type": new_vote, "request_id": ctx.request_id},
    )
    return VoteOutcome(vote_type=new_vote, upvotes=upvotes, downvotes=downvotes)


async def get_vote(db: AsyncSession, ctx: Optional[RequestContext], kind: Union[EntityKind, str], item_id: UUID) -> Optional[str]:
    """The caller's current vote on one item, or None."""
    if ctx is None or not ctx.is_authenticated:
        return None
    kind = EntityKind(kind).value
    return await db.scalar(
        select(UserVote.vote_type).where(
            UserVote.user_id == ctx.user_id,
            UserVote.item_id == item_id,
            UserVote.item_type == kind,
        )
    )


async def get_user_votes(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    kind: Optional[Union[EntityKind, str]] = None,
) -> Dict[str, str]:
    """
    The caller's ledger as {item_id: vote_type}, optionally for one kind.
    Served from Redis when warm; cast_vote drops the cached copy.
    """
    if ctx is None or not ctx.is_authenticated:
        raise AppError.unauthorized()

    key = user_votes_key(ctx.user_id)
    by_kind = await cache_get(key)
    if by_kind is None:
        rows = await db.execute(
            select(UserVote.item_type, UserVote.item_id, UserVote.vote_type).where(UserVote.user_id == ctx.user_id)
        )
        by_kind = {}
        for item_type, item_id, vote_type in rows.all():
            by_kind.setdefault(item_type, {})[str(item_id)] = vote_type
        await cache_set(key, by_kind, ttl=USER_VOTES_TTL)

    if kind is not None:
        return dict(by_kind.get(EntityKind(kind).value, {}))
    votes: Dict[str, str] = {}
    for per_kind in by_kind.values():
        votes.update(per_kind)
    return votes


async def set_featured(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    kind: Union[EntityKind, str],
    item_id: UUID,
    is_featured: bool,
) -> None:
    """Admin-only homepage featuring, capped per kind."""
    if ctx is None or not ctx.is_authenticated:
        raise AppError.unauthorized()
    if not ctx.is_admin:
        raise AppError.forbidden("Only admins can feature items")

    kind = EntityKind(kind).value
    model = ENTITY_MODELS[kind]
    try:
        obj = await db.get(model, item_id, with_for_update=True, populate_existing=True)
        if obj is None:
            raise AppError.not_found(kind, item_id)

        if is_featured and not obj.is_featured:
            limit = settings.featured_limits[kind]
            # Serialize concurrent featuring of the same kind against the cap
            featured = (
                await db.execute(select(model.id).where(model.is_featured.is_(True)).with_for_update())
            ).scalars().all()
            if len(featured) >= limit:
                raise AppError.bad_request(
                    f"Cannot feature more than {limit} {kind} items",
                    code="FEATURED_LIMIT_REACHED",
                    details={"limit": limit},
                )

        obj.is_featured = is_featured
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update featuring on {kind} {item_id}: {e}", exc_info=True)
        raise AppError.from_db_error(e, "Failed to update featured status")

    logger.info(f"{kind} {item_id} featured={is_featured}", extra={"user_id": ctx.user_id})
