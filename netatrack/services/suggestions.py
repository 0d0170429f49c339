"""
Suggestion workflow

Every entity write goes through here. Admins write directly; everyone else
gets their proposed change queued as a pending Suggestion for moderation.

    pending -> approved   (suggested_data applied verbatim)
    pending -> rejected

Resolved suggestions are terminal.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.errors import AppError
from netatrack.core.monitoring import track_suggestion
from netatrack.models import ENTITY_MODELS, Suggestion
from netatrack.schemas import (
    FORM_SCHEMAS,
    EntityKind,
    EntityView,
    FormModel,
    SuggestionCreate,
    SuggestionStatus,
    SuggestionUpdate,
)
from netatrack.services.entity_fetcher import get_entity_view
from netatrack.services.entity_writer import create_entity, delete_entity, update_entity
from netatrack.services.options import invalidate_options

logger = logging.getLogger(__name__)

ResolveAction = Literal["approve", "reject"]


def validate_form(kind: Union[EntityKind, str], data: Union[dict, BaseModel]) -> FormModel:
    """Validate a payload against the kind's form; BadRequest on failure."""
    kind = EntityKind(kind)
    schema = FORM_SCHEMAS[kind]
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise AppError.bad_request(
            f"Invalid {kind.value} data",
            code="VALIDATION_ERROR",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        )


@asynccontextmanager
async def _writing(db: AsyncSession, message: str):
    """Commit on success; roll back and re-raise as AppError on failure."""
    try:
        yield
        await db.commit()
    except AppError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{message}: {e}", exc_info=True)
        raise AppError.from_db_error(e, message)


def _require_user(ctx: Optional[RequestContext]) -> RequestContext:
    if ctx is None or not ctx.is_authenticated:
        raise AppError.unauthorized()
    return ctx


def _require_admin(ctx: Optional[RequestContext]) -> RequestContext:
    ctx = _require_user(ctx)
    if not ctx.is_admin:
        raise AppError.forbidden()
    return ctx


async def _ensure_exists(db: AsyncSession, kind: str, entity_id: Any) -> None:
    model = ENTITY_MODELS[kind]
    if await db.scalar(select(model.id).where(model.id == entity_id)) is None:
        raise AppError.not_found(kind, entity_id)


def _new_suggestion(
    ctx: RequestContext,
    kind: str,
    form: FormModel,
    entity_id: Optional[UUID],
    notes: Optional[str] = None,
) -> Suggestion:
    return Suggestion(
        entity_type=kind,
        entity_id=entity_id,
        suggested_data=form.model_dump(mode="json"),
        is_new_item_suggestion=entity_id is None,
        notes=notes,
        submitter_id=ctx.user_id,
        submitter_name=ctx.name or ctx.email,
        status=SuggestionStatus.PENDING.value,
    )


# --------------- role-branching writes ---------------

async def create_or_suggest(
    db: AsyncSession,
    kind: Union[EntityKind, str],
    data: Union[dict, BaseModel],
    ctx: Optional[RequestContext],
) -> Optional[EntityView]:
    """
    Create an entity (admin) or queue a new-item suggestion (anyone else).
    Returns the created entity, or None when the write was deferred.
    """
    ctx = _require_user(ctx)
    kind = EntityKind(kind).value
    form = validate_form(kind, data)

    if ctx.is_admin:
        async with _writing(db, f"Failed to create {kind}"):
            entity_id = await create_entity(db, kind, form)
        await invalidate_options()
        return await get_entity_view(db, kind, entity_id)

    async with _writing(db, "Failed to submit suggestion"):
        suggestion = _new_suggestion(ctx, kind, form, entity_id=None)
        db.add(suggestion)
    track_suggestion(kind, SuggestionStatus.PENDING.value)
    logger.info(f"Queued new {kind} suggestion {suggestion.id}", extra={"user_id": ctx.user_id})
    return None


async def update_or_suggest(
    db: AsyncSession,
    kind: Union[EntityKind, str],
    entity_id: UUID,
    data: Union[dict, BaseModel],
    ctx: Optional[RequestContext],
) -> Optional[EntityView]:
    """Update an entity (admin) or queue an edit suggestion for it. None when deferred."""
    ctx = _require_user(ctx)
    kind = EntityKind(kind).value
    form = validate_form(kind, data)
    await _ensure_exists(db, kind, entity_id)

    if ctx.is_admin:
        async with _writing(db, f"Failed to update {kind}"):
            await update_entity(db, kind, entity_id, form)
        await invalidate_options()
        return await get_entity_view(db, kind, entity_id)

    async with _writing(db, "Failed to submit suggestion"):
        suggestion = _new_suggestion(ctx, kind, form, entity_id=entity_id)
        db.add(suggestion)
    track_suggestion(kind, SuggestionStatus.PENDING.value)
    logger.info(f"Queued edit suggestion {suggestion.id} for {kind} {entity_id}", extra={"user_id": ctx.user_id})
    return None


async def remove_entity(
    db: AsyncSession,
    kind: Union[EntityKind, str],
    entity_id: UUID,
    ctx: Optional[RequestContext],
) -> None:
    """Admin-only delete."""
    ctx = _require_admin(ctx)
    kind = EntityKind(kind).value
    async with _writing(db, f"Failed to delete {kind}"):
        await delete_entity(db, kind, entity_id)
    await invalidate_options()
    logger.info(f"{kind} {entity_id} deleted", extra={"user_id": ctx.user_id})


# --------------- explicit suggestions ---------------

async def submit_suggestion(db: AsyncSession, ctx: Optional[RequestContext], payload: SuggestionCreate) -> Suggestion:
    ctx = _require_user(ctx)
    kind = EntityKind(payload.entity_type).value
    form = validate_form(kind, payload.suggested_data)
    if not payload.is_new_item_suggestion:
        await _ensure_exists(db, kind, payload.entity_id)

    async with _writing(db, "Failed to submit suggestion"):
        suggestion = _new_suggestion(
            ctx,
            kind,
            form,
            entity_id=None if payload.is_new_item_suggestion else payload.entity_id,
            notes=payload.notes,
        )
        db.add(suggestion)
    await db.refresh(suggestion)
    track_suggestion(kind, SuggestionStatus.PENDING.value)
    return suggestion


async def _load_suggestion(db: AsyncSession, suggestion_id: UUID, for_update: bool = False) -> Suggestion:
    suggestion = await db.get(Suggestion, suggestion_id, with_for_update=for_update, populate_existing=for_update)
    if suggestion is None:
        raise AppError.not_found("suggestion", suggestion_id)
    return suggestion


async def get_suggestion(db: AsyncSession, ctx: Optional[RequestContext], suggestion_id: UUID) -> Suggestion:
    ctx = _require_user(ctx)
    suggestion = await _load_suggestion(db, suggestion_id)
    if not ctx.is_admin and suggestion.submitter_id != ctx.user_id:
        raise AppError.forbidden("You can only view your own suggestions")
    return suggestion


async def edit_suggestion(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    suggestion_id: UUID,
    payload: SuggestionUpdate,
) -> Suggestion:
    """Replace a pending suggestion's data wholesale (admin or submitter)."""
    ctx = _require_user(ctx)
    suggestion = await _load_suggestion(db, suggestion_id, for_update=True)
    if not ctx.is_admin and suggestion.submitter_id != ctx.user_id:
        raise AppError.forbidden("You can only edit your own suggestions")
    if suggestion.status != SuggestionStatus.PENDING.value:
        raise AppError.bad_request("Suggestion has already been resolved", code="SUGGESTION_RESOLVED")

    form = validate_form(suggestion.entity_type, payload.suggested_data)
    async with _writing(db, "Failed to update suggestion"):
        suggestion.suggested_data = form.model_dump(mode="json")
        if payload.notes is not None:
            suggestion.notes = payload.notes
    await db.refresh(suggestion)
    return suggestion


async def resolve_suggestion(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    suggestion_id: UUID,
    action: ResolveAction,
) -> Tuple[Suggestion, Optional[UUID]]:
    """
    Approve or reject a pending suggestion (admin only).

    Approval validates suggested_data as stored and applies it through the
    entity writer in the same transaction that marks the suggestion
    approved. Returns the suggestion and the affected entity id.
    """
    ctx = _require_admin(ctx)
    if action not in ("approve", "reject"):
        raise AppError.bad_request(f"Unknown action '{action}'")

    async with _writing(db, "Failed to resolve suggestion"):
        suggestion = await _load_suggestion(db, suggestion_id, for_update=True)
        if suggestion.status != SuggestionStatus.PENDING.value:
            raise AppError.bad_request("Suggestion has already been resolved", code="SUGGESTION_RESOLVED")

        kind = suggestion.entity_type
        entity_id = suggestion.entity_id
        if action == "approve":
            form = validate_form(kind, suggestion.suggested_data)
            if suggestion.is_new_item_suggestion:
                entity_id = await create_entity(db, kind, form)
                suggestion.entity_id = entity_id
            else:
                await update_entity(db, kind, entity_id, form)
            suggestion.status = SuggestionStatus.APPROVED.value
        else:
            suggestion.status = SuggestionStatus.REJECTED.value

        suggestion.resolved_by = ctx.user_id
        suggestion.resolved_at = datetime.now(timezone.utc)

    await db.refresh(suggestion)
    if action == "approve":
        await invalidate_options()
    track_suggestion(kind, suggestion.status)
    logger.info(f"Suggestion {suggestion_id} {suggestion.status}", extra={"user_id": ctx.user_id, "entity_id": str(entity_id)})
    return suggestion, entity_id


# --------------- listings ---------------

async def list_suggestions(
    db: AsyncSession,
    ctx: Optional[RequestContext],
    status: Optional[str] = None,
    kind: Optional[Union[EntityKind, str]] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Tuple[List[Suggestion], int]:
    """Moderation queue (admin only), newest first."""
    _require_admin(ctx)
    limit = min(max(limit or settings.ITEMS_PER_PAGE, 1), settings.MAX_PAGE_SIZE)
    page = max(page or 1, 1)

    conditions = []
    if status:
        conditions.append(Suggestion.status == SuggestionStatus(status).value)
    if kind:
        conditions.append(Suggestion.entity_type == EntityKind(kind).value)

    total = await db.scalar(select(func.count()).select_from(Suggestion).where(*conditions))
    result = await db.execute(
        select(Suggestion)
        .where(*conditions)
        .order_by(Suggestion.created_at.desc(), Suggestion.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def list_my_suggestions(db: AsyncSession, ctx: Optional[RequestContext]) -> List[Suggestion]:
    ctx = _require_user(ctx)
    result = await db.execute(
        select(Suggestion)
        .where(Suggestion.submitter_id == ctx.user_id)
        .order_by(Suggestion.created_at.desc(), Suggestion.id)
    )
    return list(result.scalars().all())
