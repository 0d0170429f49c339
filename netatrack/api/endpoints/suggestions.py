"""
Suggestion endpoints - submission by users, moderation by admins
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.deps import get_current_user_context, require_admin
from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.database import get_db
from netatrack.schemas import (
    EntityKind,
    SuggestionCreate,
    SuggestionListResponse,
    SuggestionResolution,
    SuggestionStatus,
    SuggestionUpdate,
    SuggestionView,
)
from netatrack.services import suggestions as workflow

router = APIRouter()


@router.get("", response_model=SuggestionListResponse)
async def list_suggestions(
    status_filter: Optional[SuggestionStatus] = Query(SuggestionStatus.PENDING, alias="status"),
    entity_type: Optional[EntityKind] = Query(None, alias="entityType"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ITEMS_PER_PAGE, ge=1),
    ctx: RequestContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Moderation queue, newest first. Defaults to pending suggestions."""
    items, total = await workflow.list_suggestions(db, ctx, status_filter, entity_type, page, limit)
    return SuggestionListResponse(
        items=[SuggestionView.model_validate(s) for s in items],
        total_count=total,
    )


@router.post("", response_model=SuggestionView, status_code=status.HTTP_201_CREATED)
async def submit_suggestion(
    payload: SuggestionCreate,
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    suggestion = await workflow.submit_suggestion(db, ctx, payload)
    return SuggestionView.model_validate(suggestion)


@router.get("/mine", response_model=List[SuggestionView])
async def my_suggestions(
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    """Everything the caller has submitted, any status."""
    return [SuggestionView.model_validate(s) for s in await workflow.list_my_suggestions(db, ctx)]


@router.get("/{suggestion_id}", response_model=SuggestionView)
async def get_suggestion(
    suggestion_id: UUID,
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    return SuggestionView.model_validate(await workflow.get_suggestion(db, ctx, suggestion_id))


@router.put("/{suggestion_id}", response_model=SuggestionView)
async def edit_suggestion(
    suggestion_id: UUID,
    payload: SuggestionUpdate,
    ctx: RequestContext = Depends(get_current_user_context),
    db: AsyncSession = Depends(get_db),
):
    """Replace the proposed data of a pending suggestion."""
    suggestion = await workflow.edit_suggestion(db, ctx, suggestion_id, payload)
    return SuggestionView.model_validate(suggestion)


@router.post("/{suggestion_id}/approve", response_model=SuggestionResolution)
async def approve_suggestion(
    suggestion_id: UUID,
    ctx: RequestContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    suggestion, entity_id = await workflow.resolve_suggestion(db, ctx, suggestion_id, "approve")
    return SuggestionResolution(
        suggestion=SuggestionView.model_validate(suggestion),
        entity_id=str(entity_id) if entity_id else None,
    )


@router.post("/{suggestion_id}/reject", response_model=SuggestionResolution)
async def reject_suggestion(
    suggestion_id: UUID,
    ctx: RequestContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    suggestion, entity_id = await workflow.resolve_suggestion(db, ctx, suggestion_id, "reject")
    return SuggestionResolution(
        suggestion=SuggestionView.model_validate(suggestion),
        entity_id=str(entity_id) if entity_id else None,
    )
