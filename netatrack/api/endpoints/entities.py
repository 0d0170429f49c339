"""
Shared routes for the four entity kinds

Each kind's module declares its own list endpoint (the filters differ) and
calls add_entity_routes for the by-id reads, writes and the PATCH
feature/vote operation, which behave identically across kinds.
"""
from typing import Any, Callable, Dict, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.deps import get_current_user_context, get_request_context, require_admin
from netatrack.core.config import settings
from netatrack.core.context import RequestContext
from netatrack.core.database import get_db
from netatrack.schemas import (
    FORM_SCHEMAS,
    BillView,
    EntityKind,
    EntityListResponse,
    EntityPatch,
    EntityPatchResponse,
    FeatureOperation,
    MessageResponse,
    PartyView,
    PoliticianView,
    PromiseView,
    SuggestionAccepted,
)
from netatrack.services.entity_fetcher import SortSpec, fetch_entity_data, get_entity_view
from netatrack.services.suggestions import create_or_suggest, remove_entity, update_or_suggest
from netatrack.services.votes import cast_vote, get_vote, set_featured

VIEW_MODELS = {
    EntityKind.POLITICIAN: PoliticianView,
    EntityKind.PARTY: PartyView,
    EntityKind.PROMISE: PromiseView,
    EntityKind.BILL: BillView,
}


async def list_entities(
    db: AsyncSession,
    kind: EntityKind,
    filters: Dict[str, Any],
    page: int,
    limit: int,
    sort_by: Optional[str],
) -> EntityListResponse:
    limit = min(limit, settings.MAX_PAGE_SIZE)
    result = await fetch_entity_data(
        db,
        kind,
        filters=filters,
        page=page,
        limit=limit,
        sort_by=SortSpec.parse(sort_by),
        include_relations=False,
    )
    if result.error:
        raise result.error
    return EntityListResponse[VIEW_MODELS[kind]](items=result.data, total_count=result.count, page=page, limit=limit)


def add_entity_routes(
    router: APIRouter,
    kind: EntityKind,
    create_requires_admin: bool = False,
) -> None:
    """Register GET/PUT/DELETE/PATCH on /{entity_id} and POST on the collection."""
    form_model = FORM_SCHEMAS[kind]
    view_model = VIEW_MODELS[kind]
    label = kind.value.capitalize()
    create_guard: Callable = require_admin if create_requires_admin else get_current_user_context

    @router.get("/{entity_id}", response_model=view_model, name=f"get_{kind.value}")
    async def get_entity(entity_id: UUID, db: AsyncSession = Depends(get_db)):
        return await get_entity_view(db, kind, entity_id)

    @router.post(
        "",
        response_model=Union[view_model, SuggestionAccepted],
        status_code=status.HTTP_201_CREATED,
        name=f"create_{kind.value}",
    )
    async def create_entity(
        payload: form_model,
        response: Response,
        ctx: RequestContext = Depends(create_guard),
        db: AsyncSession = Depends(get_db),
    ):
        """Admins create directly (201); other callers get a pending suggestion (202)."""
        view = await create_or_suggest(db, kind, payload, ctx)
        if view is None:
            response.status_code = status.HTTP_202_ACCEPTED
            return SuggestionAccepted()
        return view

    @router.put(
        "/{entity_id}",
        response_model=Union[view_model, SuggestionAccepted],
        name=f"update_{kind.value}",
    )
    async def update_entity(
        entity_id: UUID,
        payload: form_model,
        response: Response,
        ctx: RequestContext = Depends(get_current_user_context),
        db: AsyncSession = Depends(get_db),
    ):
        """Full replacement for admins; an edit suggestion (202) for anyone else."""
        view = await update_or_suggest(db, kind, entity_id, payload, ctx)
        if view is None:
            response.status_code = status.HTTP_202_ACCEPTED
            return SuggestionAccepted()
        return view

    @router.delete("/{entity_id}", response_model=MessageResponse, name=f"delete_{kind.value}")
    async def delete_entity(
        entity_id: UUID,
        ctx: RequestContext = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
    ):
        await remove_entity(db, kind, entity_id, ctx)
        return MessageResponse(message=f"{label} deleted successfully")

    @router.patch("/{entity_id}", response_model=EntityPatchResponse[view_model], name=f"patch_{kind.value}")
    async def patch_entity(
        entity_id: UUID,
        operation: EntityPatch = Body(..., discriminator="op"),
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db),
    ):
        """
        {"op": "feature", "isFeatured": bool} (admin) or
        {"op": "vote", "voteType": "up" | "down"} (signed in).
        """
        if isinstance(operation, FeatureOperation):
            await set_featured(db, ctx, kind, entity_id, operation.is_featured)
            user_vote = await get_vote(db, ctx, kind, entity_id)
        else:
            outcome = await cast_vote(db, ctx, kind, entity_id, operation.vote_type)
            user_vote = outcome.vote_type

        item = await get_entity_view(db, kind, entity_id)
        return EntityPatchResponse[view_model](item=item, user_vote=user_vote)
