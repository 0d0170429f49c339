"""
Promise endpoints
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.endpoints.entities import add_entity_routes, list_entities
from netatrack.core.config import settings
from netatrack.core.database import get_db
from netatrack.schemas import EntityKind, EntityListResponse, PromiseStatus, PromiseView

router = APIRouter()


@router.get("", response_model=EntityListResponse[PromiseView])
async def list_promises(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ITEMS_PER_PAGE, ge=1),
    search: Optional[str] = None,
    tag: Optional[str] = None,
    featured: Optional[bool] = None,
    status: Optional[PromiseStatus] = None,
    category: Optional[str] = None,
    politician: Optional[UUID] = None,
    party: Optional[UUID] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "search": search,
        "tag": tag,
        "isFeatured": featured,
        "status": status.value if status else None,
        "category": category,
        "politicianId": politician,
        "partyId": party,
    }
    return await list_entities(db, EntityKind.PROMISE, filters, page, limit, sort_by)


add_entity_routes(router, EntityKind.PROMISE)
