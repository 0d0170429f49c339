"""
Bill endpoints
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.endpoints.entities import add_entity_routes, list_entities
from netatrack.core.config import settings
from netatrack.core.database import get_db
from netatrack.schemas import BillStatus, BillView, EntityKind, EntityListResponse

router = APIRouter()


@router.get("", response_model=EntityListResponse[BillView])
async def list_bills(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ITEMS_PER_PAGE, ge=1),
    search: Optional[str] = None,
    tag: Optional[str] = None,
    featured: Optional[bool] = None,
    status: Optional[BillStatus] = None,
    ministry: Optional[str] = None,
    politician: Optional[UUID] = Query(None, description="Sponsoring politician id"),
    party: Optional[UUID] = Query(None, description="Sponsoring party id"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "search": search,
        "tag": tag,
        "isFeatured": featured,
        "status": status.value if status else None,
        "ministry": ministry,
        "politicianId": politician,
        "partyId": party,
    }
    return await list_entities(db, EntityKind.BILL, filters, page, limit, sort_by)


add_entity_routes(router, EntityKind.BILL)
