"""
Party endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.endpoints.entities import add_entity_routes, list_entities
from netatrack.core.config import settings
from netatrack.core.database import get_db
from netatrack.schemas import EntityKind, EntityListResponse, PartyView

router = APIRouter()


@router.get("", response_model=EntityListResponse[PartyView])
async def list_parties(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ITEMS_PER_PAGE, ge=1),
    search: Optional[str] = None,
    tag: Optional[str] = None,
    featured: Optional[bool] = None,
    ideology: Optional[str] = None,
    founding_year: Optional[int] = Query(None, alias="foundingYear"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "search": search,
        "tag": tag,
        "isFeatured": featured,
        "ideology": ideology,
        "foundingYear": founding_year,
    }
    return await list_entities(db, EntityKind.PARTY, filters, page, limit, sort_by)


add_entity_routes(router, EntityKind.PARTY)
