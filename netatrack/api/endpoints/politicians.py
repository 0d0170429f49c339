"""
Politician endpoints
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.api.endpoints.entities import add_entity_routes, list_entities
from netatrack.core.config import settings
from netatrack.core.database import get_db
from netatrack.schemas import EntityKind, EntityListResponse, PoliticianView

router = APIRouter()


@router.get("", response_model=EntityListResponse[PoliticianView])
async def list_politicians(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ITEMS_PER_PAGE, ge=1),
    search: Optional[str] = None,
    tag: Optional[str] = None,
    featured: Optional[bool] = None,
    party: Optional[UUID] = Query(None, description="Active party id"),
    province: Optional[str] = None,
    min_age: Optional[int] = Query(None, alias="minAge", ge=0),
    max_age: Optional[int] = Query(None, alias="maxAge", ge=0),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="name|age|rating|createdAt, e.g. age_desc"),
    db: AsyncSession = Depends(get_db),
):
    filters = {
        "search": search,
        "tag": tag,
        "isFeatured": featured,
        "partyId": party,
        "province": province,
        "minAge": min_age,
        "maxAge": max_age,
    }
    return await list_entities(db, EntityKind.POLITICIAN, filters, page, limit, sort_by)


# Politicians can only be added by admins; edits from anyone else become suggestions
add_entity_routes(router, EntityKind.POLITICIAN, create_requires_admin=True)
