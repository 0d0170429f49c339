"""
Tag and option resolvers

Small read-only lookups that feed filter dropdowns and form selects.
Results are cached in Redis for a few minutes and invalidated on writes.
"""
import logging
from typing import Awaitable, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.cache import cache_delete_pattern, cache_get, cache_set, options_key
from netatrack.models import Bill, EntityTag, Party, Politician, Promise, Tag
from netatrack.schemas import NEPAL_PROVINCES, EntityKind, PartyOption, PoliticianOption, split_delimited

logger = logging.getLogger(__name__)

OPTIONS_TTL = 300


async def _cached(name: str, loader: Callable[[], Awaitable[list]]) -> list:
    key = options_key(name)
    cached = await cache_get(key)
    if cached is not None:
        return cached
    value = await loader()
    await cache_set(key, value, ttl=OPTIONS_TTL)
    return value


def _sorted_unique(values) -> List[str]:
    return sorted(split_delimited([v for v in values if v]), key=str.lower)


async def get_existing_tags(db: AsyncSession, kind: EntityKind) -> List[str]:
    """Names of tags already attached to at least one entity of this kind."""
    kind = EntityKind(kind).value

    async def load():
        stmt = (
            select(Tag.name)
            .join(EntityTag, EntityTag.tag_id == Tag.id)
            .where(EntityTag.entity_type == kind)
            .distinct()
        )
        return _sorted_unique((await db.execute(stmt)).scalars().all())

    return await _cached(f"tags:{kind}", load)


async def get_party_options(db: AsyncSession) -> List[PartyOption]:
    async def load():
        rows = await db.execute(select(Party.id, Party.name, Party.short_name, Party.logo_url).order_by(Party.name))
        return [
            PartyOption(id=str(r.id), name=r.name, short_name=r.short_name, logo_url=r.logo_url).model_dump()
            for r in rows
        ]

    return [PartyOption.model_validate(o) for o in await _cached("parties", load)]


async def get_politician_options(db: AsyncSession) -> List[PoliticianOption]:
    async def load():
        rows = await db.execute(select(Politician.id, Politician.name, Politician.image_url).order_by(Politician.name))
        return [PoliticianOption(id=str(r.id), name=r.name, image_url=r.image_url).model_dump() for r in rows]

    return [PoliticianOption.model_validate(o) for o in await _cached("politicians", load)]


async def get_bill_ministries(db: AsyncSession) -> List[str]:
    async def load():
        rows = await db.execute(select(Bill.ministry).where(Bill.ministry.is_not(None)).distinct())
        return _sorted_unique(rows.scalars().all())

    return await _cached("ministries", load)


async def get_promise_categories(db: AsyncSession) -> List[str]:
    async def load():
        rows = await db.execute(select(Promise.category).where(Promise.category.is_not(None)).distinct())
        return _sorted_unique(rows.scalars().all())

    return await _cached("categories", load)


async def get_party_ideologies(db: AsyncSession) -> List[str]:
    """Every distinct ideology across parties, split out of the delimited column."""
    async def load():
        rows = await db.execute(select(Party.ideology).where(Party.ideology.is_not(None)))
        values = []
        for ideology in rows.scalars().all():
            values.extend(split_delimited(ideology))
        return _sorted_unique(values)

    return await _cached("ideologies", load)


def get_provinces() -> List[str]:
    return list(NEPAL_PROVINCES)


async def invalidate_options() -> None:
    await cache_delete_pattern(options_key("*"))
