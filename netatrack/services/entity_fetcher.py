"""
Entity data fetcher

One parametrized read path for politicians, parties, promises and bills:
single lookup by id, or a filtered, sorted, paginated list. Rows are loaded
through the ORM, flattened into raw mappings and handed to the matching
transformer, so callers only ever see view models.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import UUID

from pydantic.alias_generators import to_snake
from sqlalchemy import Float, and_, case, cast, exists, func, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from netatrack.core.config import settings
from netatrack.core.errors import AppError
from netatrack.models import (
    ENTITY_MODELS,
    AssetDeclaration,
    Bill,
    CriminalRecord,
    EntityTag,
    Party,
    PartyControversy,
    PartyMembership,
    Politician,
    Promise,
    Tag,
)
from netatrack.schemas import EntityKind
from netatrack.services.transformers import TRANSFORMERS

logger = logging.getLogger(__name__)


@dataclass
class SortSpec:
    field: str
    order: str = "asc"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortSpec"]:
        """Parse the "<field>_<asc|desc>" query form, e.g. "dateAdded_desc"."""
        if not value:
            return None
        field, _, order = value.rpartition("_")
        if not field or order.lower() not in ("asc", "desc"):
            return cls(field=value, order="asc")
        return cls(field=field, order=order.lower())


@dataclass
class FetchResult:
    data: Any = None
    count: int = 0
    error: Optional[AppError] = None


# --------------- value coercion ---------------

def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    return None


def _like(term: str) -> str:
    escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


# --------------- filters ---------------

def _tag_condition(kind: str, model, tag: str):
    return exists(
        select(EntityTag.tag_id)
        .join(Tag, Tag.id == EntityTag.tag_id)
        .where(
            EntityTag.entity_type == kind,
            EntityTag.entity_id == model.id,
            func.lower(Tag.name) == tag.strip().lower(),
        )
    )


def build_conditions(kind: str, filters: Optional[Mapping[str, Any]], today: Optional[date] = None) -> List[Any]:
    """
    Translate filter keys into WHERE clauses. Only keys with a usable value
    contribute; everything else is ignored.
    """
    model = ENTITY_MODELS[kind]
    filters = {k: v for k, v in (filters or {}).items() if _present(v)}
    conditions = []
    today = today or date.today()

    search = filters.get("search") or filters.get("searchTerm")
    if search:
        column = model.name if kind in ("politician", "party") else model.title
        conditions.append(column.ilike(_like(search), escape="\\"))

    if "tag" in filters:
        conditions.append(_tag_condition(kind, model, str(filters["tag"])))

    if "isFeatured" in filters:
        featured = _as_bool(filters["isFeatured"])
        if featured is not None:
            conditions.append(model.is_featured.is_(featured))

    if kind == "politician":
        party_id = _as_uuid(filters.get("partyId")) if "partyId" in filters else None
        if party_id:
            conditions.append(exists(
                select(PartyMembership.id).where(
                    PartyMembership.politician_id == Politician.id,
                    PartyMembership.party_id == party_id,
                    PartyMembership.is_active.is_(True),
                )
            ))
        if "province" in filters:
            conditions.append(Politician.province == filters["province"])
        min_age = _as_int(filters.get("minAge"))
        if min_age and min_age > 0:
            conditions.append(Politician.date_of_birth <= years_before(today, min_age))
        max_age = _as_int(filters.get("maxAge"))
        if max_age and max_age > 0:
            oldest = years_before(today, max_age + 1) + timedelta(days=1)
            conditions.append(Politician.date_of_birth >= oldest)

    elif kind == "party":
        if "ideology" in filters:
            conditions.append(Party.ideology.ilike(_like(str(filters["ideology"])), escape="\\"))
        year = _as_int(filters.get("foundingYear"))
        if year:
            conditions.append(and_(
                Party.founding_date >= date(year, 1, 1),
                Party.founding_date <= date(year, 12, 31),
            ))

    elif kind == "promise":
        if "status" in filters:
            conditions.append(Promise.status == filters["status"])
        if "category" in filters:
            conditions.append(Promise.category == filters["category"])
        politician_id = _as_uuid(filters["politicianId"]) if "politicianId" in filters else None
        if politician_id:
            conditions.append(Promise.politician_id == politician_id)
        party_id = _as_uuid(filters["partyId"]) if "partyId" in filters else None
        if party_id:
            conditions.append(Promise.party_id == party_id)

    elif kind == "bill":
        if "status" in filters:
            conditions.append(Bill.status == filters["status"])
        if "ministry" in filters:
            conditions.append(Bill.ministry == filters["ministry"])
        politician_id = _as_uuid(filters["politicianId"]) if "politicianId" in filters else None
        if politician_id:
            conditions.append(Bill.sponsor_politician_id == politician_id)
        party_id = _as_uuid(filters["partyId"]) if "partyId" in filters else None
        if party_id:
            conditions.append(Bill.sponsor_party_id == party_id)

    return conditions


# --------------- sorting ---------------

def rating_expression(model):
    """SQL form of the star rating, used for ORDER BY."""
    total = model.upvotes + model.downvotes
    return case(
        (total == 0, literal(2.5)),
        else_=cast(model.upvotes, Float) * 4.5 / total + 0.5,
    )


SORT_FIELDS = {
    "politician": {
        "name": lambda: Politician.name,
        "age": lambda: Politician.date_of_birth,
        "rating": lambda: rating_expression(Politician),
        "created_at": lambda: Politician.created_at,
    },
    "party": {
        "name": lambda: Party.name,
        "founding_date": lambda: Party.founding_date,
        "rating": lambda: rating_expression(Party),
        "created_at": lambda: Party.created_at,
    },
    "promise": {
        "title": lambda: Promise.title,
        "date_added": lambda: Promise.date_added,
        "deadline": lambda: Promise.deadline,
        "status": lambda: Promise.status,
        "rating": lambda: rating_expression(Promise),
        "created_at": lambda: Promise.created_at,
    },
    "bill": {
        "title": lambda: Bill.title,
        "proposal_date": lambda: Bill.proposal_date,
        "registration_date": lambda: Bill.registration_date,
        "status": lambda: Bill.status,
        "rating": lambda: rating_expression(Bill),
        "created_at": lambda: Bill.created_at,
    },
}

DEFAULT_SORT = {
    "politician": SortSpec("name", "asc"),
    "party": SortSpec("name", "asc"),
    "promise": SortSpec("date_added", "desc"),
    "bill": SortSpec("proposal_date", "desc"),
}


def build_order_by(kind: str, sort_by: Optional[SortSpec]) -> List[Any]:
    """ORDER BY clauses for a sort spec; unknown fields fall back to the kind's default."""
    fields = SORT_FIELDS[kind]
    spec = sort_by
    if spec is None or to_snake(spec.field) not in fields or spec.order not in ("asc", "desc"):
        spec = DEFAULT_SORT[kind]
    field = to_snake(spec.field)
    column = fields[field]()
    descending = spec.order == "desc"
    if field == "age":
        # Older means an earlier birth date
        descending = not descending
    model = ENTITY_MODELS[kind]
    return [column.desc() if descending else column.asc(), model.id.asc()]


# --------------- loading ---------------

def load_options(kind: str, include_relations: bool) -> list:
    if kind == "politician":
        options = [selectinload(Politician.memberships).selectinload(PartyMembership.party)]
        if include_relations:
            options += [
                selectinload(Politician.career_entries),
                selectinload(Politician.asset_declarations).selectinload(AssetDeclaration.sources),
                selectinload(Politician.criminal_records).selectinload(CriminalRecord.sources),
                selectinload(Politician.social_links),
            ]
        return options
    if kind == "party":
        options = [selectinload(Party.chairperson)]
        if include_relations:
            options += [
                selectinload(Party.election_history),
                selectinload(Party.controversies).selectinload(PartyControversy.sources),
            ]
        return options
    if kind == "promise":
        return [
            selectinload(Promise.politician).selectinload(Politician.memberships).selectinload(PartyMembership.party),
            selectinload(Promise.party),
        ]
    return [
        selectinload(Bill.sponsor_politician).selectinload(Politician.memberships).selectinload(PartyMembership.party),
        selectinload(Bill.sponsor_party),
    ]


def columns(obj) -> Dict[str, Any]:
    """Column values of an ORM row as a plain dict."""
    return {c.key: getattr(obj, c.key) for c in obj.__table__.columns}


def _memberships(politician) -> List[Dict[str, Any]]:
    return [
        {**columns(m), "party": columns(m.party) if m.party is not None else None}
        for m in politician.memberships
    ]


def _with_sources(rows) -> List[Dict[str, Any]]:
    return [{**columns(r), "sources": [columns(s) for s in r.sources]} for r in rows]


def _raw_row(kind: str, obj, include_relations: bool) -> Dict[str, Any]:
    raw = columns(obj)
    if kind == "politician":
        raw["party_memberships"] = _memberships(obj)
        if include_relations:
            raw["political_career_entries"] = [columns(c) for c in obj.career_entries]
            raw["asset_declarations"] = _with_sources(obj.asset_declarations)
            raw["criminal_record_entries"] = _with_sources(obj.criminal_records)
            raw["social_media_links"] = [columns(s) for s in obj.social_links]
    elif kind == "party":
        raw["chairperson"] = columns(obj.chairperson) if obj.chairperson is not None else None
        if include_relations:
            raw["election_history_entries"] = [columns(e) for e in obj.election_history]
            raw["party_controversies"] = _with_sources(obj.controversies)
    elif kind == "promise":
        if obj.politician is not None:
            raw["politician"] = {**columns(obj.politician), "party_memberships": _memberships(obj.politician)}
        raw["party"] = columns(obj.party) if obj.party is not None else None
    else:
        if obj.sponsor_politician is not None:
            raw["sponsor_politician"] = {
                **columns(obj.sponsor_politician),
                "party_memberships": _memberships(obj.sponsor_politician),
            }
        raw["sponsor_party"] = columns(obj.sponsor_party) if obj.sponsor_party is not None else None
    return raw


async def _tags_for(db: AsyncSession, kind: str, ids: List[UUID]) -> Dict[UUID, List[str]]:
    if not ids:
        return {}
    stmt = (
        select(EntityTag.entity_id, Tag.name)
        .join(Tag, Tag.id == EntityTag.tag_id)
        .where(EntityTag.entity_type == kind, EntityTag.entity_id.in_(ids))
        .order_by(Tag.name)
    )
    tags: Dict[UUID, List[str]] = {}
    for entity_id, name in (await db.execute(stmt)).all():
        tags.setdefault(entity_id, []).append(name)
    return tags


async def _member_counts(db: AsyncSession, ids: List[UUID]) -> Dict[UUID, int]:
    if not ids:
        return {}
    stmt = (
        select(PartyMembership.party_id, func.count(PartyMembership.id))
        .where(PartyMembership.party_id.in_(ids), PartyMembership.is_active.is_(True))
        .group_by(PartyMembership.party_id)
    )
    return {party_id: count for party_id, count in (await db.execute(stmt)).all()}


async def _politician_records(db: AsyncSession, politician_id: UUID) -> Dict[str, List[Dict[str, Any]]]:
    promises = await db.execute(
        select(Promise.id, Promise.title, Promise.status)
        .where(Promise.politician_id == politician_id)
        .order_by(Promise.date_added.desc(), Promise.id)
    )
    bills = await db.execute(
        select(Bill.id, Bill.title, Bill.status)
        .where(Bill.sponsor_politician_id == politician_id)
        .order_by(Bill.proposal_date.desc(), Bill.id)
    )
    return {
        "promises": [dict(r._mapping) for r in promises],
        "sponsored_bills": [dict(r._mapping) for r in bills],
    }


async def _to_raw_rows(db: AsyncSession, kind: str, objs, include_relations: bool) -> List[Dict[str, Any]]:
    ids = [obj.id for obj in objs]
    tags = await _tags_for(db, kind, ids)
    counts = await _member_counts(db, ids) if kind == "party" else {}
    rows = []
    for obj in objs:
        raw = _raw_row(kind, obj, include_relations)
        raw["tags"] = [{"name": name} for name in tags.get(obj.id, [])]
        if kind == "party":
            raw["member_count"] = counts.get(obj.id, 0)
        rows.append(raw)
    return rows


# --------------- entry point ---------------

async def fetch_entity_data(
    db: AsyncSession,
    kind: Union[EntityKind, str],
    *,
    id: Any = None,
    filters: Optional[Mapping[str, Any]] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[SortSpec] = None,
    include_relations: bool = True,
) -> FetchResult:
    """
    Fetch one entity (when id is given) or a page of entities.

    Returns FetchResult(data, count, error). A missing single entity is an
    error (NotFound), never an empty success; count on a list is the number
    of matching rows before pagination. Store failures come back as a tagged
    AppError rather than an empty result.
    """
    kind = EntityKind(kind).value
    model = ENTITY_MODELS[kind]
    transform = TRANSFORMERS[kind]

    try:
        if id is not None:
            entity_id = _as_uuid(id)
            if entity_id is None:
                return FetchResult(error=AppError.not_found(kind, id))

            stmt = (
                select(model)
                .where(model.id == entity_id)
                .options(*load_options(kind, include_relations))
                .execution_options(populate_existing=True)
            )
            obj = (await db.execute(stmt)).scalar_one_or_none()
            if obj is None:
                return FetchResult(error=AppError.not_found(kind, id))

            raw = (await _to_raw_rows(db, kind, [obj], include_relations))[0]
            if kind == "politician" and include_relations:
                raw.update(await _politician_records(db, obj.id))
            return FetchResult(data=transform(raw), count=1)

        page = max(_as_int(page) or 1, 1)
        limit = _as_int(limit) or settings.ITEMS_PER_PAGE
        limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)

        conditions = build_conditions(kind, filters)

        count_stmt = select(func.count()).select_from(model).where(*conditions)
        total = (await db.execute(count_stmt)).scalar_one()

        stmt = (
            select(model)
            .where(*conditions)
            .order_by(*build_order_by(kind, sort_by))
            .offset((page - 1) * limit)
            .limit(limit)
            .options(*load_options(kind, include_relations))
            .execution_options(populate_existing=True)
        )
        objs = (await db.execute(stmt)).scalars().all()
        rows = await _to_raw_rows(db, kind, objs, include_relations)
        return FetchResult(data=[transform(raw) for raw in rows], count=total)

    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch {kind} data: {e}", exc_info=True)
        return FetchResult(error=AppError.from_db_error(e, f"Failed to fetch {kind} data"))


async def get_entity_view(db: AsyncSession, kind: Union[EntityKind, str], entity_id: Any, include_relations: bool = True):
    """Single lookup that raises the tagged error instead of returning it."""
    result = await fetch_entity_data(db, kind, id=entity_id, include_relations=include_relations)
    if result.error:
        raise result.error
    return result.data
