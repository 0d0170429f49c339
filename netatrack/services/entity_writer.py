"""
Entity writer - direct create/update/delete for the four entity kinds

Used by admin writes and by suggestion approval. Functions only flush;
the calling workflow owns the commit so a write and its bookkeeping
(e.g. marking a suggestion approved) land in one transaction.

Updates are full replacements: scalar columns, child collections and
tags all take the form's values.
"""
import logging
import uuid
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.errors import AppError
from netatrack.models import (
    ENTITY_MODELS,
    AssetDeclaration,
    AssetDeclarationSource,
    Bill,
    CriminalRecord,
    CriminalRecordSource,
    ElectionHistoryEntry,
    EntityTag,
    Party,
    PartyControversy,
    PartyControversySource,
    PartyMembership,
    PoliticalCareerEntry,
    Politician,
    Promise,
    SocialMediaLink,
    Tag,
    UserVote,
)
from netatrack.schemas import EntityKind, PartyForm, PoliticianForm, split_delimited
from netatrack.services.entity_fetcher import load_options

logger = logging.getLogger(__name__)

# Form fields stored directly as columns
SCALAR_FIELDS = {
    "politician": (
        "name", "province", "constituency", "bio", "date_of_birth", "image_url",
        "position", "education", "contact_email", "contact_phone",
    ),
    "party": (
        "name", "short_name", "logo_url", "founding_date", "chairperson_id", "headquarters",
        "description", "history", "election_symbol_url", "website", "contact_email",
        "contact_phone", "key_policy_positions",
    ),
    "promise": (
        "title", "description", "status", "category", "deadline", "source_url",
        "evidence_url", "update_log", "politician_id", "party_id",
    ),
    "bill": (
        "title", "registration_number", "registration_date", "ministry", "status",
        "proposal_date", "summary", "parliament_info_url", "sponsor_politician_id",
        "sponsor_party_id",
    ),
}


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _scalars(kind: str, form) -> Dict[str, Any]:
    values = {field: _plain(getattr(form, field)) for field in SCALAR_FIELDS[kind]}
    if kind == "party":
        values["ideology"] = ", ".join(form.ideology) or None
    return values


# --------------- references ---------------

async def _require(db: AsyncSession, model, entity_id: Optional[UUID], label: str) -> None:
    if entity_id is None:
        return
    if await db.get(model, entity_id) is None:
        raise AppError.bad_request(f"{label} does not exist", code="INVALID_REFERENCE", details={"id": str(entity_id)})


async def _check_references(db: AsyncSession, kind: str, form) -> None:
    if kind == "politician":
        await _require(db, Party, form.party_id, "Party")
    elif kind == "party":
        await _require(db, Politician, form.chairperson_id, "Chairperson")
    elif kind == "promise":
        await _require(db, Politician, form.politician_id, "Politician")
        await _require(db, Party, form.party_id, "Party")
    elif kind == "bill":
        await _require(db, Politician, form.sponsor_politician_id, "Sponsor politician")
        await _require(db, Party, form.sponsor_party_id, "Sponsor party")


async def _ensure_unique_party_name(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    stmt = select(Party.id).where(func.lower(Party.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Party.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise AppError.conflict(f"Party with name '{name}' already exists", code="DUPLICATE_NAME")


# --------------- child collections ---------------

def _politician_children(form: PoliticianForm) -> Dict[str, list]:
    return {
        "career_entries": [PoliticalCareerEntry(year=c.year, role=c.role) for c in form.career_entries],
        "asset_declarations": [
            AssetDeclaration(
                summary=a.summary,
                declaration_date=a.declaration_date,
                sources=[AssetDeclarationSource(url=s.url, description=s.description) for s in a.sources],
            )
            for a in form.asset_declarations
        ],
        "criminal_records": [
            CriminalRecord(
                severity=_plain(r.severity),
                status=_plain(r.status),
                offense_type=_plain(r.offense_type),
                description=r.description,
                case_date=r.case_date,
                sources=[CriminalRecordSource(url=s.url, description=s.description) for s in r.sources],
            )
            for r in form.criminal_records
        ],
        "social_links": [SocialMediaLink(platform=s.platform, url=s.url) for s in form.social_links],
    }


def _party_children(form: PartyForm) -> Dict[str, list]:
    return {
        "election_history": [
            ElectionHistoryEntry(
                election_year=e.election_year,
                election_type=_plain(e.election_type),
                seats_contested=e.seats_contested,
                seats_won=e.seats_won,
                vote_percentage=e.vote_percentage,
            )
            for e in form.election_history
        ],
        "controversies": [
            PartyControversy(
                description=c.description,
                controversy_date=c.controversy_date,
                sources=[PartyControversySource(url=s.url, description=s.description) for s in c.sources],
            )
            for c in form.controversies
        ],
    }


def _children(kind: str, form) -> Dict[str, list]:
    if kind == "politician":
        return _politician_children(form)
    if kind == "party":
        return _party_children(form)
    return {}


# --------------- tags and memberships ---------------

async def sync_tags(db: AsyncSession, kind: str, entity_id: UUID, names: Iterable[str]) -> None:
    """Replace the entity's tag links, creating Tag rows for unseen names."""
    await db.execute(
        delete(EntityTag).where(EntityTag.entity_type == kind, EntityTag.entity_id == entity_id)
    )
    names = split_delimited(list(names))
    if not names:
        return

    existing = (
        await db.execute(select(Tag).where(func.lower(Tag.name).in_([n.lower() for n in names])))
    ).scalars().all()
    by_name = {tag.name.lower(): tag for tag in existing}
    for name in names:
        if name.lower() not in by_name:
            tag = Tag(name=name)
            db.add(tag)
            by_name[name.lower()] = tag
    await db.flush()

    db.add_all([
        EntityTag(entity_type=kind, entity_id=entity_id, tag_id=by_name[name.lower()].id)
        for name in names
    ])
    await db.flush()


async def set_active_party(
    db: AsyncSession,
    politician: Politician,
    party_id: Optional[UUID],
    role_in_party: Optional[str] = None,
) -> None:
    """
    Make party_id the politician's only active membership (or none).
    Existing memberships are deactivated and flushed before one is
    activated, so the one-active-membership index never sees two.
    """
    memberships = politician.memberships
    current = [m for m in memberships if m.is_active]
    target = next((m for m in memberships if m.party_id == party_id), None) if party_id else None

    if target is not None and current == [target]:
        if role_in_party is not None:
            target.role_in_party = role_in_party
        return

    for membership in current:
        membership.is_active = False
        membership.end_date = membership.end_date or date.today()
    await db.flush()

    if party_id is None:
        return
    if target is not None:
        target.is_active = True
        target.end_date = None
        if role_in_party is not None:
            target.role_in_party = role_in_party
    else:
        memberships.append(PartyMembership(
            party_id=party_id,
            is_active=True,
            role_in_party=role_in_party,
            start_date=date.today(),
        ))
    await db.flush()


# --------------- entry points ---------------

async def load_for_write(db: AsyncSession, kind: str, entity_id: Any):
    """Load an entity with every collection a replacement or delete touches."""
    model = ENTITY_MODELS[kind]
    stmt = (
        select(model)
        .where(model.id == entity_id)
        .options(*load_options(kind, True))
        .execution_options(populate_existing=True)
    )
    obj = (await db.execute(stmt)).scalar_one_or_none()
    if obj is None:
        raise AppError.not_found(kind, entity_id)
    return obj


async def create_entity(db: AsyncSession, kind: EntityKind, form) -> UUID:
    kind = EntityKind(kind).value
    await _check_references(db, kind, form)
    if kind == "party":
        await _ensure_unique_party_name(db, form.name)

    model = ENTITY_MODELS[kind]
    obj = model(id=uuid.uuid4(), **_scalars(kind, form), **_children(kind, form))
    if kind == "politician":
        obj.memberships = []
        if form.party_id:
            obj.memberships.append(PartyMembership(
                party_id=form.party_id,
                is_active=True,
                role_in_party=form.role_in_party,
                start_date=date.today(),
            ))
    db.add(obj)
    await db.flush()

    await sync_tags(db, kind, obj.id, form.tags)
    logger.info(f"Created {kind} {obj.id}")
    return obj.id


async def update_entity(db: AsyncSession, kind: EntityKind, entity_id: UUID, form) -> UUID:
    kind = EntityKind(kind).value
    obj = await load_for_write(db, kind, entity_id)
    await _check_references(db, kind, form)
    if kind == "party":
        await _ensure_unique_party_name(db, form.name, exclude_id=obj.id)

    for field, value in _scalars(kind, form).items():
        setattr(obj, field, value)
    for field, value in _children(kind, form).items():
        setattr(obj, field, value)
    await db.flush()

    if kind == "politician":
        await set_active_party(db, obj, form.party_id, form.role_in_party)

    await sync_tags(db, kind, obj.id, form.tags)
    logger.info(f"Updated {kind} {obj.id}")
    return obj.id


async def delete_entity(db: AsyncSession, kind: EntityKind, entity_id: UUID) -> None:
    """
    Delete an entity with its children, tag links and ledger rows.
    Promises and bills that pointed at a deleted politician or party keep
    existing with that sponsor cleared.
    """
    kind = EntityKind(kind).value
    obj = await load_for_write(db, kind, entity_id)

    await db.execute(delete(EntityTag).where(EntityTag.entity_type == kind, EntityTag.entity_id == obj.id))
    await db.execute(delete(UserVote).where(UserVote.item_type == kind, UserVote.item_id == obj.id))

    if kind == "politician":
        await db.execute(update(Promise).where(Promise.politician_id == obj.id).values(politician_id=None))
        await db.execute(update(Bill).where(Bill.sponsor_politician_id == obj.id).values(sponsor_politician_id=None))
        await db.execute(update(Party).where(Party.chairperson_id == obj.id).values(chairperson_id=None))
    elif kind == "party":
        await db.execute(delete(PartyMembership).where(PartyMembership.party_id == obj.id))
        await db.execute(update(Promise).where(Promise.party_id == obj.id).values(party_id=None))
        await db.execute(update(Bill).where(Bill.sponsor_party_id == obj.id).values(sponsor_party_id=None))

    await db.delete(obj)
    await db.flush()
    logger.info(f"Deleted {kind} {entity_id}")
