"""
Entity writer delete tests
"""
from sqlalchemy import func, select

from netatrack.models import Bill, EntityTag, Party, PartyMembership, Promise, UserVote
from netatrack.schemas import BillForm, PartyForm, PoliticianForm, PromiseForm
from netatrack.services.entity_writer import create_entity
from netatrack.services.suggestions import remove_entity
from netatrack.services.votes import cast_vote


async def _count(db, model, *where):
    return await db.scalar(select(func.count()).select_from(model).where(*where))


async def _create(db, kind, form):
    entity_id = await create_entity(db, kind, form)
    await db.commit()
    return entity_id


async def test_deleting_party_removes_votes_tags_and_memberships(db_session, admin_ctx, user_ctx):
    party_id = await _create(db_session, "party", PartyForm(name="Janamat Party", tags=["madhesh", "new"]))
    politician_id = await _create(db_session, "politician", PoliticianForm(name="C. K. Raut", party_id=party_id))
    promise_id = await _create(db_session, "promise", PromiseForm(title="Federal autonomy", party_id=party_id))
    bill_id = await _create(db_session, "bill", BillForm(title="Language Bill", sponsor_party_id=party_id))
    await cast_vote(db_session, user_ctx, "party", party_id, "up")

    assert await _count(db_session, EntityTag, EntityTag.entity_id == party_id) == 2
    assert await _count(db_session, PartyMembership, PartyMembership.politician_id == politician_id) == 1

    await remove_entity(db_session, "party", party_id, admin_ctx)

    assert await _count(db_session, Party, Party.id == party_id) == 0
    assert await _count(db_session, UserVote, UserVote.item_id == party_id) == 0
    assert await _count(db_session, EntityTag, EntityTag.entity_type == "party", EntityTag.entity_id == party_id) == 0
    assert await db_session.scalar(
        select(PartyMembership.id).where(PartyMembership.politician_id == politician_id, PartyMembership.is_active.is_(True))
    ) is None
    assert await db_session.scalar(select(Promise.party_id).where(Promise.id == promise_id)) is None
    assert await db_session.scalar(select(Bill.sponsor_party_id).where(Bill.id == bill_id)) is None


async def test_deleting_politician_clears_sponsor_and_chair(db_session, admin_ctx, user_ctx):
    politician_id = await _create(db_session, "politician", PoliticianForm(name="Rabi Lamichhane", tags=["media"]))
    party_id = await _create(db_session, "party", PartyForm(name="Rastriya Swatantra Party", chairperson_id=politician_id))
    promise_id = await _create(db_session, "promise", PromiseForm(title="Good governance", politician_id=politician_id))
    bill_id = await _create(db_session, "bill", BillForm(title="Anti-corruption Bill", sponsor_politician_id=politician_id))
    await cast_vote(db_session, user_ctx, "politician", politician_id, "down")

    await remove_entity(db_session, "politician", politician_id, admin_ctx)

    assert await _count(db_session, UserVote, UserVote.item_id == politician_id) == 0
    assert await _count(db_session, EntityTag, EntityTag.entity_id == politician_id) == 0
    assert await db_session.scalar(select(Party.chairperson_id).where(Party.id == party_id)) is None
    assert await db_session.scalar(select(Promise.politician_id).where(Promise.id == promise_id)) is None
    assert await db_session.scalar(select(Bill.sponsor_politician_id).where(Bill.id == bill_id)) is None
    # Dependents survive the delete
    assert await _count(db_session, Party, Party.id == party_id) == 1
    assert await _count(db_session, Promise, Promise.id == promise_id) == 1
