"""
Vote ledger and featuring tests
"""
import uuid

import pytest
from sqlalchemy import func, select

from netatrack.core.context import RequestContext
from netatrack.core.errors import AppError
from netatrack.core.monitoring import metrics
from netatrack.models import Promise, UserVote
from netatrack.schemas import PromiseForm
from netatrack.services.entity_writer import create_entity
from netatrack.services.votes import cast_vote, get_user_votes, get_vote, set_featured


async def _promise(db, title="Electrify every village"):
    promise_id = await create_entity(db, "promise", PromiseForm(title=title))
    await db.commit()
    return promise_id


async def _ledger_rows(db, item_id):
    return await db.scalar(select(func.count()).select_from(UserVote).where(UserVote.item_id == item_id))


async def test_vote_toggle_sequence(db_session, user_ctx):
    promise_id = await _promise(db_session)

    first = await cast_vote(db_session, user_ctx, "promise", promise_id, "up")
    assert (first.vote_type, first.upvotes, first.downvotes) == ("up", 1, 0)

    switched = await cast_vote(db_session, user_ctx, "promise", promise_id, "down")
    assert (switched.vote_type, switched.upvotes, switched.downvotes) == ("down", 0, 1)

    removed = await cast_vote(db_session, user_ctx, "promise", promise_id, "down")
    assert (removed.vote_type, removed.upvotes, removed.downvotes) == (None, 0, 0)
    assert await _ledger_rows(db_session, promise_id) == 0


async def test_counters_track_ledger_across_users(db_session, user_ctx, other_ctx):
    promise_id = await _promise(db_session)

    await cast_vote(db_session, user_ctx, "promise", promise_id, "up")
    outcome = await cast_vote(db_session, other_ctx, "promise", promise_id, "up")
    assert (outcome.upvotes, outcome.downvotes) == (2, 0)

    outcome = await cast_vote(db_session, other_ctx, "promise", promise_id, "down")
    assert (outcome.upvotes, outcome.downvotes) == (1, 1)
    assert await _ledger_rows(db_session, promise_id) == 2


async def test_decrement_never_goes_below_zero(db_session, user_ctx):
    promise_id = await _promise(db_session)
    await cast_vote(db_session, user_ctx, "promise", promise_id, "up")

    # Counter drifted out of sync with the ledger
    promise = await db_session.get(Promise, promise_id, populate_existing=True)
    promise.upvotes = 0
    await db_session.commit()

    outcome = await cast_vote(db_session, user_ctx, "promise", promise_id, "up")
    assert outcome.vote_type is None
    assert outcome.upvotes == 0


async def test_vote_actions_are_counted(db_session, user_ctx):
    promise_id = await _promise(db_session)
    tags = {"kind": "promise", "action": "switched"}
    before = metrics.get_counter("votes.total", tags=tags)

    await cast_vote(db_session, user_ctx, "promise", promise_id, "up")
    await cast_vote(db_session, user_ctx, "promise", promise_id, "down")

    assert metrics.get_counter("votes.total", tags=tags) == before + 1


async def test_vote_requires_login_and_existing_item(db_session, user_ctx):
    promise_id = await _promise(db_session)

    with pytest.raises(AppError) as exc:
        await cast_vote(db_session, RequestContext.anonymous(), "promise", promise_id, "up")
    assert exc.value.status_code == 401

    with pytest.raises(AppError) as exc:
        await cast_vote(db_session, user_ctx, "promise", uuid.uuid4(), "up")
    assert exc.value.status_code == 404


async def test_user_votes_map(db_session, user_ctx):
    first = await _promise(db_session, "First")
    second = await _promise(db_session, "Second")
    await cast_vote(db_session, user_ctx, "promise", first, "up")
    await cast_vote(db_session, user_ctx, "promise", second, "down")

    votes = await get_user_votes(db_session, user_ctx, "promise")
    assert votes == {str(first): "up", str(second): "down"}
    assert await get_user_votes(db_session, user_ctx, "bill") == {}
    assert await get_vote(db_session, user_ctx, "promise", first) == "up"
    assert await get_vote(db_session, None, "promise", first) is None


async def test_set_featured_is_admin_only(db_session, admin_ctx, user_ctx):
    promise_id = await _promise(db_session)

    with pytest.raises(AppError) as exc:
        await set_featured(db_session, user_ctx, "promise", promise_id, True)
    assert exc.value.status_code == 403

    await set_featured(db_session, admin_ctx, "promise", promise_id, True)
    promise = await db_session.get(Promise, promise_id, populate_existing=True)
    assert promise.is_featured is True


async def test_featured_limit(db_session, admin_ctx):
    ids = [await _promise(db_session, f"Promise {i}") for i in range(5)]
    for promise_id in ids[:4]:
        await set_featured(db_session, admin_ctx, "promise", promise_id, True)

    with pytest.raises(AppError) as exc:
        await set_featured(db_session, admin_ctx, "promise", ids[4], True)
    assert exc.value.code == "FEATURED_LIMIT_REACHED"

    # Re-featuring an already featured item and unfeaturing are always allowed
    await set_featured(db_session, admin_ctx, "promise", ids[0], True)
    await set_featured(db_session, admin_ctx, "promise", ids[0], False)
    await set_featured(db_session, admin_ctx, "promise", ids[4], True)
