"""
Entity fetcher tests: filters, sorting, pagination and single lookups
"""
import uuid
from datetime import date

import pytest

from netatrack.schemas import BillForm, PartyForm, PoliticianForm, PromiseForm
from netatrack.services.entity_fetcher import (
    SortSpec,
    build_order_by,
    fetch_entity_data,
    get_entity_view,
    years_before,
)
from netatrack.services.entity_writer import create_entity
from netatrack.core.errors import AppError


def test_sort_spec_parse():
    assert SortSpec.parse("dateAdded_desc") == SortSpec("dateAdded", "desc")
    assert SortSpec.parse("name_ASC") == SortSpec("name", "asc")
    assert SortSpec.parse("rating") == SortSpec("rating", "asc")
    assert SortSpec.parse(None) is None


def test_years_before_handles_leap_day():
    assert years_before(date(2024, 2, 29), 1) == date(2023, 2, 28)
    assert years_before(date(2024, 5, 1), 30) == date(1994, 5, 1)


def test_unknown_sort_field_falls_back_to_default():
    clauses = build_order_by("promise", SortSpec("nonsense", "asc"))
    assert "date_added" in str(clauses[0])
    assert "DESC" in str(clauses[0]).upper()


async def _seed(db):
    congress = await create_entity(db, "party", PartyForm(
        name="Nepali Congress", ideology="Social democracy", founding_date=date(1947, 1, 25),
    ))
    uml = await create_entity(db, "party", PartyForm(
        name="CPN (UML)", ideology="Marxism-Leninism, People's Multiparty Democracy", founding_date=date(1991, 1, 6),
    ))
    deuba = await create_entity(db, "politician", PoliticianForm(
        name="Sher Bahadur Deuba", party_id=congress, province="Sudurpashchim", date_of_birth=date(1946, 6, 13),
        tags=["Veteran"],
    ))
    gagan = await create_entity(db, "politician", PoliticianForm(
        name="Gagan Thapa", party_id=congress, province="Bagmati Province", date_of_birth=date(1976, 8, 14),
        tags=["Youth"],
    ))
    oli = await create_entity(db, "politician", PoliticianForm(
        name="K. P. Sharma Oli", party_id=uml, province="Koshi", date_of_birth=date(1952, 2, 22),
    ))
    await create_entity(db, "promise", PromiseForm(
        title="Smart city in every province", politician_id=gagan, category="Infrastructure", status="In Progress",
    ))
    await create_entity(db, "promise", PromiseForm(
        title="Free health insurance", party_id=uml, category="Health",
    ))
    await create_entity(db, "bill", BillForm(
        title="Federal Civil Service Bill", ministry="Ministry of Federal Affairs", sponsor_politician_id=oli,
        proposal_date=date(2023, 5, 1),
    ))
    await db.commit()
    return {"congress": congress, "uml": uml, "deuba": deuba, "gagan": gagan, "oli": oli}


async def test_list_politicians_by_party_and_count(db_session):
    ids = await _seed(db_session)

    result = await fetch_entity_data(db_session, "politician", filters={"partyId": ids["congress"]})

    assert result.error is None
    assert result.count == 2
    assert [p.name for p in result.data] == ["Gagan Thapa", "Sher Bahadur Deuba"]
    assert all(p.active_party.name == "Nepali Congress" for p in result.data)


async def test_age_filters_and_age_sort(db_session):
    await _seed(db_session)
    today = date(2024, 1, 1)

    from netatrack.services.entity_fetcher import build_conditions
    assert len(build_conditions("politician", {"minAge": 60, "maxAge": 0}, today=today)) == 1

    result = await fetch_entity_data(
        db_session, "politician", filters={"minAge": 60}, sort_by=SortSpec("age", "desc"),
    )
    assert [p.name for p in result.data] == ["Sher Bahadur Deuba", "K. P. Sharma Oli"]


async def test_search_is_case_insensitive(db_session):
    await _seed(db_session)
    result = await fetch_entity_data(db_session, "politician", filters={"search": "thapa"})
    assert [p.name for p in result.data] == ["Gagan Thapa"]


async def test_tag_filter(db_session):
    await _seed(db_session)
    result = await fetch_entity_data(db_session, "politician", filters={"tag": "veteran"})
    assert [p.name for p in result.data] == ["Sher Bahadur Deuba"]


async def test_pagination_reports_total_before_paging(db_session):
    await _seed(db_session)
    first = await fetch_entity_data(db_session, "politician", page=1, limit=2, sort_by=SortSpec("name", "asc"))
    result = await fetch_entity_data(db_session, "politician", page=2, limit=2, sort_by=SortSpec("name", "asc"))
    assert first.count == result.count == 3
    assert len(first.data) == 2
    assert [p.name for p in result.data] == ["Sher Bahadur Deuba"]


async def test_party_filters(db_session):
    await _seed(db_session)
    by_ideology = await fetch_entity_data(db_session, "party", filters={"ideology": "marxism"})
    assert [p.name for p in by_ideology.data] == ["CPN (UML)"]

    by_year = await fetch_entity_data(db_session, "party", filters={"foundingYear": "1947"})
    assert [p.name for p in by_year.data] == ["Nepali Congress"]


async def test_party_member_count(db_session):
    ids = await _seed(db_session)
    party = await get_entity_view(db_session, "party", ids["congress"])
    assert party.member_count == 2
    assert party.ideology == ["Social democracy"]


async def test_promise_filters_and_sponsor_display(db_session):
    ids = await _seed(db_session)

    result = await fetch_entity_data(db_session, "promise", filters={"politicianId": str(ids["gagan"])})
    assert result.count == 1
    promise = result.data[0]
    assert promise.politician_name == "Gagan Thapa"
    assert promise.party_name == "Nepali Congress"

    health = await fetch_entity_data(db_session, "promise", filters={"category": "Health"})
    assert [p.party_name for p in health.data] == ["CPN (UML)"]


async def test_bill_sponsor_party_follows_politician(db_session):
    await _seed(db_session)
    result = await fetch_entity_data(db_session, "bill", filters={"ministry": "Ministry of Federal Affairs"})
    bill = result.data[0]
    assert bill.sponsor_politician_name == "K. P. Sharma Oli"
    assert bill.sponsor_party_name == "CPN (UML)"


async def test_single_politician_includes_records(db_session):
    ids = await _seed(db_session)
    view = await get_entity_view(db_session, "politician", ids["gagan"])
    assert view.province == "Bagmati Province"
    assert [p.title for p in view.promises] == ["Smart city in every province"]
    assert view.sponsored_bills == []


async def test_missing_entity_is_not_found(db_session):
    result = await fetch_entity_data(db_session, "bill", id=uuid.uuid4())
    assert result.data is None
    assert result.error.status_code == 404

    with pytest.raises(AppError) as exc:
        await get_entity_view(db_session, "party", "not-a-uuid")
    assert exc.value.code == "NOT_FOUND"
