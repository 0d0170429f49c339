"""
Option resolver tests
"""
from netatrack.schemas import BillForm, PartyForm, PoliticianForm, PromiseForm
from netatrack.services import options
from netatrack.services.entity_writer import create_entity


async def test_option_lists(db_session):
    uml = await create_entity(db_session, "party", PartyForm(name="CPN (UML)", ideology="Marxism-Leninism, Socialism"))
    await create_entity(db_session, "party", PartyForm(name="Nepali Congress", ideology="socialism, Social democracy"))
    await create_entity(db_session, "politician", PoliticianForm(name="Bidya Devi", party_id=uml, tags=["Leader"]))
    await create_entity(db_session, "promise", PromiseForm(title="Roads", category="Infrastructure", tags=["roads", "Leader"]))
    await create_entity(db_session, "promise", PromiseForm(title="Clinics", category="Health"))
    await create_entity(db_session, "bill", BillForm(title="Tax Bill", ministry="Ministry of Finance"))
    await db_session.commit()

    assert await options.get_party_ideologies(db_session) == ["Marxism-Leninism", "Social democracy", "Socialism"]
    assert await options.get_promise_categories(db_session) == ["Health", "Infrastructure"]
    assert await options.get_bill_ministries(db_session) == ["Ministry of Finance"]
    assert await options.get_existing_tags(db_session, "promise") == ["Leader", "roads"]
    assert await options.get_existing_tags(db_session, "bill") == []

    parties = await options.get_party_options(db_session)
    assert [p.name for p in parties] == ["CPN (UML)", "Nepali Congress"]
    politicians = await options.get_politician_options(db_session)
    assert [p.name for p in politicians] == ["Bidya Devi"]


def test_provinces():
    provinces = options.get_provinces()
    assert len(provinces) == 7
    assert "Bagmati Province" in provinces
