"""
Transformer and helper tests (pure, no database)
"""
import uuid
from datetime import date

import pytest

from netatrack.schemas import split_delimited
from netatrack.services.transformers import (
    active_membership,
    compute_age,
    compute_rating,
    highest_convicted_severity,
    tag_names,
    transform_bill,
    transform_party,
    transform_politician,
    transform_promise,
)


@pytest.mark.parametrize(
    "upvotes,downvotes,expected",
    [
        (0, 0, 2.5),
        (10, 0, 5.0),
        (0, 10, 0.5),
        (5, 5, 2.8),
        (1, 2, 2.0),
        (3, 1, 3.9),
        (None, None, 2.5),
    ],
)
def test_compute_rating(upvotes, downvotes, expected):
    assert compute_rating(upvotes, downvotes) == expected


def test_compute_rating_stays_in_range():
    for up in range(0, 30):
        for down in range(0, 30):
            assert 0.5 <= compute_rating(up, down) <= 5.0


def test_compute_age_before_and_after_birthday():
    dob = date(1980, 6, 15)
    assert compute_age(dob, today=date(2024, 6, 14)) == 43
    assert compute_age(dob, today=date(2024, 6, 15)) == 44
    assert compute_age(None) is None


def test_split_delimited_trims_and_dedupes_case_insensitively():
    assert split_delimited(" Socialism, democracy ,socialism,, ") == ["Socialism", "democracy"]
    assert split_delimited(["Health", "health", " Roads "]) == ["Health", "Roads"]
    assert split_delimited(None) == []


def test_tag_names_accepts_join_rows_and_strings():
    assert tag_names([{"name": "Roads"}, {"tag": {"name": "Health"}}, "roads", None]) == ["Roads", "Health"]


def test_active_membership_skips_inactive_rows():
    memberships = [
        {"is_active": False, "party": {"id": 1, "name": "Old Party"}},
        {"is_active": True, "party": {"id": 2, "name": "New Party"}},
    ]
    assert active_membership(memberships)["party"]["name"] == "New Party"
    assert active_membership([]) is None


def test_highest_convicted_severity_ignores_unconvicted_records():
    records = [
        {"status": "Allegation", "severity": "Significant/Severe"},
        {"status": "Convicted", "severity": "Minor"},
        {"status": "Convicted", "severity": "Moderate"},
    ]
    assert highest_convicted_severity(records) == "Moderate"
    assert highest_convicted_severity([{"status": "Acquitted", "severity": "Minor"}]) is None


def _party(name="Nepali Congress"):
    return {"id": uuid.uuid4(), "name": name, "short_name": "NC", "logo_url": "https://img.example/nc.png"}


def test_transform_politician_flattens_active_party_and_records():
    party = _party()
    row = {
        "id": uuid.uuid4(),
        "name": "Sher Bahadur",
        "date_of_birth": date(1946, 6, 13),
        "upvotes": 3,
        "downvotes": 1,
        "is_featured": True,
        "party_memberships": [{"is_active": True, "role_in_party": "President", "party": party}],
        "tags": [{"name": "Veteran"}],
        "criminal_record_entries": [
            {
                "id": uuid.uuid4(),
                "severity": "Minor",
                "status": "Convicted",
                "offense_type": "Other",
                "description": "Traffic",
                "sources": [{"id": uuid.uuid4(), "url": "https://src.example/1"}],
            }
        ],
    }

    view = transform_politician(row)

    assert view.id == str(row["id"])
    assert view.active_party.name == "Nepali Congress"
    assert view.active_party.role_in_party == "President"
    assert view.rating == 3.9
    assert view.tags == ["Veteran"]
    assert view.highest_convicted_severity == "Minor"
    assert view.criminal_records[0].sources[0].url == "https://src.example/1"
    assert view.is_featured is True
    assert view.career_entries == []


def test_transform_party_splits_ideology():
    row = {**_party(), "ideology": "Social democracy, Democratic socialism", "member_count": 4}
    view = transform_party(row)
    assert view.ideology == ["Social democracy", "Democratic socialism"]
    assert view.member_count == 4
    assert view.rating == 2.5


def test_promise_party_comes_from_politicians_active_party():
    active = _party("CPN (UML)")
    direct = _party("Ignored Party")
    row = {
        "id": uuid.uuid4(),
        "title": "Build 100 bridges",
        "status": "Pending",
        "politician": {
            "id": uuid.uuid4(),
            "name": "K. P. Oli",
            "party_memberships": [{"is_active": True, "party": active}],
        },
        "party": direct,
    }
    view = transform_promise(row)
    assert view.politician_name == "K. P. Oli"
    assert view.party_name == "CPN (UML)"
    assert view.party_id == str(active["id"])


def test_bill_with_party_sponsor_only():
    party = _party()
    row = {"id": uuid.uuid4(), "title": "Education Bill", "status": "Proposed", "sponsor_party": party}
    view = transform_bill(row)
    assert view.sponsor_politician_id is None
    assert view.sponsor_party_name == "Nepali Congress"
    assert view.sponsor_party_logo_url == party["logo_url"]
