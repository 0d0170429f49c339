"""
Row -> view model transformers

Each transformer takes the raw relational shape of one entity (a mapping of
snake_case column names, with joined rows as nested mappings/lists) and
returns the stable view model the API serves. They are pure: no I/O, no
session access, no mutation of the input.
"""
import math
from datetime import date
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Mapping, Optional

from netatrack.schemas import (
    ActivePartyView,
    AssetDeclarationView,
    BillSummary,
    BillView,
    CareerEntryView,
    ControversyView,
    CriminalRecordStatus,
    CriminalRecordView,
    CriminalSeverity,
    ElectionHistoryView,
    PartyView,
    PoliticianView,
    PromiseSummary,
    PromiseView,
    SocialLinkView,
    SourceView,
    split_delimited,
)

NEUTRAL_RATING = 2.5
MIN_RATING = 0.5
MAX_RATING = 5.0

# Ascending order of gravity
SEVERITY_RANK = {
    CriminalSeverity.MINOR.value: 1,
    CriminalSeverity.MODERATE.value: 2,
    CriminalSeverity.SEVERE.value: 3,
}


# --------------- helpers ---------------

def compute_rating(upvotes: Optional[int], downvotes: Optional[int]) -> float:
    """
    Map a vote ratio onto a 0.5-5.0 star rating.

    No votes gives the neutral 2.5. Otherwise u / (u + d) * 4.5 + 0.5,
    rounded to one decimal with ties going up, then clamped.
    """
    u = max(int(upvotes or 0), 0)
    d = max(int(downvotes or 0), 0)
    total = u + d
    if total == 0:
        return NEUTRAL_RATING

    exact = Fraction(u, total) * Fraction(9, 2) + Fraction(1, 2)
    tenths = math.floor(exact * 10 + Fraction(1, 2))
    return min(MAX_RATING, max(MIN_RATING, tenths / 10))


def compute_age(date_of_birth: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if date_of_birth is None:
        return None
    today = today or date.today()
    return today.year - date_of_birth.year - ((today.month, today.day) < (date_of_birth.month, date_of_birth.day))


def tag_names(raw_tags: Optional[Iterable[Any]]) -> List[str]:
    """Tag names from join rows ({"name": ...} or {"tag": {"name": ...}}) or plain strings, de-duplicated."""
    names = []
    for item in raw_tags or []:
        if isinstance(item, Mapping):
            nested = item.get("tag")
            name = nested.get("name") if isinstance(nested, Mapping) else item.get("name")
        else:
            name = item
        if name:
            names.append(name)
    return split_delimited(names)


def active_membership(memberships: Optional[Iterable[Mapping[str, Any]]]) -> Optional[Mapping[str, Any]]:
    """First membership flagged active whose party row is present."""
    for membership in memberships or []:
        if membership.get("is_active") and membership.get("party"):
            return membership
    return None


def highest_convicted_severity(records: Optional[Iterable[Mapping[str, Any]]]) -> Optional[str]:
    highest = None
    for record in records or []:
        if record.get("status") != CriminalRecordStatus.CONVICTED.value:
            continue
        severity = record.get("severity")
        if SEVERITY_RANK.get(severity, 0) > SEVERITY_RANK.get(highest, 0):
            highest = severity
    return highest


def _sid(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _sources(rows) -> List[SourceView]:
    return [SourceView(id=_sid(s["id"]), url=s["url"], description=s.get("description")) for s in rows or []]


def _float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _active_party_view(memberships) -> Optional[ActivePartyView]:
    membership = active_membership(memberships)
    if membership is None:
        return None
    party = membership["party"]
    return ActivePartyView(
        id=_sid(party["id"]),
        name=party["name"],
        short_name=party.get("short_name"),
        logo_url=party.get("logo_url"),
        role_in_party=membership.get("role_in_party"),
    )


def _counters(row: Mapping[str, Any]) -> Dict[str, Any]:
    upvotes = row.get("upvotes") or 0
    downvotes = row.get("downvotes") or 0
    return {
        "is_featured": bool(row.get("is_featured")),
        "upvotes": upvotes,
        "downvotes": downvotes,
        "rating": compute_rating(upvotes, downvotes),
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }


def _sponsor_party_fields(politician: Optional[Mapping[str, Any]], party: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    # A politician sponsor decides the displayed party; the direct party is only a fallback
    if politician:
        active = _active_party_view(politician.get("party_memberships"))
        if active is None:
            return {"id": None, "name": None, "logo_url": None}
        return {"id": active.id, "name": active.name, "logo_url": active.logo_url}
    if party:
        return {"id": _sid(party.get("id")), "name": party.get("name"), "logo_url": party.get("logo_url")}
    return {"id": None, "name": None, "logo_url": None}


# --------------- transformers ---------------

def transform_politician(row: Mapping[str, Any]) -> PoliticianView:
    records = row.get("criminal_record_entries") or []
    return PoliticianView(
        id=_sid(row["id"]),
        name=row["name"],
        image_url=row.get("image_url"),
        bio=row.get("bio"),
        date_of_birth=row.get("date_of_birth"),
        age=compute_age(row.get("date_of_birth")),
        province=row.get("province"),
        constituency=row.get("constituency"),
        position=row.get("position"),
        education=row.get("education"),
        contact_email=row.get("contact_email"),
        contact_phone=row.get("contact_phone"),
        active_party=_active_party_view(row.get("party_memberships")),
        tags=tag_names(row.get("tags")),
        career_entries=[
            CareerEntryView(id=_sid(c["id"]), year=c.get("year"), role=c["role"])
            for c in row.get("political_career_entries") or []
        ],
        asset_declarations=[
            AssetDeclarationView(
                id=_sid(a["id"]),
                summary=a["summary"],
                declaration_date=a.get("declaration_date"),
                sources=_sources(a.get("sources")),
            )
            for a in row.get("asset_declarations") or []
        ],
        criminal_records=[
            CriminalRecordView(
                id=_sid(r["id"]),
                severity=r["severity"],
                status=r["status"],
                offense_type=r["offense_type"],
                description=r["description"],
                case_date=r.get("case_date"),
                sources=_sources(r.get("sources")),
            )
            for r in records
        ],
        highest_convicted_severity=highest_convicted_severity(records),
        social_links=[
            SocialLinkView(id=_sid(s["id"]), platform=s["platform"], url=s["url"])
            for s in row.get("social_media_links") or []
        ],
        promises=[
            PromiseSummary(id=_sid(p["id"]), title=p["title"], status=p["status"])
            for p in row.get("promises") or []
        ],
        sponsored_bills=[
            BillSummary(id=_sid(b["id"]), title=b["title"], status=b["status"])
            for b in row.get("sponsored_bills") or []
        ],
        **_counters(row),
    )


def transform_party(row: Mapping[str, Any]) -> PartyView:
    chairperson = row.get("chairperson") or {}
    return PartyView(
        id=_sid(row["id"]),
        name=row["name"],
        short_name=row.get("short_name"),
        logo_url=row.get("logo_url"),
        ideology=split_delimited(row.get("ideology")),
        founding_date=row.get("founding_date"),
        chairperson_id=_sid(row.get("chairperson_id")),
        chairperson_name=chairperson.get("name"),
        chairperson_image_url=chairperson.get("image_url"),
        headquarters=row.get("headquarters"),
        description=row.get("description"),
        history=row.get("history"),
        election_symbol_url=row.get("election_symbol_url"),
        website=row.get("website"),
        contact_email=row.get("contact_email"),
        contact_phone=row.get("contact_phone"),
        key_policy_positions=row.get("key_policy_positions"),
        member_count=row.get("member_count") or 0,
        tags=tag_names(row.get("tags")),
        election_history=[
            ElectionHistoryView(
                id=_sid(e["id"]),
                election_year=e["election_year"],
                election_type=e["election_type"],
                seats_contested=e.get("seats_contested"),
                seats_won=e.get("seats_won"),
                vote_percentage=_float(e.get("vote_percentage")),
            )
            for e in row.get("election_history_entries") or []
        ],
        controversies=[
            ControversyView(
                id=_sid(c["id"]),
                description=c["description"],
                controversy_date=c.get("controversy_date"),
                sources=_sources(c.get("sources")),
            )
            for c in row.get("party_controversies") or []
        ],
        **_counters(row),
    )


def transform_promise(row: Mapping[str, Any]) -> PromiseView:
    politician = row.get("politician")
    party = _sponsor_party_fields(politician, row.get("party"))
    return PromiseView(
        id=_sid(row["id"]),
        title=row["title"],
        description=row.get("description"),
        status=row["status"],
        category=row.get("category"),
        deadline=row.get("deadline"),
        source_url=row.get("source_url"),
        evidence_url=row.get("evidence_url"),
        date_added=row.get("date_added"),
        update_log=row.get("update_log"),
        politician_id=_sid(politician["id"]) if politician else None,
        politician_name=politician.get("name") if politician else None,
        politician_image_url=politician.get("image_url") if politician else None,
        party_id=party["id"],
        party_name=party["name"],
        party_logo_url=party["logo_url"],
        tags=tag_names(row.get("tags")),
        **_counters(row),
    )


def transform_bill(row: Mapping[str, Any]) -> BillView:
    politician = row.get("sponsor_politician")
    party = _sponsor_party_fields(politician, row.get("sponsor_party"))
    return BillView(
        id=_sid(row["id"]),
        title=row["title"],
        registration_number=row.get("registration_number"),
        registration_date=row.get("registration_date"),
        ministry=row.get("ministry"),
        status=row["status"],
        proposal_date=row.get("proposal_date"),
        summary=row.get("summary"),
        parliament_info_url=row.get("parliament_info_url"),
        sponsor_politician_id=_sid(politician["id"]) if politician else None,
        sponsor_politician_name=politician.get("name") if politician else None,
        sponsor_politician_image_url=politician.get("image_url") if politician else None,
        sponsor_party_id=party["id"],
        sponsor_party_name=party["name"],
        sponsor_party_logo_url=party["logo_url"],
        tags=tag_names(row.get("tags")),
        **_counters(row),
    )


TRANSFORMERS = {
    "politician": transform_politician,
    "party": transform_party,
    "promise": transform_promise,
    "bill": transform_bill,
}
