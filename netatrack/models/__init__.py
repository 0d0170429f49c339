"""
SQLAlchemy models package
Exports all models for easy importing
"""
from netatrack.models.profile import Profile
from netatrack.models.tag import Tag, EntityTag
from netatrack.models.politician import (
    Politician,
    PartyMembership,
    PoliticalCareerEntry,
    AssetDeclaration,
    AssetDeclarationSource,
    CriminalRecord,
    CriminalRecordSource,
    SocialMediaLink,
)
from netatrack.models.party import Party, ElectionHistoryEntry, PartyControversy, PartyControversySource
from netatrack.models.promise import Promise
from netatrack.models.bill import Bill
from netatrack.models.vote import UserVote
from netatrack.models.suggestion import Suggestion

# Entity kind -> model, shared by the fetcher, writer and vote ledger
ENTITY_MODELS = {
    "politician": Politician,
    "party": Party,
    "promise": Promise,
    "bill": Bill,
}

__all__ = [
    # Users
    "Profile",

    # Tags
    "Tag",
    "EntityTag",

    # Politicians
    "Politician",
    "PartyMembership",
    "PoliticalCareerEntry",
    "AssetDeclaration",
    "AssetDeclarationSource",
    "CriminalRecord",
    "CriminalRecordSource",
    "SocialMediaLink",

    # Parties
    "Party",
    "ElectionHistoryEntry",
    "PartyControversy",
    "PartyControversySource",

    # Promises and bills
    "Promise",
    "Bill",

    # Ledger and moderation
    "UserVote",
    "Suggestion",

    "ENTITY_MODELS",
]
