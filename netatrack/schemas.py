"""
Pydantic schemas for API request/response validation

JSON is camelCase on the wire; request bodies also accept snake_case field names.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar, Union
from datetime import datetime, date
from enum import Enum
from uuid import UUID


# Enums
class EntityKind(str, Enum):
    POLITICIAN = "politician"
    PARTY = "party"
    PROMISE = "promise"
    BILL = "bill"


class PromiseStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    FULFILLED = "Fulfilled"
    BROKEN = "Broken"
    OVERDUE = "Overdue"


class BillStatus(str, Enum):
    PROPOSED = "Proposed"
    IN_COMMITTEE = "In Committee"
    PASSED_HOUSE = "Passed House"
    PASSED_SENATE = "Passed Senate"
    ENACTED = "Enacted"
    FAILED = "Failed"
    WITHDRAWN = "Withdrawn"


class CriminalSeverity(str, Enum):
    MINOR = "Minor"
    MODERATE = "Moderate"
    SEVERE = "Significant/Severe"


class CriminalRecordStatus(str, Enum):
    ALLEGATION = "Allegation"
    UNDER_INVESTIGATION = "Under Investigation"
    CHARGES_FILED = "Charges Filed"
    ACQUITTED = "Acquitted"
    CONVICTED = "Convicted"
    SENTENCE_SERVED = "Sentence Served"
    EXPUNGED = "Expunged"


class OffenseType(str, Enum):
    FINANCIAL = "Financial"
    ETHICAL_VIOLATION = "Ethical Violation"
    CORRUPTION = "Corruption"
    VIOLENCE = "Violence"
    PUBLIC_ORDER = "Public Order"
    OTHER = "Other"


class ElectionType(str, Enum):
    FEDERAL_PARLIAMENT = "Federal Parliament"
    PROVINCIAL_ASSEMBLY = "Provincial Assembly"
    LOCAL_LEVEL = "Local Level"
    NATIONAL_ASSEMBLY = "National Assembly"
    BY_ELECTION_FEDERAL = "By-election - Federal"
    BY_ELECTION_PROVINCIAL = "By-election - Provincial"
    BY_ELECTION_LOCAL = "By-election - Local"


class VoteType(str, Enum):
    UP = "up"
    DOWN = "down"


class SuggestionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


NEPAL_PROVINCES = [
    "Koshi Province",
    "Madhesh Province",
    "Bagmati Province",
    "Gandaki Province",
    "Lumbini Province",
    "Karnali Province",
    "Sudurpashchim Province",
]


def split_delimited(value: Any) -> List[str]:
    """
    Normalize a comma-delimited string or a list of strings into trimmed,
    de-duplicated names. First occurrence wins; comparison is case-insensitive.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(v) for v in value if v is not None]

    names: List[str] = []
    seen = set()
    for part in parts:
        name = part.strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            names.append(name)
    return names


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Entity forms (create / full update / suggestion payloads)
# ---------------------------------------------------------------------------

class FormModel(APIModel):
    """Base for entity forms. Blank strings from form submissions count as missing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data):
        if isinstance(data, dict):
            return {k: (None if isinstance(v, str) and not v.strip() else v) for k, v in data.items()}
        return data

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return split_delimited(v)


class SourceIn(APIModel):
    url: str = Field(..., min_length=1)
    description: Optional[str] = None


class CareerEntryIn(APIModel):
    year: Optional[int] = Field(None, ge=1900, le=2100)
    role: str = Field(..., min_length=1)


class AssetDeclarationIn(APIModel):
    summary: str = Field(..., min_length=1)
    declaration_date: Optional[date] = None
    sources: List[SourceIn] = Field(default_factory=list)


class CriminalRecordIn(APIModel):
    severity: CriminalSeverity
    status: CriminalRecordStatus
    offense_type: OffenseType
    description: str = Field(..., min_length=1)
    case_date: Optional[date] = None
    sources: List[SourceIn] = Field(default_factory=list)


class SocialLinkIn(APIModel):
    platform: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class PoliticianForm(FormModel):
    name: str = Field(..., min_length=1, max_length=200)
    party_id: Optional[UUID] = None
    role_in_party: Optional[str] = None
    province: Optional[str] = None
    constituency: Optional[str] = None
    bio: Optional[str] = None
    date_of_birth: Optional[date] = None
    image_url: Optional[str] = None
    position: Optional[str] = None
    education: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    career_entries: List[CareerEntryIn] = Field(default_factory=list)
    asset_declarations: List[AssetDeclarationIn] = Field(default_factory=list)
    criminal_records: List[CriminalRecordIn] = Field(default_factory=list)
    social_links: List[SocialLinkIn] = Field(default_factory=list)

    @field_validator('province')
    @classmethod
    def validate_province(cls, v):
        if v is None:
            return v
        for province in NEPAL_PROVINCES:
            if v.lower() in (province.lower(), province.lower().removesuffix(" province")):
                return province
        raise ValueError('Invalid province')

    @field_validator('date_of_birth')
    @classmethod
    def validate_date_of_birth(cls, v):
        if v is not None and v > date.today():
            raise ValueError('Date of birth cannot be in the future')
        return v


class ElectionHistoryIn(APIModel):
    election_year: int = Field(..., ge=1950, le=2100)
    election_type: ElectionType
    seats_contested: Optional[int] = Field(None, ge=0)
    seats_won: Optional[int] = Field(None, ge=0)
    vote_percentage: Optional[float] = Field(None, ge=0, le=100)


class ControversyIn(APIModel):
    description: str = Field(..., min_length=1)
    controversy_date: Optional[date] = None
    sources: List[SourceIn] = Field(default_factory=list)


class PartyForm(FormModel):
    name: str = Field(..., min_length=1, max_length=200)
    short_name: Optional[str] = None
    logo_url: Optional[str] = None
    ideology: List[str] = Field(default_factory=list)
    founding_date: Optional[date] = None
    chairperson_id: Optional[UUID] = None
    headquarters: Optional[str] = None
    description: Optional[str] = None
    history: Optional[str] = None
    election_symbol_url: Optional[str] = None
    website: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    key_policy_positions: Optional[str] = None
    election_history: List[ElectionHistoryIn] = Field(default_factory=list)
    controversies: List[ControversyIn] = Field(default_factory=list)

    @field_validator("ideology", mode="before")
    @classmethod
    def normalize_ideology(cls, v):
        return split_delimited(v)


class PromiseForm(FormModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    status: PromiseStatus = PromiseStatus.PENDING
    category: Optional[str] = None
    deadline: Optional[date] = None
    source_url: Optional[str] = None
    evidence_url: Optional[str] = None
    update_log: Optional[str] = None
    politician_id: Optional[UUID] = None
    party_id: Optional[UUID] = None

    @model_validator(mode="after")
    def single_sponsor(self):
        if self.politician_id and self.party_id:
            raise ValueError("A promise can be attributed to a politician or a party, not both")
        return self


class BillForm(FormModel):
    title: str = Field(..., min_length=1, max_length=300)
    registration_number: Optional[str] = None
    registration_date: Optional[date] = None
    ministry: Optional[str] = None
    status: BillStatus = BillStatus.PROPOSED
    proposal_date: Optional[date] = None
    summary: Optional[str] = None
    parliament_info_url: Optional[str] = None
    sponsor_politician_id: Optional[UUID] = None
    sponsor_party_id: Optional[UUID] = None

    @model_validator(mode="after")
    def single_sponsor(self):
        if self.sponsor_politician_id and self.sponsor_party_id:
            raise ValueError("A bill can be sponsored by a politician or a party, not both")
        return self


FORM_SCHEMAS = {
    EntityKind.POLITICIAN: PoliticianForm,
    EntityKind.PARTY: PartyForm,
    EntityKind.PROMISE: PromiseForm,
    EntityKind.BILL: BillForm,
}


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------

class SourceView(APIModel):
    id: str
    url: str
    description: Optional[str] = None


class CareerEntryView(APIModel):
    id: str
    year: Optional[int] = None
    role: str


class AssetDeclarationView(APIModel):
    id: str
    summary: str
    declaration_date: Optional[date] = None
    sources: List[SourceView] = []


class CriminalRecordView(APIModel):
    id: str
    severity: str
    status: str
    offense_type: str
    description: str
    case_date: Optional[date] = None
    sources: List[SourceView] = []


class SocialLinkView(APIModel):
    id: str
    platform: str
    url: str


class ActivePartyView(APIModel):
    id: str
    name: str
    short_name: Optional[str] = None
    logo_url: Optional[str] = None
    role_in_party: Optional[str] = None


class PromiseSummary(APIModel):
    id: str
    title: str
    status: str


class BillSummary(APIModel):
    id: str
    title: str
    status: str


class PoliticianView(APIModel):
    id: str
    name: str
    image_url: Optional[str] = None
    bio: Optional[str] = None
    date_of_birth: Optional[date] = None
    age: Optional[int] = None
    province: Optional[str] = None
    constituency: Optional[str] = None
    position: Optional[str] = None
    education: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    active_party: Optional[ActivePartyView] = None
    tags: List[str] = []
    career_entries: List[CareerEntryView] = []
    asset_declarations: List[AssetDeclarationView] = []
    criminal_records: List[CriminalRecordView] = []
    highest_convicted_severity: Optional[str] = None
    social_links: List[SocialLinkView] = []
    promises: List[PromiseSummary] = []
    sponsored_bills: List[BillSummary] = []
    is_featured: bool = False
    upvotes: int = 0
    downvotes: int = 0
    rating: float = 2.5
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ElectionHistoryView(APIModel):
    id: str
    election_year: int
    election_type: str
    seats_contested: Optional[int] = None
    seats_won: Optional[int] = None
    vote_percentage: Optional[float] = None


class ControversyView(APIModel):
    id: str
    description: str
    controversy_date: Optional[date] = None
    sources: List[SourceView] = []


class PartyView(APIModel):
    id: str
    name: str
    short_name: Optional[str] = None
    logo_url: Optional[str] = None
    ideology: List[str] = []
    founding_date: Optional[date] = None
    chairperson_id: Optional[str] = None
    chairperson_name: Optional[str] = None
    chairperson_image_url: Optional[str] = None
    headquarters: Optional[str] = None
    description: Optional[str] = None
    history: Optional[str] = None
    election_symbol_url: Optional[str] = None
    website: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    key_policy_positions: Optional[str] = None
    member_count: int = 0
    tags: List[str] = []
    election_history: List[ElectionHistoryView] = []
    controversies: List[ControversyView] = []
    is_featured: bool = False
    upvotes: int = 0
    downvotes: int = 0
    rating: float = 2.5
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PromiseView(APIModel):
    id: str
    title: str
    description: Optional[str] = None
    status: str
    category: Optional[str] = None
    deadline: Optional[date] = None
    source_url: Optional[str] = None
    evidence_url: Optional[str] = None
    date_added: Optional[date] = None
    update_log: Optional[str] = None
    politician_id: Optional[str] = None
    politician_name: Optional[str] = None
    politician_image_url: Optional[str] = None
    party_id: Optional[str] = None
    party_name: Optional[str] = None
    party_logo_url: Optional[str] = None
    tags: List[str] = []
    is_featured: bool = False
    upvotes: int = 0
    downvotes: int = 0
    rating: float = 2.5
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BillView(APIModel):
    id: str
    title: str
    registration_number: Optional[str] = None
    registration_date: Optional[date] = None
    ministry: Optional[str] = None
    status: str
    proposal_date: Optional[date] = None
    summary: Optional[str] = None
    parliament_info_url: Optional[str] = None
    sponsor_politician_id: Optional[str] = None
    sponsor_politician_name: Optional[str] = None
    sponsor_politician_image_url: Optional[str] = None
    sponsor_party_id: Optional[str] = None
    sponsor_party_name: Optional[str] = None
    sponsor_party_logo_url: Optional[str] = None
    tags: List[str] = []
    is_featured: bool = False
    upvotes: int = 0
    downvotes: int = 0
    rating: float = 2.5
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


EntityView = Union[PoliticianView, PartyView, PromiseView, BillView]
T = TypeVar("T")


class EntityListResponse(APIModel, Generic[T]):
    items: List[T]
    total_count: int
    page: int
    limit: int


# ---------------------------------------------------------------------------
# PATCH: feature toggle or vote, discriminated on "op"
# ---------------------------------------------------------------------------

class FeatureOperation(APIModel):
    op: Literal["feature"]
    is_featured: bool


class VoteOperation(APIModel):
    op: Literal["vote"]
    vote_type: VoteType


EntityPatch = Union[FeatureOperation, VoteOperation]


class EntityPatchResponse(APIModel, Generic[T]):
    item: T
    user_vote: Optional[VoteType] = None


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

class SuggestionCreate(APIModel):
    entity_type: EntityKind
    entity_id: Optional[UUID] = None
    is_new_item_suggestion: bool = False
    suggested_data: Dict[str, Any]
    notes: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_target(self):
        if self.is_new_item_suggestion and self.entity_id is not None:
            raise ValueError("entityId must be omitted for new item suggestions")
        if not self.is_new_item_suggestion and self.entity_id is None:
            raise ValueError("entityId is required when suggesting an edit")
        if not self.suggested_data:
            raise ValueError("suggestedData must not be empty")
        return self


class SuggestionUpdate(APIModel):
    suggested_data: Dict[str, Any]
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("suggested_data")
    @classmethod
    def not_empty(cls, v):
        if not v:
            raise ValueError("suggestedData must not be empty")
        return v


class SuggestionView(APIModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    entity_type: EntityKind
    entity_id: Optional[UUID] = None
    suggested_data: Dict[str, Any]
    is_new_item_suggestion: bool
    notes: Optional[str] = None
    submitter_id: Optional[str] = None
    submitter_name: Optional[str] = None
    status: SuggestionStatus
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SuggestionListResponse(APIModel):
    items: List[SuggestionView]
    total_count: int


class SuggestionAccepted(APIModel):
    """Returned (202) when a write was queued for moderation instead of applied."""
    status: Literal["pending_review"] = "pending_review"
    message: str = "Your suggestion has been submitted for review"


class SuggestionResolution(APIModel):
    suggestion: SuggestionView
    entity_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Options, news, profile
# ---------------------------------------------------------------------------

class PartyOption(APIModel):
    id: str
    name: str
    short_name: Optional[str] = None
    logo_url: Optional[str] = None


class PoliticianOption(APIModel):
    id: str
    name: str
    image_url: Optional[str] = None


class NewsArticle(APIModel):
    id: str
    title: str
    link: str
    source: str
    pub_date: datetime
    summary: str
    category: str = "General"
    tags: List[str] = []


class NewsResponse(APIModel):
    articles: List[NewsArticle]
    error: Optional[str] = None
    partial_error: Optional[str] = None


class ProfileView(APIModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_admin: bool = False


class UserVotesResponse(APIModel):
    votes: Dict[str, VoteType]


class MessageResponse(APIModel):
    message: str
