# enrichment_engine/enrichment/schemas.py
"""
Pydantic schemas for profile enrichment.

Attribute names are snake_case; the serialized profile document uses the
camelCase keys consumers already know (basicInfo, jobHistory, ...). Models
accept either form on input.
"""

from enum import Enum
from typing import Any, Optional
from urllib.parse import unquote_plus, urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NOT_SPECIFIED = "Not specified"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderCategory(str, Enum):
    """Information category a search provider is queried for."""

    PROFESSIONAL = "professional"
    NEWS = "news"
    SOCIAL = "social"
    COMPANY = "company"
    ENCYCLOPEDIA = "encyclopedia"


# Fixed merge order. Earlier categories win scalar conflicts and come first
# in concatenated arrays.
PROVIDER_PRECEDENCE: tuple[ProviderCategory, ...] = (
    ProviderCategory.PROFESSIONAL,
    ProviderCategory.ENCYCLOPEDIA,
    ProviderCategory.NEWS,
    ProviderCategory.SOCIAL,
    ProviderCategory.COMPANY,
)


# ===========================================
# Input
# ===========================================


class FamilyDetails(CamelModel):
    spouse: Optional[str] = Field(None, max_length=200)
    children: Optional[int] = Field(None, ge=0)
    dependents: Optional[int] = Field(None, ge=0)


class CompanyOwnership(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    role: str = Field("", max_length=200)
    ownership_percentage: Optional[float] = Field(None, ge=0, le=100)


class SubjectDescriptor(CamelModel):
    """
    The person being enriched.

    Only name, spouse and the first company are used to build queries; the
    remaining fields are carried for the caller's benefit. The name is kept
    exactly as given since it is copied verbatim into the profile.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    date_of_birth: Optional[str] = None
    marital_status: Optional[str] = None
    family_details: Optional[FamilyDetails] = None
    company_ownership: list[CompanyOwnership] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @property
    def current_company(self) -> Optional[str]:
        if not self.company_ownership:
            return None
        return self.company_ownership[0].company_name.strip() or None

    @property
    def current_company_role(self) -> Optional[str]:
        if not self.company_ownership:
            return None
        return self.company_ownership[0].role.strip() or None

    @property
    def spouse_name(self) -> Optional[str]:
        if not self.family_details or not self.family_details.spouse:
            return None
        return self.family_details.spouse.strip() or None


# ===========================================
# Provider boundary
# ===========================================


class ProviderResult(BaseModel):
    """One search hit, validated at the provider client boundary."""

    title: str = ""
    snippet: str = ""
    link: str
    date: Optional[str] = None
    thumbnail: Optional[str] = None
    source: Optional[str] = None

    @field_validator("title", "snippet", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("date", "source", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("link")
    @classmethod
    def validate_link(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("link must be an absolute http(s) URL")
        return v

    @field_validator("thumbnail")
    @classmethod
    def validate_thumbnail(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v if urlparse(v).scheme in ("http", "https") else None

    @property
    def host(self) -> str:
        return (urlparse(self.link).hostname or "").lower()

    @property
    def text(self) -> str:
        return f"{self.title} {self.snippet}".strip()


class QuerySet(BaseModel):
    """One URL-encoded search string per provider category."""

    model_config = ConfigDict(frozen=True)

    professional: str
    news: str
    social: str
    company: str
    encyclopedia: str

    def for_category(self, category: ProviderCategory) -> str:
        return getattr(self, category.value)

    def decoded(self, category: ProviderCategory) -> str:
        return unquote_plus(self.for_category(category))


# ===========================================
# Profile sections
# ===========================================


class CurrentRole(CamelModel):
    title: str
    company: str
    start_date: str = "Present"


class JobHistoryEntry(CamelModel):
    title: str
    company: str
    duration: str = NOT_SPECIFIED
    location: Optional[str] = None
    description: Optional[str] = None


class EducationEntry(CamelModel):
    institution: str
    degree: str = NOT_SPECIFIED
    field: str = NOT_SPECIFIED
    year: Optional[str] = None


class Achievement(CamelModel):
    title: str
    description: Optional[str] = None
    date: Optional[str] = None


class LinkedInProfile(CamelModel):
    url: str
    followers: Optional[int] = None


class TwitterProfile(CamelModel):
    handle: str
    url: str
    bio: Optional[str] = None


class GitHubProfile(CamelModel):
    username: str
    url: str


class SocialProfile(CamelModel):
    platform: str
    url: str
    username: Optional[str] = None


class NewsArticle(CamelModel):
    title: str
    source: str
    url: str
    date: Optional[str] = None
    snippet: Optional[str] = None


class Interview(CamelModel):
    title: str
    platform: str
    url: str
    date: Optional[str] = None


class Publication(CamelModel):
    title: str
    platform: str
    url: str
    date: Optional[str] = None
    type: str = "article"


class PublicActivity(CamelModel):
    type: str = "Public Activity"
    description: str
    source: Optional[str] = None


class CompanyInfo(CamelModel):
    name: str
    role: str = "Unknown"
    description: Optional[str] = None
    website: Optional[str] = None


class BasicInfo(CamelModel):
    name: str
    current_location: Optional[str] = None
    profile_picture_url: Optional[str] = None
    short_bio: Optional[str] = None


class PartialBasicInfo(CamelModel):
    current_location: Optional[str] = None
    profile_picture_url: Optional[str] = None
    short_bio: Optional[str] = None


class Professional(CamelModel):
    current_role: Optional[CurrentRole] = None
    job_history: list[JobHistoryEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)


class Social(CamelModel):
    linked_in: Optional[LinkedInProfile] = None
    twitter: Optional[TwitterProfile] = None
    github: Optional[GitHubProfile] = None
    other: list[SocialProfile] = Field(default_factory=list)


class MediaPresence(CamelModel):
    news_articles: list[NewsArticle] = Field(default_factory=list)
    interviews: list[Interview] = Field(default_factory=list)
    publications: list[Publication] = Field(default_factory=list)


class Interests(CamelModel):
    topics: list[str] = Field(default_factory=list)
    hobbies: list[str] = Field(default_factory=list)
    public_activities: list[PublicActivity] = Field(default_factory=list)


class EnrichedProfile(CamelModel):
    """Complete enriched profile. Every list is present, possibly empty."""

    basic_info: BasicInfo
    professional: Professional = Field(default_factory=Professional)
    social: Social = Field(default_factory=Social)
    media_presence: MediaPresence = Field(default_factory=MediaPresence)
    interests: Interests = Field(default_factory=Interests)
    companies: list[CompanyInfo] = Field(default_factory=list)

    @classmethod
    def empty(cls, name: str) -> "EnrichedProfile":
        return cls(basic_info=BasicInfo(name=name))

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PartialProfile(CamelModel):
    """What one provider's result set contributed, before merging."""

    category: ProviderCategory
    basic_info: PartialBasicInfo = Field(default_factory=PartialBasicInfo)
    professional: Professional = Field(default_factory=Professional)
    social: Social = Field(default_factory=Social)
    media_presence: MediaPresence = Field(default_factory=MediaPresence)
    interests: Interests = Field(default_factory=Interests)
    companies: list[CompanyInfo] = Field(default_factory=list)
