# enrichment_engine/enrichment/extractors.py
"""
Heuristic snippet extractors.

Search snippets are free text with no schema, so facts are pulled out with
ordered tables of named regular expressions (ExtractionRule). Every rule is
conservative: text that does not match yields nothing rather than a guess.

All public functions are pure and never raise; malformed or empty input
produces an empty list or None.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union
from urllib.parse import urlparse

from enrichment_engine.enrichment.schemas import (
    NOT_SPECIFIED,
    Achievement,
    CompanyInfo,
    CurrentRole,
    EducationEntry,
    GitHubProfile,
    Interview,
    JobHistoryEntry,
    LinkedInProfile,
    NewsArticle,
    ProviderResult,
    PublicActivity,
    Publication,
    SocialProfile,
    SubjectDescriptor,
    TwitterProfile,
)

logger = logging.getLogger(__name__)

SocialHandle = Union[TwitterProfile, GitHubProfile, LinkedInProfile, SocialProfile]


@dataclass(frozen=True)
class ExtractionRule:
    """A named, compiled pattern. Named groups carry the extracted values."""

    name: str
    pattern: re.Pattern

    def search(self, text: str) -> Optional[re.Match]:
        return self.pattern.search(text)

    def finditer(self, text: str) -> Iterator[re.Match]:
        return self.pattern.finditer(text)


def _rule(name: str, pattern: str, flags: int = 0) -> ExtractionRule:
    return ExtractionRule(name=name, pattern=re.compile(pattern, flags))


# ===========================================
# Shared helpers
# ===========================================

# Whitespace within one line; snippets are joined one per line
_SP = r"[^\S\n]+"

# A capitalised proper-noun run ("Stanford University", "University of Oxford")
_CAP_WORD = r"[A-Z][\w&'-]*"
_PROPER_NOUN = rf"{_CAP_WORD}(?:{_SP}(?:(?:of|the|for|and|de|&){_SP})*{_CAP_WORD})*"

# Place names may also carry commas ("Austin, Texas")
_PLACE = rf"[A-Z][\w'-]*(?:(?:,[^\S\n]*|{_SP})[A-Z][\w'-]*)*"

# One list clause, up to the end of the sentence
_LIST_CLAUSE = r"(?P<items>[^.!?\n]+)"

_LIST_SPLIT = re.compile(r"\s*(?:,|;|&|\band\b)\s*", re.IGNORECASE)
_MORE_WORD = re.compile(r"\bmore\b", re.IGNORECASE)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|\s*\n\s*")
_ITEM_STRIP = " \t\"'()[]:;-"

MIN_ITEM_LENGTH = 3
MAX_ITEM_WORDS = 8


def normalize_phrase(value: str) -> str:
    """Case-insensitive, whitespace-collapsed identity for list items."""
    return " ".join(value.split()).casefold()


def alnum_key(value: str) -> str:
    """Lowercase alphanumeric-only identity ("Acme, Inc." -> "acmeinc")."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


def _clean(value: Optional[str]) -> str:
    return " ".join((value or "").split())


def _split_items(clause: str) -> list[str]:
    items = []
    for raw in _LIST_SPLIT.split(clause):
        item = _clean(raw).strip(_ITEM_STRIP)
        if len(item) < MIN_ITEM_LENGTH:
            continue
        if _MORE_WORD.search(item):
            continue
        if len(item.split()) > MAX_ITEM_WORDS:
            continue
        items.append(item)
    return items


def _dedup_phrases(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for item in items:
        key = normalize_phrase(item)
        if key and key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text or "") if s.strip()]


def _parse_url(url: Optional[str]):
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return parsed


def _bare_host(hostname: str) -> str:
    host = hostname.lower()
    for prefix in ("www.", "mobile.", "m."):
        if host.startswith(prefix):
            return host[len(prefix):]
    return host


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def publisher_for(result: ProviderResult) -> str:
    """Publisher name: the backend's source field, else the bare host."""
    if result.source:
        return result.source
    parsed = _parse_url(result.link)
    return _bare_host(parsed.hostname) if parsed else "Web"


# ===========================================
# Current role
# ===========================================

_ROLE_SUFFIX = re.compile(r"\s*\|.*$")
_DASH = r"\s+[-\u2013\u2014]\s+"

ROLE_RULES: tuple[ExtractionRule, ...] = (
    _rule(
        "name_role_at_company",
        rf"^(?P<name>.+?){_DASH}(?P<title>.+?)\s+(?:(?i:at)\s+|@\s*)(?P<company>.+)$",
    ),
    _rule(
        "name_role_company",
        rf"^(?P<name>.+?){_DASH}(?P<title>.+?){_DASH}(?P<company>.+)$",
    ),
    _rule("role_company", rf"^(?P<title>.+?){_DASH}(?P<company>.+)$"),
)

MAX_ROLE_LENGTH = 100


def extract_current_role(
    title: Optional[str],
    subject_name: Optional[str] = None,
) -> Optional[CurrentRole]:
    """
    Extract the current role from a profile-style result title.

    Rules are tried in order and the first one producing a usable
    title/company pair wins. A captured title equal to the subject's name
    is a name, not a role, and is rejected.
    """
    text = _ROLE_SUFFIX.sub("", _clean(title))
    if not text:
        return None

    name_key = normalize_phrase(subject_name) if subject_name else None

    for rule in ROLE_RULES:
        match = rule.search(text)
        if not match:
            continue

        role = match.group("title").strip(_ITEM_STRIP)
        company = match.group("company").strip(_ITEM_STRIP)

        if not role or not company:
            continue
        if len(role) > MAX_ROLE_LENGTH or len(company) > MAX_ROLE_LENGTH:
            continue
        if name_key and normalize_phrase(role) == name_key:
            continue

        return CurrentRole(title=role, company=company)

    return None


# ===========================================
# Education and job history
# ===========================================

EDUCATION_RULE = _rule(
    "education_trigger",
    r"(?i:\b(?:studied|graduated|degree|education|attended|alumn(?:i|us|a)))\b"
    rf"[^.\n]*?\b(?i:at|from){_SP}"
    rf"(?P<institution>{_PROPER_NOUN})"
    rf"(?:[^\S\n]*,?{_SP}(?i:in){_SP}(?P<year>(?:19|20)\d{{2}})\b)?",
)

JOB_HISTORY_RULE = _rule(
    "job_history_trigger",
    r"(?i:\b(?:former(?:ly)?|previously|worked|served|co-founder|founder"
    r"|ceo|executive|director))\b"
    rf"[^.\n]*?\b(?i:at|with|of){_SP}"
    rf"(?P<company>{_PROPER_NOUN})",
)

# Trigger word -> inferred title, first match wins
JOB_TITLE_HINTS: tuple[tuple[str, str], ...] = (
    ("ceo", "CEO"),
    ("founder", "Founder"),
    ("executive", "Executive"),
    ("director", "Director"),
)
PREVIOUS_POSITION = "Previous Position"

MAX_NAME_LENGTH = 100


def extract_education(text: Optional[str]) -> list[EducationEntry]:
    """Education entries introduced by trigger phrases ("graduated from ...")."""
    entries: list[EducationEntry] = []
    seen: set[str] = set()

    for match in EDUCATION_RULE.finditer(text or ""):
        institution = match.group("institution").strip()
        key = normalize_phrase(institution)
        if len(institution) < MIN_ITEM_LENGTH or len(institution) > MAX_NAME_LENGTH:
            continue
        if key in seen:
            continue
        seen.add(key)
        entries.append(
            EducationEntry(
                institution=institution,
                degree=NOT_SPECIFIED,
                field=NOT_SPECIFIED,
                year=match.group("year"),
            )
        )

    return entries


def _infer_job_title(lead_in: str) -> str:
    lowered = lead_in.lower()
    for hint, title in JOB_TITLE_HINTS:
        if hint in lowered:
            return title
    return PREVIOUS_POSITION


def extract_job_history(text: Optional[str]) -> list[JobHistoryEntry]:
    """Past positions ("formerly CEO of Initech", "worked at Globex")."""
    entries: list[JobHistoryEntry] = []
    seen: set[str] = set()

    for match in JOB_HISTORY_RULE.finditer(text or ""):
        company = match.group("company").strip()
        key = alnum_key(company)
        if len(company) < MIN_ITEM_LENGTH or len(company) > MAX_NAME_LENGTH:
            continue
        if not key or key in seen:
            continue
        seen.add(key)
        entries.append(
            JobHistoryEntry(
                title=_infer_job_title(match.string[match.start() : match.start("company")]),
                company=company,
                duration=NOT_SPECIFIED,
            )
        )

    return entries


# ===========================================
# Skills
# ===========================================

SKILL_TRIGGER_RULES: tuple[ExtractionRule, ...] = (
    _rule("skills_label", rf"\bskills[^\S\n]*:[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule("expertise_label", rf"\bexpertise[^\S\n]*(?::|\bin\b)[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule("specialized_in", rf"\bspeciali[sz]ed{_SP}in[^\S\n]*:?[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule("proficient_in", rf"\bproficient{_SP}in[^\S\n]*:?[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule("expert_in", rf"\bexpert{_SP}in[^\S\n]*:?[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule("known_for", rf"\bknown{_SP}for[^\S\n]*:?[^\S\n]*{_LIST_CLAUSE}", re.IGNORECASE),
    _rule(
        "industry_experience",
        rf"\bindustry{_SP}experience{_SP}in{_SP}{_LIST_CLAUSE}",
        re.IGNORECASE,
    ),
)

SKILL_VERB_RULE = _rule(
    "verb_object",
    rf"\b(?:led|managed|founded|developed|built|designed|launched){_SP}{_LIST_CLAUSE}",
    re.IGNORECASE,
)


def extract_skills(text: Optional[str]) -> list[str]:
    """
    Skills and areas of expertise.

    Collects list items after trigger phrases ("skills:", "expert in") and
    the objects of achievement verbs ("led ...", "built ..."). Items are
    deduplicated case-insensitively, keeping the first spelling seen.
    """
    text = text or ""
    candidates: list[str] = []

    for rule in SKILL_TRIGGER_RULES:
        for match in rule.finditer(text):
            candidates.extend(_split_items(match.group("items")))

    for match in SKILL_VERB_RULE.finditer(text):
        candidates.extend(_split_items(match.group("items")))

    return _dedup_phrases(candidates)


# ===========================================
# Location and bio
# ===========================================

LOCATION_RULES: tuple[ExtractionRule, ...] = (
    _rule("based_in", rf"(?i:\bbased{_SP}in){_SP}(?P<place>{_PLACE})"),
    _rule("located_in", rf"(?i:\blocated{_SP}in){_SP}(?P<place>{_PLACE})"),
    _rule("lives_in", rf"(?i:\b(?:lives|living|residing){_SP}in){_SP}(?P<place>{_PLACE})"),
    _rule("is_from", rf"(?i:\b(?:is|hails|originally|comes){_SP}from){_SP}(?P<place>{_PLACE})"),
)

MAX_PLACE_LENGTH = 80

BIO_RULE = _rule("is_a", r"\b(?:is|was)\s+(?:an?|the)\s+\w", re.IGNORECASE)

MAX_BIO_LENGTH = 300


def extract_location(text: Optional[str]) -> Optional[str]:
    """Current location; the first rule in order that matches wins."""
    text = text or ""
    for rule in LOCATION_RULES:
        match = rule.search(text)
        if not match:
            continue
        place = match.group("place").strip(" ,")
        if MIN_ITEM_LENGTH <= len(place) <= MAX_PLACE_LENGTH:
            return place
    return None


def _name_tokens(subject_name: Optional[str]) -> list[str]:
    return [token for token in (subject_name or "").split() if len(token) >= 2]


def extract_short_bio(
    text: Optional[str],
    subject_name: Optional[str] = None,
) -> Optional[str]:
    """First descriptive sentence ("X is a British mathematician ...")."""
    tokens = _name_tokens(subject_name)

    for sentence in _sentences(text or ""):
        if not BIO_RULE.search(sentence):
            continue
        if tokens and not any(
            re.search(rf"\b{re.escape(token)}\b", sentence, re.IGNORECASE) for token in tokens
        ):
            continue
        if len(sentence) > MAX_BIO_LENGTH:
            continue
        return sentence

    return None


# ===========================================
# Achievements and dates
# ===========================================

DATE_RULE = _rule(
    "month_day_year",
    r"\b(?P<date>(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?"
    r"|Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?"
    r"|Dec(?:ember)?)\.?\s+\d{1,2},?\s+\d{4})\b",
    re.IGNORECASE,
)

ACHIEVEMENT_RULE = _rule(
    "achievement_keyword",
    r"\b(?:awards?|awarded|achievements?|recognition|recogni[sz]ed|honou?rs?|honou?red"
    r"|prizes?)\b",
    re.IGNORECASE,
)


def extract_date(text: Optional[str]) -> Optional[str]:
    """Month-name date ("March 3, 2021"), or None."""
    match = DATE_RULE.search(text or "")
    return _clean(match.group("date")) if match else None


def extract_achievements(results: Optional[Iterable[ProviderResult]]) -> list[Achievement]:
    """One achievement per result whose snippet mentions an award or honor."""
    achievements = []

    for result in results or ():
        if not ACHIEVEMENT_RULE.search(result.snippet):
            continue
        title = _clean(result.title) or _sentences(result.snippet)[0]
        achievements.append(
            Achievement(
                title=title,
                description=_clean(result.snippet) or None,
                date=extract_date(result.snippet) or extract_date(result.title) or result.date,
            )
        )

    return achievements


# ===========================================
# Interests
# ===========================================

# Topic label -> pattern, in display order
TOPIC_RULES: tuple[ExtractionRule, ...] = (
    _rule("Technology", r"(?i:\btechnology\b|\bsoftware\b)"),
    _rule("Artificial Intelligence", r"(?i:\bartificial intelligence\b|\bmachine learning\b)|\bAI\b"),
    _rule("Space Exploration", r"(?i:\bspace exploration\b|\bspacex\b|\baerospace\b)"),
    _rule("Electric Vehicles", r"(?i:\belectric vehicles?\b|\btesla\b)|\bEVs?\b"),
    _rule("Finance", r"(?i:\bfintech\b|\bfinance\b|\bventure capital\b|\binvesting\b)"),
    _rule("Healthcare", r"(?i:\bhealthcare\b|\bbiotech\w*\b|\bmedicine\b)"),
    _rule("Sustainability", r"(?i:\bsustainability\b|\bclimate\b|\brenewable energy\b)"),
    _rule("Entrepreneurship", r"(?i:\bentrepreneur\w*\b|\bstartups?\b)"),
)

INTERESTED_IN_RULE = _rule("interested_in", rf"\binterested{_SP}in{_SP}{_LIST_CLAUSE}", re.IGNORECASE)

HOBBY_RULE = _rule(
    "hobbies",
    rf"\bhobbies[^\S\n]*(?:includes|include|are|:)[^\S\n]*:?[^\S\n]*{_LIST_CLAUSE}",
    re.IGNORECASE,
)

FOUNDING_RULE = _rule("founding", r"\b(?:founded|launched|started|established)\b", re.IGNORECASE)
COMMUNITY_RULE = _rule(
    "community",
    r"\b(?:volunteer|mentor|speak|organi[sz]e)\w*[^.!?\n]*",
    re.IGNORECASE,
)

FOUNDING_ACTIVITY = "Public Activity"
COMMUNITY_ACTIVITY = "Community Involvement"


def extract_topics(text: Optional[str]) -> list[str]:
    """Topic labels from the keyword table, then "interested in" lists."""
    text = text or ""
    topics = [rule.name for rule in TOPIC_RULES if rule.search(text)]

    for match in INTERESTED_IN_RULE.finditer(text):
        topics.extend(_split_items(match.group("items")))

    return _dedup_phrases(topics)


def extract_hobbies(text: Optional[str]) -> list[str]:
    hobbies: list[str] = []
    for match in HOBBY_RULE.finditer(text or ""):
        hobbies.extend(_split_items(match.group("items")))
    return _dedup_phrases(hobbies)


def extract_public_activities(
    results: Optional[Iterable[ProviderResult]],
    source: Optional[str] = None,
) -> list[PublicActivity]:
    """
    Public activities from result snippets.

    A snippet that mentions founding or launching something contributes its
    first sentence; volunteering, mentoring, speaking and organizing
    contribute the clause that mentions them.
    """
    activities: list[PublicActivity] = []
    seen: set[str] = set()

    def add(kind: str, description: str, result: ProviderResult) -> None:
        description = _clean(description)
        key = normalize_phrase(description)
        if len(description) < MIN_ITEM_LENGTH or key in seen:
            return
        seen.add(key)
        activities.append(
            PublicActivity(type=kind, description=description, source=source or publisher_for(result))
        )

    for result in results or ():
        sentences = _sentences(result.snippet)
        if not sentences:
            continue

        if FOUNDING_RULE.search(result.snippet):
            first = sentences[0]
            add(FOUNDING_ACTIVITY, first if first.endswith((".", "!", "?")) else first + ".", result)

        for match in COMMUNITY_RULE.finditer(result.snippet):
            add(COMMUNITY_ACTIVITY, match.group(0), result)

    return activities


# ===========================================
# Social handles
# ===========================================

TWITTER_DOMAINS = ("twitter.com", "x.com")
GITHUB_DOMAIN = "github.com"
LINKEDIN_DOMAIN = "linkedin.com"

# Other platforms recognised as identity pages, domain -> platform name
OTHER_PLATFORMS: dict[str, str] = {
    "instagram.com": "instagram",
    "facebook.com": "facebook",
    "youtube.com": "youtube",
    "medium.com": "medium",
    "tiktok.com": "tiktok",
    "threads.net": "threads",
    "dev.to": "dev.to",
}

# Platform navigation sub-pages, never a handle
NAVIGATION_SEGMENTS = frozenset(
    {"with_replies", "media", "likes", "following", "followers", "highlights"}
)

# Top-level routes that are not user pages
TWITTER_RESERVED = frozenset(
    {
        "search", "explore", "home", "hashtag", "i", "intent", "share", "settings",
        "notifications", "messages", "login", "signup", "tos", "privacy", "about", "topics",
    }
)
GITHUB_RESERVED = frozenset(
    {
        "about", "apps", "collections", "contact", "enterprise", "events", "explore",
        "features", "issues", "join", "login", "marketplace", "new", "notifications",
        "orgs", "pricing", "pulls", "search", "settings", "site", "sponsors", "topics",
        "trending",
    }
)
OTHER_RESERVED = frozenset(
    {"p", "reel", "reels", "watch", "pages", "groups", "search", "explore", "tag", "hashtag"}
)

_TWITTER_HANDLE = re.compile(r"^[A-Za-z0-9_]{1,15}$")
_GITHUB_USERNAME = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
_GENERIC_USERNAME = re.compile(r"^[\w.-]{2,64}$")


def _first_segment(path: str) -> Optional[str]:
    segments = [s for s in path.split("/") if s]
    return segments[0] if segments else None


def _identity_segment(segment: Optional[str], reserved: frozenset) -> Optional[str]:
    if not segment:
        return None
    handle = segment.lstrip("@")
    lowered = handle.lower()
    if lowered in reserved or lowered in NAVIGATION_SEGMENTS:
        return None
    return handle


def extract_social_profile(url: Optional[str], snippet: Optional[str] = None) -> Optional[SocialHandle]:
    """
    Classify a result URL as a social identity page.

    The handle is the first path segment; query strings, fragments and any
    navigation sub-page after the handle are ignored. Returns None for URLs
    that are not a recognisable profile page.
    """
    parsed = _parse_url(url)
    if parsed is None:
        return None

    host = _bare_host(parsed.hostname)
    scheme = parsed.scheme
    segment = _first_segment(parsed.path)

    if any(_host_matches(host, domain) for domain in TWITTER_DOMAINS):
        handle = _identity_segment(segment, TWITTER_RESERVED)
        if not handle or not _TWITTER_HANDLE.match(handle):
            logger.debug(f"Not a Twitter profile URL: {url}")
            return None
        return TwitterProfile(
            handle=handle,
            url=f"{scheme}://{host}/{handle}",
            bio=_clean(snippet) or None,
        )

    if _host_matches(host, GITHUB_DOMAIN):
        username = _identity_segment(segment, GITHUB_RESERVED)
        if not username or not _GITHUB_USERNAME.match(username):
            logger.debug(f"Not a GitHub profile URL: {url}")
            return None
        return GitHubProfile(username=username, url=f"https://github.com/{username}")

    if _host_matches(host, LINKEDIN_DOMAIN):
        segments = [s for s in parsed.path.split("/") if s]
        if len(segments) >= 2 and segments[0].lower() == "in":
            return LinkedInProfile(url=f"https://www.linkedin.com/in/{segments[1]}")
        return None

    for domain, platform in OTHER_PLATFORMS.items():
        if not _host_matches(host, domain):
            continue
        username = _identity_segment(segment, OTHER_RESERVED)
        if not username or not _GENERIC_USERNAME.match(username):
            return None
        return SocialProfile(
            platform=platform,
            url=f"{scheme}://{host}{parsed.path.rstrip('/')}",
            username=username,
        )

    return None


# ===========================================
# Media presence
# ===========================================

MAX_NEWS_ARTICLES = 5

INTERVIEW_RULE = _rule("interview", r"\binterview\w*\b|\bpodcast\b|\bQ&A\b|\bfireside chat\b", re.IGNORECASE)
PUBLICATION_RULE = _rule(
    "publication",
    r"\b(?P<kind>op-ed|opinion|column|essay|wrote|writes|authored|published|book|paper)\b",
    re.IGNORECASE,
)

# Publication keyword -> publication type
PUBLICATION_TYPES: dict[str, str] = {"book": "book", "paper": "paper"}


def _is_linkedin(result: ProviderResult) -> bool:
    return _host_matches(_bare_host(result.host), LINKEDIN_DOMAIN)


def _result_date(result: ProviderResult) -> Optional[str]:
    return result.date or extract_date(result.snippet)


def extract_news_articles(
    results: Optional[Iterable[ProviderResult]],
    limit: int = MAX_NEWS_ARTICLES,
) -> list[NewsArticle]:
    articles: list[NewsArticle] = []

    for result in results or ():
        if len(articles) >= limit:
            break
        if _is_linkedin(result) or not _clean(result.title):
            continue
        articles.append(
            NewsArticle(
                title=_clean(result.title),
                source=publisher_for(result),
                url=result.link,
                date=_result_date(result),
                snippet=_clean(result.snippet) or None,
            )
        )

    return articles


def extract_interviews(results: Optional[Iterable[ProviderResult]]) -> list[Interview]:
    interviews = []
    for result in results or ():
        if _is_linkedin(result) or not _clean(result.title):
            continue
        if not INTERVIEW_RULE.search(result.text):
            continue
        interviews.append(
            Interview(
                title=_clean(result.title),
                platform=publisher_for(result),
                url=result.link,
                date=_result_date(result),
            )
        )
    return interviews


def extract_publications(results: Optional[Iterable[ProviderResult]]) -> list[Publication]:
    publications = []
    for result in results or ():
        if _is_linkedin(result) or not _clean(result.title):
            continue
        match = PUBLICATION_RULE.search(result.text)
        if not match:
            continue
        publications.append(
            Publication(
                title=_clean(result.title),
                platform=publisher_for(result),
                url=result.link,
                date=_result_date(result),
                type=PUBLICATION_TYPES.get(match.group("kind").lower(), "article"),
            )
        )
    return publications


# ===========================================
# Companies
# ===========================================

_TITLE_SEPARATOR = re.compile(r"\s+[-|\u2013\u2014:]\s+|\s*\|\s*")


def extract_company_profile(
    results: Optional[Iterable[ProviderResult]],
    subject: Optional[SubjectDescriptor] = None,
) -> Optional[CompanyInfo]:
    """
    Company summary from the top company-search result.

    The role is the subject's own ownership role when the company name
    matches the subject's current company, otherwise "Unknown".
    """
    top = next((r for r in results or () if _clean(r.title)), None)
    if top is None:
        return None

    name = _TITLE_SEPARATOR.split(_clean(top.title))[0].strip()
    if len(name) < 2:
        return None

    role = "Unknown"
    if subject is not None and subject.current_company:
        own, found = alnum_key(subject.current_company), alnum_key(name)
        if own and found and (own in found or found in own):
            role = subject.current_company_role or "Unknown"

    return CompanyInfo(
        name=name,
        role=role,
        description=_clean(top.snippet) or None,
        website=top.link,
    )
