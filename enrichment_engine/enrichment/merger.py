# enrichment_engine/enrichment/merger.py
"""
Merge per-provider partial profiles into one EnrichedProfile.

Merge policy:
- Partials are re-ordered by PROVIDER_PRECEDENCE first, so the outcome never
  depends on which provider answered first.
- Scalar fields (currentRole, shortBio, currentLocation, profilePictureUrl):
  first non-empty value wins.
- Social slots (linkedIn, twitter, github): first non-empty wins, per slot.
- Lists: concatenated in precedence order, then deduplicated on a
  normalized identity; the first occurrence is kept.
- basicInfo.name always comes from the subject.
"""

from typing import Callable, Iterable, Optional, TypeVar

from enrichment_engine.enrichment.extractors import alnum_key, normalize_phrase
from enrichment_engine.enrichment.schemas import (
    PROVIDER_PRECEDENCE,
    BasicInfo,
    EnrichedProfile,
    Interests,
    MediaPresence,
    PartialProfile,
    Professional,
    Social,
    SubjectDescriptor,
)

T = TypeVar("T")

_PRECEDENCE_RANK = {category: rank for rank, category in enumerate(PROVIDER_PRECEDENCE)}


def _first(values: Iterable[Optional[T]]) -> Optional[T]:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _dedup(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    seen: set[str] = set()
    unique = []
    for item in items:
        identity = key(item)
        if not identity or identity in seen:
            continue
        seen.add(identity)
        unique.append(item)
    return unique


def _concat(partials: list[PartialProfile], getter: Callable[[PartialProfile], list[T]]) -> list[T]:
    return [item for partial in partials for item in getter(partial)]


def order_by_precedence(partials: Iterable[PartialProfile]) -> list[PartialProfile]:
    """Stable sort by provider precedence."""
    return sorted(partials, key=lambda p: _PRECEDENCE_RANK.get(p.category, len(_PRECEDENCE_RANK)))


def _strip_phrase(value: str) -> str:
    return " ".join(value.split())


def merge(subject: SubjectDescriptor, partials: Iterable[PartialProfile]) -> EnrichedProfile:
    """
    Merge partial profiles under the fixed provider precedence.

    Args:
        subject: Subject being enriched; its name is copied verbatim
        partials: Partial profiles in any order

    Returns:
        Complete EnrichedProfile with every list present
    """
    ordered = order_by_precedence(partials)

    basic_info = BasicInfo(
        name=subject.name,
        current_location=_first(p.basic_info.current_location for p in ordered),
        profile_picture_url=_first(p.basic_info.profile_picture_url for p in ordered),
        short_bio=_first(p.basic_info.short_bio for p in ordered),
    )

    professional = Professional(
        current_role=_first(p.professional.current_role for p in ordered),
        job_history=_dedup(
            _concat(ordered, lambda p: p.professional.job_history),
            key=lambda job: alnum_key(job.company),
        ),
        education=_dedup(
            _concat(ordered, lambda p: p.professional.education),
            key=lambda edu: normalize_phrase(edu.institution),
        ),
        skills=[
            _strip_phrase(skill)
            for skill in _dedup(_concat(ordered, lambda p: p.professional.skills), key=normalize_phrase)
        ],
        achievements=_dedup(
            _concat(ordered, lambda p: p.professional.achievements),
            key=lambda a: normalize_phrase(a.title),
        ),
    )

    social = Social(
        linked_in=_first(p.social.linked_in for p in ordered),
        twitter=_first(p.social.twitter for p in ordered),
        github=_first(p.social.github for p in ordered),
        other=_dedup(_concat(ordered, lambda p: p.social.other), key=lambda s: s.url),
    )

    media_presence = MediaPresence(
        news_articles=_dedup(
            _concat(ordered, lambda p: p.media_presence.news_articles), key=lambda a: a.url
        ),
        interviews=_dedup(
            _concat(ordered, lambda p: p.media_presence.interviews), key=lambda i: i.url
        ),
        publications=_dedup(
            _concat(ordered, lambda p: p.media_presence.publications), key=lambda pub: pub.url
        ),
    )

    interests = Interests(
        topics=[
            _strip_phrase(topic)
            for topic in _dedup(_concat(ordered, lambda p: p.interests.topics), key=normalize_phrase)
        ],
        hobbies=[
            _strip_phrase(hobby)
            for hobby in _dedup(_concat(ordered, lambda p: p.interests.hobbies), key=normalize_phrase)
        ],
        public_activities=_dedup(
            _concat(ordered, lambda p: p.interests.public_activities),
            key=lambda a: normalize_phrase(a.description),
        ),
    )

    companies = _dedup(
        _concat(ordered, lambda p: p.companies),
        key=lambda c: alnum_key(c.name),
    )

    return EnrichedProfile(
        basic_info=basic_info,
        professional=professional,
        social=social,
        media_presence=media_presence,
        interests=interests,
        companies=companies,
    )
