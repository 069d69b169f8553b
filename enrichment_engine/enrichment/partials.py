# enrichment_engine/enrichment/partials.py
"""
Per-provider profile assembly.

Each provider category has its own builder that runs the extractors suited
to what that provider returns and packs the results into a PartialProfile.
The professional and encyclopedia builders trust the single top result for
scalar fields; list fields are extracted from the concatenated snippets.
"""

import logging
from typing import Callable, Optional

from enrichment_engine.enrichment import extractors
from enrichment_engine.enrichment.schemas import (
    GitHubProfile,
    LinkedInProfile,
    PartialProfile,
    ProviderCategory,
    ProviderResult,
    SocialProfile,
    SubjectDescriptor,
    TwitterProfile,
)

logger = logging.getLogger(__name__)


def concatenated_text(results: list[ProviderResult]) -> str:
    """Titles and snippets of a result set, one result per line."""
    return "\n".join(r.text for r in results if r.text)


def _snippets(results: list[ProviderResult]) -> str:
    return "\n".join(r.snippet for r in results if r.snippet)


def _professional(results: list[ProviderResult], subject: SubjectDescriptor) -> PartialProfile:
    partial = PartialProfile(category=ProviderCategory.PROFESSIONAL)
    top = results[0]
    text = _snippets(results)

    handle = extractors.extract_social_profile(top.link)
    if isinstance(handle, LinkedInProfile):
        partial.social.linked_in = handle

    partial.professional.current_role = extractors.extract_current_role(top.title, subject.name)
    partial.professional.education = extractors.extract_education(text)
    partial.professional.job_history = extractors.extract_job_history(text)
    partial.professional.skills = extractors.extract_skills(text)

    partial.basic_info.profile_picture_url = top.thumbnail
    partial.basic_info.current_location = extractors.extract_location(text)
    partial.basic_info.short_bio = extractors.extract_short_bio(text, subject.name)
    return partial


def _news(results: list[ProviderResult], subject: SubjectDescriptor) -> PartialProfile:
    partial = PartialProfile(category=ProviderCategory.NEWS)
    text = concatenated_text(results)

    partial.media_presence.news_articles = extractors.extract_news_articles(results)
    partial.media_presence.interviews = extractors.extract_interviews(results)
    partial.media_presence.publications = extractors.extract_publications(results)

    partial.professional.achievements = extractors.extract_achievements(results)
    partial.professional.skills = extractors.extract_skills(text)

    partial.interests.topics = extractors.extract_topics(text)
    partial.interests.public_activities = extractors.extract_public_activities(results)
    return partial


def _social(results: list[ProviderResult], subject: SubjectDescriptor) -> PartialProfile:
    partial = PartialProfile(category=ProviderCategory.SOCIAL)
    social = partial.social

    # First profile per platform wins
    for result in results:
        handle = extractors.extract_social_profile(result.link, result.snippet)
        if isinstance(handle, TwitterProfile):
            social.twitter = social.twitter or handle
        elif isinstance(handle, GitHubProfile):
            social.github = social.github or handle
        elif isinstance(handle, LinkedInProfile):
            social.linked_in = social.linked_in or handle
        elif isinstance(handle, SocialProfile):
            if all(existing.url != handle.url for existing in social.other):
                social.other.append(handle)

    partial.interests.hobbies = extractors.extract_hobbies(concatenated_text(results))
    return partial


def _company(results: list[ProviderResult], subject: SubjectDescriptor) -> PartialProfile:
    partial = PartialProfile(category=ProviderCategory.COMPANY)
    company = extractors.extract_company_profile(results, subject)
    if company is not None:
        partial.companies.append(company)
    return partial


def _encyclopedia(results: list[ProviderResult], subject: SubjectDescriptor) -> PartialProfile:
    partial = PartialProfile(category=ProviderCategory.ENCYCLOPEDIA)
    top = results[0]
    text = _snippets(results)

    partial.basic_info.short_bio = (
        extractors.extract_short_bio(top.snippet, subject.name) or top.snippet.strip() or None
    )
    partial.basic_info.current_location = extractors.extract_location(top.snippet)

    partial.professional.education = extractors.extract_education(text)
    partial.professional.achievements = extractors.extract_achievements(results)
    partial.interests.topics = extractors.extract_topics(text)
    return partial


PartialBuilder = Callable[[list[ProviderResult], SubjectDescriptor], PartialProfile]

PARTIAL_BUILDERS: dict[ProviderCategory, PartialBuilder] = {
    ProviderCategory.PROFESSIONAL: _professional,
    ProviderCategory.NEWS: _news,
    ProviderCategory.SOCIAL: _social,
    ProviderCategory.COMPANY: _company,
    ProviderCategory.ENCYCLOPEDIA: _encyclopedia,
}


def build_partial(
    category: ProviderCategory,
    results: Optional[list[ProviderResult]],
    subject: SubjectDescriptor,
) -> PartialProfile:
    """
    Run the extractors for one provider's result set.

    Args:
        category: Provider category the results came from
        results: Validated results, possibly empty
        subject: Subject being enriched

    Returns:
        PartialProfile tagged with the category; empty when there are no results
    """
    if not results:
        return PartialProfile(category=category)

    partial = PARTIAL_BUILDERS[category](results, subject)
    logger.debug(f"Built {category.value} partial from {len(results)} results")
    return partial
