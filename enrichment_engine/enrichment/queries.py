# enrichment_engine/enrichment/queries.py
"""
Search query generation.

Builds one search string per provider category from a subject descriptor.
Each term is URL-encoded on its own and the terms are joined with a plain
space, so a query can be dropped straight into a search URL.
"""

from typing import Optional
from urllib.parse import quote_plus

from enrichment_engine.enrichment.schemas import ProviderCategory, QuerySet, SubjectDescriptor

# Site restriction or category filter appended to each query
CATEGORY_FILTERS: dict[ProviderCategory, str] = {
    ProviderCategory.PROFESSIONAL: "site:linkedin.com/in/",
    ProviderCategory.NEWS: "(interview OR article OR news OR press)",
    ProviderCategory.SOCIAL: (
        "(site:twitter.com OR site:x.com OR site:github.com OR site:instagram.com)"
    ),
    ProviderCategory.COMPANY: "company information funding",
    ProviderCategory.ENCYCLOPEDIA: "site:wikipedia.org",
}


def _encode_terms(*terms: Optional[str]) -> str:
    return " ".join(quote_plus(term.strip()) for term in terms if term and term.strip())


def build_query(category: ProviderCategory, subject: SubjectDescriptor) -> str:
    """Build the encoded query for a single category."""
    if category == ProviderCategory.SOCIAL:
        qualifier = subject.spouse_name
    else:
        qualifier = subject.current_company

    return _encode_terms(subject.name, qualifier, CATEGORY_FILTERS[category])


def generate_queries(subject: SubjectDescriptor) -> QuerySet:
    """
    Generate the per-category query set for a subject.

    Args:
        subject: Validated subject descriptor

    Returns:
        QuerySet with one encoded query string per provider category
    """
    return QuerySet(**{category.value: build_query(category, subject) for category in ProviderCategory})
