# tests/enrichment/test_queries.py
"""
Unit tests for search query generation.
"""

from enrichment_engine.enrichment.queries import generate_queries
from enrichment_engine.enrichment.schemas import (
    CompanyOwnership,
    FamilyDetails,
    ProviderCategory,
    SubjectDescriptor,
)


def subject(**kwargs) -> SubjectDescriptor:
    return SubjectDescriptor(name=kwargs.pop("name", "Ada Lovelace"), **kwargs)


class TestGenerateQueries:
    def test_name_only(self):
        """Test queries for a name-only subject."""
        queries = generate_queries(subject())

        assert queries.professional == "Ada+Lovelace site%3Alinkedin.com%2Fin%2F"
        assert queries.decoded(ProviderCategory.PROFESSIONAL) == "Ada Lovelace site:linkedin.com/in/"
        assert queries.decoded(ProviderCategory.ENCYCLOPEDIA) == "Ada Lovelace site:wikipedia.org"
        assert queries.decoded(ProviderCategory.COMPANY) == "Ada Lovelace company information funding"

    def test_every_category_has_a_query_with_the_name(self):
        """Test every category query starts with the name."""
        queries = generate_queries(subject())

        for category in ProviderCategory:
            assert queries.for_category(category).startswith("Ada+Lovelace ")

    def test_company_appended_except_social(self):
        """Test the company is added to every query but social."""
        queries = generate_queries(
            subject(company_ownership=[CompanyOwnership(company_name="Analytical Engines", role="Founder")])
        )

        assert queries.decoded(ProviderCategory.PROFESSIONAL).startswith("Ada Lovelace Analytical Engines ")
        assert queries.decoded(ProviderCategory.NEWS).startswith("Ada Lovelace Analytical Engines ")
        assert queries.decoded(ProviderCategory.COMPANY).startswith("Ada Lovelace Analytical Engines ")
        assert "Analytical" not in queries.decoded(ProviderCategory.SOCIAL)

    def test_only_first_company_is_used(self):
        """Test only the first company is used."""
        queries = generate_queries(
            subject(
                company_ownership=[
                    CompanyOwnership(company_name="First Co"),
                    CompanyOwnership(company_name="Second Co"),
                ]
            )
        )

        assert "First+Co" in queries.news
        assert "Second" not in queries.news

    def test_spouse_appended_to_social_only(self):
        """Test the spouse is added to the social query only."""
        queries = generate_queries(subject(family_details=FamilyDetails(spouse="William King")))

        social = queries.decoded(ProviderCategory.SOCIAL)
        assert social.startswith("Ada Lovelace William King (site:twitter.com")
        assert "William" not in queries.decoded(ProviderCategory.PROFESSIONAL)

    def test_blank_optional_fields_are_omitted(self):
        """Test blank optional fields are left out."""
        queries = generate_queries(subject(family_details=FamilyDetails(spouse="   ")))

        assert "  " not in queries.social
        assert queries.social.startswith("Ada+Lovelace %28site")

    def test_special_characters_are_encoded(self):
        """Test special characters are URL-encoded."""
        queries = generate_queries(
            subject(name="Zoë O'Brien", company_ownership=[CompanyOwnership(company_name="R&D Labs")])
        )

        assert "&" not in queries.news
        assert queries.decoded(ProviderCategory.NEWS).startswith("Zoë O'Brien R&D Labs ")
