"""
Unit tests for BasicEnrichmentProvider.

Run: python3 -m pytest enrichment/__tests__/test_provider.py -v
"""

import pytest

from enrichment.provider import BasicEnrichmentProvider, extract_requirements, seniority
from models.records import JobRecord
from utils.errors import ProviderError


def record_with(**payload) -> JobRecord:
    return JobRecord(id="job-1", fingerprint="f" * 64, source_name="test", payload=payload)


class TestBasicEnrichmentProvider:
    """Tests for enrich()."""

    def test_derives_fields_from_payload(self):
        record = record_with(
            company="Hugging Face",
            role="Senior Backend Engineer",
            location="worldwide",
            description="You have 5+ years of Python experience. We run on AWS and Kubernetes.",
            tags=["backend"],
        )

        fields = BasicEnrichmentProvider().enrich(record)

        assert fields["location"] == "Remote"
        assert fields["remote"] is True
        assert fields["seniority"] == "senior"
        assert fields["company_logo"] == "https://logo.clearbit.com/huggingface.com"
        assert fields["tags"][0] == "backend"
        assert {"Python", "AWS", "Kubernetes"} <= set(fields["tags"])
        assert fields["requirements"] == ["You have 5+ years of Python experience."]
        assert fields["summary"].startswith("You have 5+ years")

    def test_prefers_scraped_requirements_and_logo(self):
        record = record_with(
            company="Acme",
            role="Engineer",
            location="Berlin",
            description="",
            requirements=["Go", "SQL"],
            company_logo="https://cdn.example.com/acme.png",
        )

        fields = BasicEnrichmentProvider().enrich(record)

        assert fields["requirements"] == ["Go", "SQL"]
        assert fields["company_logo"] == "https://cdn.example.com/acme.png"
        assert fields["remote"] is False

    @pytest.mark.parametrize("payload", [
        {"company": "Acme"},
        {"role": "Engineer"},
        {"company": "  ", "role": "Engineer"},
    ])
    def test_missing_company_or_role_raises(self, payload):
        with pytest.raises(ProviderError):
            BasicEnrichmentProvider().enrich(record_with(**payload))


class TestHelpers:
    """Tests for seniority() and extract_requirements()."""

    @pytest.mark.parametrize("role,level", [
        ("Staff Software Engineer", "staff"),
        ("Sr. Data Engineer", "senior"),
        ("Junior Developer", "junior"),
        ("Software Engineering Intern", "intern"),
        ("Principal Architect", "principal"),
        ("Backend Engineer", "mid"),
    ])
    def test_seniority(self, role, level):
        assert seniority(role) == level

    def test_extract_requirements_limit(self):
        text = " ".join(f"Experience with tool{i}." for i in range(20))

        assert len(extract_requirements(text, limit=3)) == 3
