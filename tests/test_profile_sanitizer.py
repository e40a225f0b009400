"""
Tests for turning stored profile records into personalization facts.
"""

import pytest

from app.models.schemas import RawProfile
from app.services.profile_sanitizer import sanitize


class TestAbsentProfiles:
    def test_none_returns_none(self):
        assert sanitize(None) is None

    @pytest.mark.parametrize(
        "record",
        [
            {},
            {"fullName": "", "skills": "   ", "experience": "\n\t", "title": ""},
            {"certifications": "  ", "portfolio": "", "linkedIn": " ", "github": None},
        ],
    )
    def test_blank_or_missing_fields_return_none(self, record):
        assert sanitize(record) is None

    def test_name_and_preference_alone_are_not_enough(self):
        assert sanitize({"fullName": "Ada Lovelace", "preferredModel": "gemini"}) is None

    def test_invalid_urls_alone_are_not_enough(self):
        assert sanitize({"portfolio": "not-a-url", "github": "github.com/ada"}) is None

    def test_non_string_values_are_ignored(self):
        assert sanitize({"skills": ["Go"], "experience": 5, "title": {"x": 1}}) is None

    def test_non_mapping_record_returns_none(self):
        assert sanitize("not a record") is None


class TestFacts:
    def test_strings_are_trimmed(self):
        facts = sanitize({"skills": "  Go, PostgreSQL  ", "fullName": " Ada "})

        assert facts.skills == "Go, PostgreSQL"
        assert facts.full_name == "Ada"

    def test_blank_strings_are_dropped(self):
        facts = sanitize({"skills": "Go", "title": "   "})

        assert facts.title is None
        assert "title" not in facts.model_dump(exclude_none=True)

    def test_invalid_portfolio_is_dropped_even_with_other_fields(self):
        facts = sanitize({"skills": "Go", "experience": "5 years backend", "portfolio": "not-a-url"})

        assert facts is not None
        assert facts.portfolio is None
        assert "portfolio" not in facts.model_dump(exclude_none=True)

    def test_urls_are_validated_independently(self):
        facts = sanitize(
            {
                "portfolio": "https://ada.dev",
                "linkedIn": "linkedin.com/in/ada",
                "github": "  https://github.com/ada  ",
            }
        )

        assert facts.portfolio == "https://ada.dev"
        assert facts.linkedin is None
        assert facts.github == "https://github.com/ada"

    def test_single_valid_url_makes_facts_present(self):
        facts = sanitize({"github": "https://github.com/ada"})

        assert facts is not None
        assert facts.github == "https://github.com/ada"

    @pytest.mark.parametrize("field", ["skills", "experience", "title", "certifications"])
    def test_any_signal_field_makes_facts_present(self, field):
        record = {"skills": "", "experience": "", "title": "", "certifications": ""}
        record[field] = "something"

        facts = sanitize(record)

        assert facts is not None
        assert getattr(facts, field) == "something"

    def test_accepts_raw_profile_instances(self):
        raw = RawProfile(skills="Go", portfolio="my portfolio")

        facts = sanitize(raw)

        assert facts.skills == "Go"
        assert facts.portfolio is None

    def test_host_less_http_url_is_dropped(self):
        facts = sanitize({"skills": "Go", "portfolio": "https://"})

        assert facts.portfolio is None

    def test_input_is_not_mutated(self):
        record = {"skills": "  Go  ", "portfolio": "not-a-url"}

        sanitize(record)

        assert record == {"skills": "  Go  ", "portfolio": "not-a-url"}
