"""Tests for context retrieval models."""

from datetime import datetime, timezone

import pytest

from meetprep.context.models import (
    ContextConfiguration,
    ContextMatch,
    ContextRetrievalResult,
    Meeting,
    RelevanceWeights,
)


class TestRelevanceWeights:
    def test_defaults(self):
        weights = RelevanceWeights()

        assert weights.to_dict() == {
            "title": 0.4,
            "content": 0.3,
            "tags": 0.2,
            "attendees": 0.1,
            "flex_search_bonus": 0.2,
            "recency_bonus": 0.15,
        }

    def test_from_dict_accepts_camel_case(self):
        weights = RelevanceWeights.from_dict(
            {"title": 0.5, "flexSearchBonus": 0.1, "recencyBonus": 0.05, "unknown": 3}
        )

        assert weights.title == 0.5
        assert weights.flex_search_bonus == 0.1
        assert weights.recency_bonus == 0.05
        assert weights.content == 0.3

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_out_of_range(self, value):
        with pytest.raises(ValueError, match="between 0 and 1"):
            RelevanceWeights(title=value)

    @pytest.mark.parametrize("value", ["0.4", None, True])
    def test_not_a_number(self, value):
        with pytest.raises(TypeError, match="must be a number"):
            RelevanceWeights(tags=value)

    def test_frozen(self):
        weights = RelevanceWeights()
        with pytest.raises(AttributeError):
            weights.title = 0.9  # type: ignore[misc]


class TestContextConfiguration:
    def test_defaults(self):
        config = ContextConfiguration()

        assert config.enabled is True
        assert config.max_results == 10
        assert config.min_relevance_score == 0.15
        assert config.include_snippets is True
        assert config.snippet_length == 400

    def test_validation(self):
        with pytest.raises(ValueError, match="max_results"):
            ContextConfiguration(max_results=0)
        with pytest.raises(ValueError, match="min_relevance_score"):
            ContextConfiguration(min_relevance_score=1.5)
        with pytest.raises(ValueError, match="snippet_length"):
            ContextConfiguration(snippet_length=5)


class TestMeeting:
    def test_from_dict_camel_case(self):
        meeting = Meeting.from_dict(
            {
                "title": "Acme Kickoff",
                "attendees": ["Jane Doe <jane@acme.com>", ""],
                "startDate": "2024-01-10T09:00:00Z",
                "endDate": "2024-01-10T10:00:00+00:00",
            }
        )

        assert meeting.title == "Acme Kickoff"
        assert meeting.attendees == ["Jane Doe <jane@acme.com>"]
        assert meeting.start_date == datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
        assert meeting.end_date == datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc)

    def test_from_dict_tolerates_bad_values(self):
        meeting = Meeting.from_dict({"title": None, "attendees": "solo@acme.com", "start_date": "soon"})

        assert meeting.title == ""
        assert meeting.attendees == ["solo@acme.com"]
        assert meeting.start_date is None


class TestSerialization:
    def test_result_to_dict(self):
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)
        result = ContextRetrievalResult(
            matches=[
                ContextMatch(
                    path="/vault/a.md",
                    title="A",
                    relevance_score=0.123456,
                    matched_fields=["title"],
                    snippets=["A snippet"],
                    matched_at=when,
                )
            ],
            total_matches=3,
            search_time=1.23456,
            retrieved_at=when,
        )

        data = result.to_dict()

        assert data["total_matches"] == 3
        assert data["search_time"] == 1.23
        assert data["retrieved_at"] == "2024-01-01T00:00:00+00:00"
        assert data["matches"][0] == {
            "path": "/vault/a.md",
            "title": "A",
            "relevance_score": 0.1235,
            "matched_fields": ["title"],
            "snippets": ["A snippet"],
            "matched_at": "2024-01-01T00:00:00+00:00",
        }
