"""Tests for search query construction."""

import time

from meetprep.context.models import Meeting
from meetprep.context.query import (
    MAX_DESCRIPTION_LENGTH,
    build_search_query,
    clean_description,
    clean_location,
    parse_attendee,
    tokenize_query,
)


class TestParseAttendee:
    def test_name_and_email(self):
        attendee = parse_attendee("Jane Doe <jane@acme.com>")

        assert attendee.name == "Jane Doe"
        assert attendee.email == "jane@acme.com"
        assert attendee.domain_token == "acme"

    def test_quoted_name(self):
        attendee = parse_attendee('"Doe, Jane" <jane@acme.com>')
        assert attendee.name == "Doe, Jane"

    def test_bare_email(self):
        attendee = parse_attendee("bob@example.org")

        assert attendee.name == ""
        assert attendee.email == "bob@example.org"
        assert attendee.domain_token == "example"

    def test_bare_name(self):
        attendee = parse_attendee("  Alice Smith ")

        assert attendee.name == "Alice Smith"
        assert attendee.email == ""
        assert attendee.domain_token == ""

    def test_empty(self):
        attendee = parse_attendee("   ")
        assert attendee.name == "" and attendee.email == ""

    def test_pathological_input_is_bounded(self):
        raw = "a@" * 500

        start = time.perf_counter()
        attendee = parse_attendee(raw)
        elapsed = time.perf_counter() - start

        assert elapsed < 0.5
        assert len(attendee.email) <= 200
        assert attendee.domain_token == ""

    def test_unclosed_angle_bracket(self):
        attendee = parse_attendee("Jane <jane@acme.com")
        assert attendee.email == "Jane <jane@acme.com"


class TestCleanDescription:
    def test_invite_boilerplate_removed(self):
        description = (
            "Discuss the roadmap.\n\n"
            "Join Zoom Meeting\nhttps://zoom.us/j/123456\nMeeting ID: 123 456\nPassword: abc"
        )

        assert clean_description(description) == "Discuss the roadmap."

    def test_markup_removed(self):
        description = "<b>Quarterly</b> planning [internal] see https://example.com/doc"
        assert clean_description(description) == "Quarterly planning see"

    def test_truncated(self):
        assert len(clean_description("word " * 200)) == MAX_DESCRIPTION_LENGTH

    def test_huge_input_is_fast(self):
        start = time.perf_counter()
        clean_description("<" * 100_000 + "[" * 100_000)
        assert time.perf_counter() - start < 1.0


class TestCleanLocation:
    def test_video_links_dropped(self):
        assert clean_location("https://zoom.us/j/1") == ""
        assert clean_location("meet.google.com/abc-defg-hij") == ""
        assert clean_location("Microsoft Teams: teams.microsoft.com/l/123") == ""

    def test_physical_location_kept(self):
        assert clean_location("  Conference Room Berlin ") == "Conference Room Berlin"


class TestTokenizeQuery:
    def test_dedupes_case_insensitively(self):
        assert tokenize_query(["Acme acme ACME kickoff"]) == ["Acme", "kickoff"]

    def test_drops_short_tokens_and_punctuation(self):
        assert tokenize_query(["Q3 (planning), on: roadmap!"]) == ["planning", "roadmap"]


class TestBuildSearchQuery:
    def test_full_meeting(self):
        meeting = Meeting(
            title="Acme Kickoff",
            description="Discuss roadmap.\n\nJoin Zoom Meeting https://zoom.us/j/123",
            attendees=["Jane Doe <jane@acme.com>"],
            location="https://zoom.us/j/123",
        )

        assert build_search_query(meeting) == [
            "Acme",
            "Kickoff",
            "Discuss",
            "roadmap",
            "Jane",
            "Doe",
        ]

    def test_domain_token_added(self):
        meeting = Meeting(title="Sync", attendees=["bob@globex.com"])
        assert build_search_query(meeting) == ["Sync", "globex"]

    def test_physical_location_added(self):
        meeting = Meeting(title="Offsite", location="Lisbon Office")
        assert build_search_query(meeting) == ["Offsite", "Lisbon", "Office"]

    def test_nothing_usable(self):
        assert build_search_query(Meeting(title="1 on 1")) == []
