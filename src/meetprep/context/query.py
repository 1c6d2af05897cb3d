"""Search query construction from meeting metadata."""

import logging
import re
from dataclasses import dataclass

from meetprep.context.models import Meeting
from meetprep.context.text import clean_markdown

logger = logging.getLogger(__name__)

# Attendee strings longer than this are truncated before parsing
MAX_ATTENDEE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 200
# Longer descriptions are cut before cleaning
MAX_DESCRIPTION_INPUT = 5000
MIN_TOKEN_LENGTH = 3

# Conferencing boilerplate starts at the first of these
INVITE_MARKERS = re.compile(
    r"hi there|is inviting you|join zoom|meeting url|password|telephone|"
    r"join with google meet|microsoft teams meeting|meeting id",
    re.IGNORECASE,
)
BRACKETED = re.compile(r"\[[^\]]*\]")
HTML_TAG = re.compile(r"<[^>]{0,200}>")
URL = re.compile(r"\b(?:https?://|www\.)\S+", re.IGNORECASE)
VIDEO_LOCATION_HINTS = (
    "http://",
    "https://",
    "zoom.us",
    "meet.google.",
    "teams.microsoft.",
    "webex.com",
)
TOKEN_EDGE_PUNCTUATION = "\"'`.,;:!?()[]{}<>*_~|"


@dataclass
class Attendee:
    """An attendee string split into its parts."""

    name: str = ""
    email: str = ""

    @property
    def domain_token(self) -> str:
        """Organisation part of the email domain ("acme" for jane@acme.com)."""
        if "@" not in self.email:
            return ""
        domain = self.email.rsplit("@", 1)[1]
        return domain.split(".", 1)[0].strip()


def parse_attendee(raw: str) -> Attendee:
    """
    Parse ``"Name <email>"``, a bare email or a bare name.

    Uses plain string operations on input truncated to MAX_ATTENDEE_LENGTH so
    the cost is bounded whatever the input looks like.
    """
    text = raw.strip()[:MAX_ATTENDEE_LENGTH].strip()
    if not text:
        return Attendee()

    angle = text.find("<")
    if angle != -1 and text.endswith(">"):
        name = text[:angle].strip().strip('"').strip()
        email = text[angle + 1 : -1].strip()
        return Attendee(name=name, email=email)
    if "@" in text:
        return Attendee(email=text)
    return Attendee(name=text)


def clean_description(description: str) -> str:
    """Keep the meaningful start of an invite description."""
    description = description[:MAX_DESCRIPTION_INPUT]
    marker = INVITE_MARKERS.search(description)
    if marker:
        description = description[: marker.start()]
    text = clean_markdown(description)
    text = URL.sub(" ", text)
    text = HTML_TAG.sub(" ", text)
    text = BRACKETED.sub(" ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:MAX_DESCRIPTION_LENGTH]


def clean_location(location: str) -> str:
    """Return the location, or "" when it is a videoconference link."""
    lowered = location.lower()
    if any(hint in lowered for hint in VIDEO_LOCATION_HINTS):
        return ""
    return location.strip()


def tokenize_query(parts: list[str]) -> list[str]:
    """Split parts into tokens, deduplicated case-insensitively.

    The first casing seen is kept and tokens shorter than MIN_TOKEN_LENGTH
    are dropped.
    """
    seen: set[str] = set()
    tokens: list[str] = []
    for part in parts:
        for word in part.split():
            token = word.strip(TOKEN_EDGE_PUNCTUATION)
            if len(token) < MIN_TOKEN_LENGTH:
                continue
            key = token.lower()
            if key in seen:
                continue
            seen.add(key)
            tokens.append(token)
    return tokens


def build_search_query(meeting: Meeting) -> list[str]:
    """Collect search tokens from a meeting's title, description, attendees and location."""
    parts: list[str] = []

    if meeting.title:
        parts.append(meeting.title)

    if meeting.description:
        cleaned = clean_description(meeting.description)
        if cleaned:
            parts.append(cleaned)

    for raw in meeting.attendees or []:
        attendee = parse_attendee(raw)
        if attendee.name:
            parts.append(attendee.name)
        if attendee.domain_token:
            parts.append(attendee.domain_token)

    if meeting.location:
        location = clean_location(meeting.location)
        if location:
            parts.append(location)

    tokens = tokenize_query(parts)
    logger.debug("Search tokens for %r: %s", meeting.title, tokens)
    return tokens
