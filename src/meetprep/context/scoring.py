"""Relevance scoring of vault notes against a meeting."""

from datetime import datetime

from meetprep.context.models import Meeting, RelevanceWeights
from meetprep.context.query import parse_attendee
from meetprep.context.text import jaccard, word_set
from meetprep.vault.models import VaultFile

# Only this much of a note is compared, whatever its size
CONTENT_SAMPLE_SIZE = 10_000

# (max age in days, share of the recency bonus)
RECENCY_BANDS = ((7, 1.0), (30, 0.7), (90, 0.4))

ATTENDEE_IN_TITLE = 0.8
ATTENDEE_IN_CONTENT = 0.6


def content_sample(file: VaultFile) -> str:
    return file.content[:CONTENT_SAMPLE_SIZE]


def recency_factor(file_date: datetime | None, now: datetime) -> float:
    """Share of the recency bonus earned by a note dated ``file_date``."""
    if file_date is None:
        return 0.0
    age_days = (now - file_date).total_seconds() / 86400
    for max_days, factor in RECENCY_BANDS:
        if age_days <= max_days:
            return factor
    return 0.0


def attendee_score(attendees: list[str], file: VaultFile) -> float:
    """Best attendee-name hit: 0.8 in the title, 0.6 in the content sample."""
    title = file.title.lower()
    content = content_sample(file).lower()
    best = 0.0
    for raw in attendees:
        name = parse_attendee(raw).name.lower()
        if len(name) < 3:
            continue
        if name in title:
            best = max(best, ATTENDEE_IN_TITLE)
        elif name in content:
            best = max(best, ATTENDEE_IN_CONTENT)
    return best


def calculate_relevance_score(
    meeting: Meeting,
    file: VaultFile,
    query_tokens: list[str],
    weights: RelevanceWeights,
    now: datetime,
) -> float:
    """
    Composite relevance of ``file`` for ``meeting``, in [0, 1].

    Sums a flat bonus for being a search hit, a banded recency bonus, and
    weighted Jaccard similarities of the query against title, content sample
    and tags, plus attendee-name presence. The total is clamped to 1.0.
    """
    query_words = word_set(" ".join(query_tokens))

    score = weights.flex_search_bonus
    score += weights.recency_bonus * recency_factor(file.effective_date(), now)

    if file.title:
        score += weights.title * jaccard(query_words, word_set(file.title))

    score += weights.content * jaccard(query_words, word_set(content_sample(file)))

    tags = file.all_tags
    if tags:
        score += weights.tags * jaccard(query_words, word_set(" ".join(tags)))

    if meeting.attendees:
        score += weights.attendees * attendee_score(meeting.attendees, file)

    return max(0.0, min(score, 1.0))


def matched_fields(query_tokens: list[str], file: VaultFile) -> list[str]:
    """Fields of ``file`` that contain at least one query word."""
    query_words = word_set(" ".join(query_tokens))
    if not query_words:
        return []

    fields = []
    if query_words & word_set(file.title):
        fields.append("title")
    if query_words & word_set(content_sample(file)):
        fields.append("content")
    if query_words & word_set(" ".join(file.all_tags)):
        fields.append("tags")
    return fields
