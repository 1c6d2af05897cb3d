"""Data models for meeting context retrieval."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class RelevanceWeights:
    """Weights applied to each normalized sub-score of a note.

    The weighted sum is clamped to 1.0, so the weights need not add up to 1.
    """

    title: float = 0.4
    content: float = 0.3
    tags: float = 0.2
    attendees: float = 0.1
    flex_search_bonus: float = 0.2
    recency_bonus: float = 0.15

    # Names used by the desktop app settings
    CAMEL_CASE_NAMES = {
        "flexSearchBonus": "flex_search_bonus",
        "recencyBonus": "recency_bonus",
    }

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Weight '{f.name}' must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Weight '{f.name}' must be between 0 and 1, got {value}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RelevanceWeights":
        """Build weights from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = cls.CAMEL_CASE_NAMES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class ContextConfiguration:
    """Tuning knobs for context retrieval."""

    enabled: bool = True
    max_results: int = 10
    min_relevance_score: float = 0.15
    include_snippets: bool = True
    snippet_length: int = 400

    def __post_init__(self):
        if self.max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {self.max_results}")
        if not 0.0 <= self.min_relevance_score <= 1.0:
            raise ValueError(
                f"min_relevance_score must be between 0 and 1, got {self.min_relevance_score}"
            )
        if self.snippet_length < 10:
            raise ValueError(f"snippet_length must be at least 10, got {self.snippet_length}")


@dataclass
class Meeting:
    """Meeting metadata supplied by the calendar integration."""

    title: str = ""
    description: str | None = None
    location: str | None = None
    attendees: list[str] = field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Meeting":
        """Build a meeting from a mapping with snake_case or camelCase keys."""

        def parse_date(value: Any) -> datetime | None:
            if value is None or isinstance(value, datetime):
                return value
            try:
                return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            except ValueError:
                return None

        attendees = data.get("attendees") or []
        if isinstance(attendees, str):
            attendees = [attendees]
        return cls(
            title=str(data.get("title") or ""),
            description=data.get("description"),
            location=data.get("location"),
            attendees=[str(a) for a in attendees if a],
            start_date=parse_date(data.get("start_date", data.get("startDate"))),
            end_date=parse_date(data.get("end_date", data.get("endDate"))),
        )


@dataclass
class ContextMatch:
    """A note judged relevant to a meeting.

    Refers to the note by path; fetch the current version from the indexer
    when its content is needed.
    """

    path: str
    title: str
    relevance_score: float
    matched_fields: list[str] = field(default_factory=list)
    snippets: list[str] = field(default_factory=list)
    matched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "title": self.title,
            "relevance_score": round(self.relevance_score, 4),
            "matched_fields": list(self.matched_fields),
            "snippets": list(self.snippets),
            "matched_at": self.matched_at.isoformat(),
        }


@dataclass
class ContextRetrievalResult:
    """Ranked matches for one meeting."""

    matches: list[ContextMatch] = field(default_factory=list)
    total_matches: int = 0
    search_time: float = 0.0  # Milliseconds
    retrieved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "matches": [m.to_dict() for m in self.matches],
            "total_matches": self.total_matches,
            "search_time": round(self.search_time, 2),
            "retrieved_at": self.retrieved_at.isoformat(),
        }
