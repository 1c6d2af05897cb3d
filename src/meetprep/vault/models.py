"""Data models for the vault index."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

# Frontmatter keys tried, in order, for a note's effective date
DATE_FIELDS = ("date", "created", "updated", "modified", "timestamp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_datetime(value: Any) -> datetime | None:
    """Convert a frontmatter value to an aware datetime, or None.

    Accepts datetime/date objects (as produced by YAML), ISO 8601 strings
    and epoch timestamps in seconds or milliseconds. Naive values are taken
    as local time.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, datetime):
            result = value
        elif isinstance(value, date):
            result = datetime(value.year, value.month, value.day)
        elif isinstance(value, (int, float)):
            seconds = value / 1000 if abs(value) > 1e11 else value
            result = datetime.fromtimestamp(seconds, tz=timezone.utc)
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            result = datetime.fromisoformat(text)
        else:
            return None
        if result.tzinfo is None:
            result = result.astimezone()
        return result
    except (ValueError, OverflowError, OSError):
        return None


class Frontmatter(dict):
    """Ordered string-keyed frontmatter mapping with typed accessors."""

    def __init__(self, data: dict | None = None):
        super().__init__()
        if data:
            for key, value in data.items():
                self[str(key)] = value

    def get_text(self, key: str) -> str | None:
        value = self.get(key)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def get_list(self, key: str) -> list[str]:
        """Return a list value; comma-separated strings are split."""
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            items = [str(item).strip() for item in value if item is not None]
        elif isinstance(value, str):
            items = [part.strip() for part in value.split(",")]
        else:
            items = [str(value).strip()]
        return [item for item in items if item]

    def get_datetime(self, *keys: str) -> datetime | None:
        """Return the first parseable date among ``keys`` (DATE_FIELDS by default)."""
        for key in keys or DATE_FIELDS:
            parsed = coerce_datetime(self.get(key))
            if parsed is not None:
                return parsed
        return None

    def to_text(self) -> str:
        if not self:
            return ""
        return json.dumps(self, default=str, ensure_ascii=False)


@dataclass
class VaultFile:
    """A parsed markdown note."""

    path: str  # Absolute path, unique key
    name: str = ""
    title: str = ""
    content: str = ""
    frontmatter: Frontmatter = field(default_factory=Frontmatter)
    tags: list[str] = field(default_factory=list)
    created: datetime = field(default_factory=_utcnow)
    modified: datetime = field(default_factory=_utcnow)
    size: int = 0
    # Filled in by the metadata enhancer
    links: list[str] = field(default_factory=list)
    enhanced_tags: list[str] = field(default_factory=list)

    @property
    def all_tags(self) -> list[str]:
        return self.enhanced_tags or self.tags

    def effective_date(self) -> datetime:
        """Frontmatter date if present, else the filesystem modification time."""
        return self.frontmatter.get_datetime(*DATE_FIELDS) or self.modified

    def to_dict(self, include_content: bool = True) -> dict:
        data = {
            "path": self.path,
            "name": self.name,
            "title": self.title,
            "frontmatter": json.loads(self.frontmatter.to_text() or "{}"),
            "tags": list(self.all_tags),
            "links": list(self.links),
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "size": self.size,
        }
        if include_content:
            data["content"] = self.content
        return data


@dataclass
class IndexedDocument:
    """Searchable projection of a VaultFile."""

    path: str
    title: str
    content: str
    tags: str
    frontmatter: str

    @classmethod
    def from_vault_file(cls, file: VaultFile) -> "IndexedDocument":
        if not file.path:
            raise ValueError("Document has no path")
        if not isinstance(file.content, str):
            raise ValueError(f"Content of {file.path} is not text")
        return cls(
            path=file.path,
            title=str(file.title or ""),
            content=file.content,
            tags=" ".join(str(tag) for tag in file.all_tags),
            frontmatter=file.frontmatter.to_text(),
        )


@dataclass
class SearchHit:
    """A document key returned by the full-text index."""

    path: str
    score: float  # Higher is better


@dataclass
class IndexFailure:
    """A file that could not be parsed or indexed."""

    path: str
    error: str


@dataclass
class IndexReport:
    """Outcome of a bulk indexing run."""

    indexed: int = 0
    failures: list[IndexFailure] = field(default_factory=list)


@dataclass
class ScanReport:
    """Outcome of a full vault scan."""

    vault_path: str
    total_files: int = 0
    indexed: int = 0
    failures: list[IndexFailure] = field(default_factory=list)
    scanned_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "vault_path": self.vault_path,
            "total_files": self.total_files,
            "indexed": self.indexed,
            "errors": [{"path": f.path, "error": f.error} for f in self.failures],
            "scanned_at": self.scanned_at.isoformat(),
        }


class FileEventKind(str, Enum):
    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"


@dataclass(frozen=True)
class FileEvent:
    """A filesystem change for one markdown file."""

    kind: FileEventKind
    path: str


class VaultState(str, Enum):
    DISCONNECTED = "disconnected"
    SCANNING = "scanning"
    WATCHING = "watching"
