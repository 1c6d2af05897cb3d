"""Configuration module for meetprep.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from meetprep.context.models import ContextConfiguration


def _parse_number(name: str, default: str, cast, minimum=None, maximum=None):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
        if minimum is not None and value < minimum:
            raise ValueError(f"must be at least {minimum}, got {value}")
        if maximum is not None and value > maximum:
            raise ValueError(f"must be at most {maximum}, got {value}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{raw}': {e}") from e
    return value


def _parse_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class Config:
    """Application configuration."""

    vault_path: Path | None
    port: int
    settings_path: Path
    watch_interval: float
    max_results: int
    min_relevance_score: float
    snippet_length: int
    debug: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        vault_env = os.getenv("MEETPREP_VAULT", "").strip()
        vault_path = Path(vault_env).expanduser() if vault_env else None

        port = _parse_number("MEETPREP_PORT", "8080", int)
        if not 1 <= port <= 65535:
            raise ValueError(
                f"Invalid MEETPREP_PORT value '{port}': Port must be between 1 and 65535"
            )

        default_settings = str(Path.home() / ".meetprep" / "settings.json")
        settings_path = Path(os.getenv("MEETPREP_SETTINGS", default_settings)).expanduser()

        return cls(
            vault_path=vault_path,
            port=port,
            settings_path=settings_path,
            watch_interval=_parse_number("MEETPREP_WATCH_INTERVAL", "2.0", float, minimum=0.0),
            max_results=_parse_number("MEETPREP_MAX_RESULTS", "10", int, minimum=1),
            min_relevance_score=_parse_number(
                "MEETPREP_MIN_RELEVANCE", "0.15", float, minimum=0.0, maximum=1.0
            ),
            snippet_length=_parse_number("MEETPREP_SNIPPET_LENGTH", "400", int, minimum=10),
            debug=_parse_flag("MEETPREP_DEBUG"),
        )

    def context_configuration(self) -> ContextConfiguration:
        return ContextConfiguration(
            max_results=self.max_results,
            min_relevance_score=self.min_relevance_score,
            snippet_length=self.snippet_length,
        )

