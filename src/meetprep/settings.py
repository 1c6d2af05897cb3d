"""Persistent user settings: vault path, relevance weights, last scan time.

Settings are stored as a small JSON document. Without a path the store
keeps everything in memory, which is what tests and embedded callers use.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from meetprep.context.models import RelevanceWeights

logger = logging.getLogger(__name__)


class SettingsStore:
    """Thread-safe key/value settings backed by an optional JSON file."""

    def __init__(self, path: Path | None = None):
        self.path = path
        self._lock = threading.Lock()
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            return {}
        return data

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value
            self._save()

    # Vault path

    def get_vault_path(self) -> str | None:
        return self.get("vault_path")

    def set_vault_path(self, path: str | None) -> None:
        self.set("vault_path", path)

    def set_last_vault_scan(self, when: datetime) -> None:
        self.set("last_vault_scan", when.isoformat())

    def get_last_vault_scan(self) -> str | None:
        return self.get("last_vault_scan")

    # Relevance weights

    def get_relevance_weights(self) -> RelevanceWeights:
        """Stored weights, or the defaults when none are stored or they are invalid."""
        from meetprep.context.models import RelevanceWeights

        raw = self.get("relevance_weights")
        if not raw:
            return RelevanceWeights()
        try:
            return RelevanceWeights.from_dict(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid stored relevance weights, using defaults: %s", e)
            return RelevanceWeights()

    def set_relevance_weights(self, weights: RelevanceWeights | None) -> None:
        self.set("relevance_weights", weights.to_dict() if weights else None)
