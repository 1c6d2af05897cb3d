"""Indexer that owns the document store and the full-text index."""

import logging
import threading
import time
from collections.abc import Iterable

from meetprep.vault.database import SearchIndex
from meetprep.vault.enhancer import enhance
from meetprep.vault.models import (
    IndexedDocument,
    IndexFailure,
    IndexReport,
    SearchHit,
    VaultFile,
)

logger = logging.getLogger(__name__)


class VaultIndexer:
    """
    In-memory document store plus FTS5 index, keyed by file path.

    The filesystem is always the source of truth. The index is derived and
    rebuilt from disk on every full scan.

    Thread Safety:
        Every operation holds one lock, so searches never interleave with a
        mutation. Callers are still expected to funnel mutations through a
        single worker to keep per-path ordering.
    """

    def __init__(self):
        self._documents: dict[str, VaultFile] = {}
        self._index = SearchIndex()
        self._index.initialize()
        self._lock = threading.RLock()

    def close(self) -> None:
        """Release the index."""
        with self._lock:
            self._documents.clear()
            self._index.close()

    def index_all(self, files: Iterable[VaultFile]) -> IndexReport:
        """
        Replace the whole index with ``files``.

        A file that fails to index is logged and recorded in the report; it
        never stops the remaining files.
        """
        report = IndexReport()
        start = time.perf_counter()
        with self._lock:
            self._documents.clear()
            self._index.clear()

            for file in files:
                try:
                    self._index_file(file)
                    report.indexed += 1
                except Exception as e:
                    path = getattr(file, "path", repr(file))
                    logger.warning("Failed to index file %s: %s", path, e)
                    report.failures.append(IndexFailure(path=str(path), error=str(e)))

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Indexed %d files in %.0fms (%d failed)",
            report.indexed,
            elapsed_ms,
            len(report.failures),
        )
        return report

    def index_one(self, file: VaultFile) -> VaultFile:
        """Insert or replace a single file. Returns the enhanced file."""
        with self._lock:
            return self._index_file(file)

    def _index_file(self, file: VaultFile) -> VaultFile:
        enhanced = enhance(file)
        doc = IndexedDocument.from_vault_file(enhanced)
        self._index.upsert(doc)
        self._documents[enhanced.path] = enhanced
        return enhanced

    def remove(self, path: str) -> bool:
        """Drop a document from the store and the index."""
        with self._lock:
            existed = self._documents.pop(path, None) is not None
            removed = self._index.delete(path)
            return existed or removed

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
            self._index.clear()

    # Query methods

    def search(self, query: str, max_results: int = 10) -> list[SearchHit]:
        """
        Search title, content, tags and frontmatter.

        Args:
            query: Free text; each word also matches as a prefix
            max_results: Maximum number of hits

        Returns:
            Hits ordered best first. Only paths present in the store are
            returned.
        """
        with self._lock:
            if not self._documents:
                return []
            hits = self._index.search(query, limit=max_results)
            return [hit for hit in hits if hit.path in self._documents]

    def get_document(self, path: str) -> VaultFile | None:
        with self._lock:
            return self._documents.get(path)

    def documents(self) -> list[VaultFile]:
        with self._lock:
            return list(self._documents.values())

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def is_indexed(self) -> bool:
        """True when at least one document is indexed."""
        return self.count() > 0
