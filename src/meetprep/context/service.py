"""Context retrieval: which vault notes matter for a meeting."""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from meetprep.context.models import (
    ContextConfiguration,
    ContextMatch,
    ContextRetrievalResult,
    Meeting,
    RelevanceWeights,
)
from meetprep.context.query import build_search_query
from meetprep.context.scoring import calculate_relevance_score, matched_fields
from meetprep.context.snippets import extract_snippets
from meetprep.settings import SettingsStore
from meetprep.vault.indexer import VaultIndexer
from meetprep.vault.models import SearchHit

logger = logging.getLogger(__name__)

# Fallback widening when the full query finds nothing
FALLBACK_TERMS = 3
FALLBACK_RESULTS_PER_TERM = 5
FALLBACK_CANDIDATE_TARGET = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContextRetrievalService:
    """
    Finds and ranks vault notes relevant to a meeting.

    Reads the index only through ``search``, ``is_indexed`` and
    ``get_document``; it never mutates it.
    """

    def __init__(
        self,
        indexer: VaultIndexer | None = None,
        config: ContextConfiguration | None = None,
        weights: RelevanceWeights | None = None,
        settings: SettingsStore | None = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the service.

        Args:
            indexer: Index to query; without one every lookup is empty
            config: Retrieval configuration (defaults if omitted)
            weights: Fixed weights; otherwise read from ``settings`` per query
            settings: Source of user-configured relevance weights
            now: Clock used for recency scoring
        """
        self.indexer = indexer
        self.config = config or ContextConfiguration()
        self._weights = weights
        self._settings = settings
        self._now = now

    def set_indexer(self, indexer: VaultIndexer | None) -> None:
        self.indexer = indexer

    def is_indexed(self) -> bool:
        return self.indexer is not None and self.indexer.is_indexed()

    def current_weights(self) -> RelevanceWeights:
        if self._weights is not None:
            return self._weights
        if self._settings is not None:
            try:
                return self._settings.get_relevance_weights()
            except Exception as e:
                logger.warning("Failed to load relevance weights, using defaults: %s", e)
        return RelevanceWeights()

    def find_relevant_context(self, meeting: Meeting) -> ContextRetrievalResult:
        """
        Return the notes most relevant to ``meeting``, best first.

        Never raises: any failure yields an empty result.
        """
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000

        try:
            if not self.config.enabled or self.indexer is None or not self.indexer.is_indexed():
                return ContextRetrievalResult(search_time=elapsed_ms())

            tokens = build_search_query(meeting)
            if not tokens:
                return ContextRetrievalResult(search_time=elapsed_ms())

            hits = self._retrieve_candidates(tokens)
            matches = self._score_candidates(meeting, tokens, hits)

            matches.sort(key=lambda m: (-m.relevance_score, m.path))
            final = matches[: self.config.max_results]
            logger.debug(
                "Context for %r: %d candidates, %d above %.2f, returning %d",
                meeting.title,
                len(hits),
                len(matches),
                self.config.min_relevance_score,
                len(final),
            )
            return ContextRetrievalResult(
                matches=final,
                total_matches=len(matches),
                search_time=elapsed_ms(),
            )
        except Exception:
            logger.exception("Context retrieval failed")
            return ContextRetrievalResult(search_time=elapsed_ms())

    def _retrieve_candidates(self, tokens: list[str]) -> list[SearchHit]:
        query = " ".join(tokens)
        hits = self.indexer.search(query, max_results=self.config.max_results * 2)
        logger.debug("Search %r returned %d hits", query, len(hits))
        if hits or len(tokens) < 2:
            return hits

        # Widen with single terms, bounded
        merged: dict[str, SearchHit] = {}
        for term in tokens[:FALLBACK_TERMS]:
            for hit in self.indexer.search(term, max_results=FALLBACK_RESULTS_PER_TERM):
                existing = merged.get(hit.path)
                if existing is None or hit.score > existing.score:
                    merged[hit.path] = hit
            if len(merged) >= FALLBACK_CANDIDATE_TARGET:
                break
        logger.debug("Fallback search returned %d hits", len(merged))
        return list(merged.values())

    def _score_candidates(
        self, meeting: Meeting, tokens: list[str], hits: list[SearchHit]
    ) -> list[ContextMatch]:
        weights = self.current_weights()
        now = self._now()
        matches: list[ContextMatch] = []

        for hit in hits:
            vault_file = self.indexer.get_document(hit.path)
            if vault_file is None:
                # Removed since the search
                continue
            try:
                score = calculate_relevance_score(meeting, vault_file, tokens, weights, now)
            except Exception:
                logger.warning("Failed to score %s", hit.path, exc_info=True)
                continue

            logger.debug(
                "Scored %s: %.3f (threshold %.2f)",
                vault_file.title,
                score,
                self.config.min_relevance_score,
            )
            if score < self.config.min_relevance_score:
                continue

            snippets = []
            if self.config.include_snippets:
                snippets = extract_snippets(vault_file, tokens, self.config.snippet_length)
            matches.append(
                ContextMatch(
                    path=vault_file.path,
                    title=vault_file.title,
                    relevance_score=score,
                    matched_fields=matched_fields(tokens, vault_file),
                    snippets=snippets,
                )
            )
        return matches
