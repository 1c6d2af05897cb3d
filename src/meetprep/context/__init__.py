"""Meeting context retrieval over the vault index."""

from meetprep.context.models import (
    ContextConfiguration,
    ContextMatch,
    ContextRetrievalResult,
    Meeting,
    RelevanceWeights,
)
from meetprep.context.query import build_search_query, parse_attendee
from meetprep.context.service import ContextRetrievalService

__all__ = [
    "ContextConfiguration",
    "ContextMatch",
    "ContextRetrievalResult",
    "ContextRetrievalService",
    "Meeting",
    "RelevanceWeights",
    "build_search_query",
    "parse_attendee",
]
