"""Snippet extraction from matching notes."""

import re

from meetprep.context.scoring import content_sample
from meetprep.context.text import clean_markdown
from meetprep.vault.models import VaultFile

MAX_SNIPPETS = 3
ELLIPSIS = "..."
SENTENCE_SPLIT = re.compile(r"[.!?]+")


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS


def extract_snippets(
    file: VaultFile,
    query_tokens: list[str],
    max_length: int,
    max_snippets: int = MAX_SNIPPETS,
) -> list[str]:
    """
    Return up to ``max_snippets`` cleaned sentences that mention a query token.

    Only the content sample is searched. Each snippet is stripped of markdown
    and truncated to ``max_length`` characters with an ellipsis.
    """
    terms = [t.lower() for t in query_tokens if len(t) > 2]
    if not terms:
        return []

    snippets: list[str] = []
    for sentence in SENTENCE_SPLIT.split(content_sample(file)):
        lowered = sentence.lower()
        if not any(term in lowered for term in terms):
            continue
        snippet = clean_markdown(sentence)
        if not snippet:
            continue
        snippets.append(truncate(snippet, max_length))
        if len(snippets) >= max_snippets:
            break
    return snippets
