"""Text cleaning and comparison helpers."""

import re

CODE_BLOCK = re.compile(r"```.*?```", re.DOTALL)
UNCLOSED_CODE_FENCE = re.compile(r"```.*", re.DOTALL)
INLINE_CODE = re.compile(r"`[^`\n]*`")
BOLD = re.compile(r"\*\*([^*]+)\*\*|__([^_]+)__")
LINE_PREFIX = re.compile(r"^\s*(?:#{1,6}|[*>-]|\d+\.)\s*", re.MULTILINE)
MARKDOWN_LINK = re.compile(r"!?\[([^\]]+)\]\([^)]+\)")
WIKI_LINK = re.compile(r"\[\[(?:[^\]|]+\|)?([^\]]+)\]\]")
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
NON_WORD = re.compile(r"[^\w\s]")
WHITESPACE = re.compile(r"\s+")


def clean_markdown(text: str) -> str:
    """Remove markdown formatting and control characters, collapsing whitespace."""
    text = CODE_BLOCK.sub(" ", text)
    text = UNCLOSED_CODE_FENCE.sub(" ", text)
    text = INLINE_CODE.sub(" ", text)
    text = BOLD.sub(lambda m: m.group(1) or m.group(2), text)
    text = LINE_PREFIX.sub("", text)
    text = MARKDOWN_LINK.sub(r"\1", text)
    text = WIKI_LINK.sub(r"\1", text)
    text = CONTROL_CHARS.sub("", text)
    return WHITESPACE.sub(" ", text).strip()


def word_set(text: str) -> set[str]:
    """Lowercase words with punctuation removed."""
    normalized = NON_WORD.sub(" ", text.lower())
    return set(normalized.split())


def jaccard(words1: set[str], words2: set[str]) -> float:
    """Intersection over union of two word sets; 0 when either is empty."""
    if not words1 or not words2:
        return 0.0
    intersection = len(words1 & words2)
    union = len(words1) + len(words2) - intersection
    return intersection / union if union else 0.0


def text_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the word sets of two texts."""
    return jaccard(word_set(text1), word_set(text2))
