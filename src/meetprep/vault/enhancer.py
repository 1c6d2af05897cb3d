"""Metadata enhancement: links and hashtags discovered in note content."""

import dataclasses
import logging
import re

from meetprep.vault.models import VaultFile

logger = logging.getLogger(__name__)

WIKI_LINK_PATTERN = re.compile(r"\[\[([^\[\]]+)\]\]")
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")
# Not preceded by a word char, so "page#anchor" and "C#" are not tags
HASHTAG_PATTERN = re.compile(r"(?<![\w&/])#([A-Za-z0-9_-]+)")


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_links(content: str) -> list[str]:
    """Return wiki-link and markdown-link targets in order of appearance."""
    links: list[str] = []
    for match in WIKI_LINK_PATTERN.finditer(content):
        # [[target|alias]] and [[target#heading]]
        target = match.group(1).split("|", 1)[0].strip()
        if target:
            links.append(target)
    for match in MARKDOWN_LINK_PATTERN.finditer(content):
        links.append(match.group(2).strip())
    return _unique(links)


def extract_hashtags(content: str) -> list[str]:
    tags = []
    for match in HASHTAG_PATTERN.finditer(content):
        tag = match.group(1)
        # Pure numbers are issue references, not tags
        if not tag.isdigit():
            tags.append(tag)
    return _unique(tags)


def enhance(file: VaultFile) -> VaultFile:
    """
    Return a copy of ``file`` with ``links`` and ``enhanced_tags`` populated.

    Enhanced tags are the frontmatter tags followed by any new hashtags,
    compared case-sensitively. On any error the original file is returned
    unchanged.
    """
    try:
        content = file.content
        enhanced_tags = _unique([*file.tags, *extract_hashtags(content)])
        return dataclasses.replace(
            file,
            links=extract_links(content),
            enhanced_tags=enhanced_tags,
        )
    except Exception:
        logger.warning("Failed to enhance metadata for %s", file.path, exc_info=True)
        return file
