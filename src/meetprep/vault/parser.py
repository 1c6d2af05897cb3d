"""Parser for markdown notes with YAML or TOML frontmatter."""

import logging
import re
import tomllib
from datetime import datetime, timezone
from pathlib import Path

import yaml

from meetprep.vault.errors import VaultParseError
from meetprep.vault.models import Frontmatter, VaultFile

logger = logging.getLogger(__name__)

YAML_BLOCK = re.compile(
    r"\A---[ \t]*\r?\n(?P<body>.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)
TOML_BLOCK = re.compile(
    r"\A\+\+\+[ \t]*\r?\n(?P<body>.*?)^\+\+\+[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)


def parse_frontmatter(content: str, file_path: str = "") -> tuple[Frontmatter, str]:
    """
    Split markdown content into frontmatter and body.

    Args:
        content: The full markdown content
        file_path: Path used in error messages

    Returns:
        Tuple of (Frontmatter, content_without_frontmatter)

    Raises:
        VaultParseError: If a frontmatter block is present but is not valid
            YAML/TOML.
    """
    if content.startswith("\ufeff"):
        content = content[1:]

    match = YAML_BLOCK.match(content)
    if match:
        try:
            raw = yaml.safe_load(match.group("body"))
        except yaml.YAMLError as e:
            raise VaultParseError(file_path, f"invalid YAML frontmatter: {e}") from e
    else:
        match = TOML_BLOCK.match(content)
        if not match:
            return Frontmatter(), content
        try:
            raw = tomllib.loads(match.group("body"))
        except tomllib.TOMLDecodeError as e:
            raise VaultParseError(file_path, f"invalid TOML frontmatter: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        # A leading horizontal rule, not metadata
        logger.debug("Frontmatter in %s is not a mapping, keeping as content", file_path)
        return Frontmatter(), content

    body = content[match.end():].lstrip("\r\n")
    return Frontmatter(raw), body


def extract_title(frontmatter: Frontmatter, file_path: Path) -> str:
    """Title from frontmatter ``title`` or ``name``, else the file stem."""
    return frontmatter.get_text("title") or frontmatter.get_text("name") or file_path.stem


def extract_tags(frontmatter: Frontmatter) -> list[str]:
    """Frontmatter tags, given as a list or comma-separated string, deduplicated."""
    tags: list[str] = []
    for tag in frontmatter.get_list("tags"):
        if tag not in tags:
            tags.append(tag)
    return tags


def parse_vault_file(file_path: Path, key: str | None = None) -> VaultFile:
    """
    Read and parse a markdown file into a VaultFile.

    Args:
        file_path: Path to the file
        key: Document key to store; defaults to ``str(file_path)``

    Raises:
        FileNotFoundError: If the file does not exist.
        VaultParseError: If the file is not UTF-8 or its frontmatter is malformed.
    """
    path_key = key or str(file_path)
    try:
        raw = file_path.read_bytes()
        stat = file_path.stat()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise VaultParseError(path_key, f"unreadable file: {e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise VaultParseError(path_key, f"invalid UTF-8 encoding: {e}") from e

    frontmatter, body = parse_frontmatter(text, path_key)

    birthtime = getattr(stat, "st_birthtime", None) or stat.st_ctime
    return VaultFile(
        path=path_key,
        name=file_path.name,
        title=extract_title(frontmatter, file_path),
        content=body,
        frontmatter=frontmatter,
        tags=extract_tags(frontmatter),
        created=datetime.fromtimestamp(birthtime, tz=timezone.utc),
        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        size=stat.st_size,
    )
