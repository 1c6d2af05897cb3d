"""File walker for discovering markdown notes in a vault."""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def is_within(root: Path, path: Path) -> bool:
    """Return True if ``path`` resolves to ``root`` or a location below it.

    ``root`` must already be resolved.
    """
    try:
        resolved = path.resolve()
    except (OSError, RuntimeError):
        return False
    return resolved == root or resolved.is_relative_to(root)


def is_hidden(root: Path, path: Path) -> bool:
    """Return True if any component of ``path`` below ``root`` starts with a dot."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return False
    return any(part.startswith(".") for part in parts)


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() == MARKDOWN_SUFFIX


def walk_vault(vault_root: Path) -> Iterator[Path]:
    """
    Walk the vault and yield the path of each markdown note.

    Hidden files and directories are skipped. Paths that resolve outside the
    vault (symlinks pointing elsewhere) are skipped with a warning. Yielded
    paths are ``vault_root`` joined with the relative location, so they are
    stable document keys.

    Args:
        vault_root: A resolved vault directory.
    """
    if not vault_root.is_dir():
        return

    def on_error(error: OSError) -> None:
        logger.warning("Cannot read directory %s: %s", error.filename, error)

    for dirpath, dirnames, filenames in os.walk(vault_root, onerror=on_error):
        # Prune hidden directories in place
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        current = Path(dirpath)
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            file_path = current / filename
            if not is_markdown(file_path):
                continue
            if not is_within(vault_root, file_path):
                logger.warning("Skipping file outside vault directory: %s", file_path)
                continue
            if not file_path.is_file():
                continue
            yield file_path
