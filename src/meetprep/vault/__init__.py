"""
Vault module for meetprep.

Keeps an in-memory full-text index in sync with a directory of markdown
notes: a full scan on connect, then serialized updates from a filesystem
watcher.
"""

from meetprep.vault.enhancer import enhance
from meetprep.vault.errors import (
    PathOutsideVaultError,
    VaultError,
    VaultFileMissingError,
    VaultNotConnectedError,
    VaultParseError,
    VaultValidationError,
)
from meetprep.vault.indexer import VaultIndexer
from meetprep.vault.manager import VaultManager
from meetprep.vault.models import (
    FileEvent,
    FileEventKind,
    Frontmatter,
    IndexReport,
    ScanReport,
    SearchHit,
    VaultFile,
    VaultState,
)
from meetprep.vault.parser import parse_frontmatter, parse_vault_file
from meetprep.vault.walker import walk_vault

__all__ = [
    "FileEvent",
    "FileEventKind",
    "Frontmatter",
    "IndexReport",
    "PathOutsideVaultError",
    "ScanReport",
    "SearchHit",
    "VaultError",
    "VaultFile",
    "VaultFileMissingError",
    "VaultIndexer",
    "VaultManager",
    "VaultNotConnectedError",
    "VaultParseError",
    "VaultState",
    "VaultValidationError",
    "enhance",
    "parse_frontmatter",
    "parse_vault_file",
    "walk_vault",
]
