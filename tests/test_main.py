"""Tests for main module."""

import logging

import pytest

from meetprep.config import Config
from meetprep.main import create_server
from meetprep.settings import SettingsStore
from meetprep.vault.models import VaultState


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Point settings at a temporary file and disable the watch thread."""
    for name in ("MEETPREP_VAULT", "MEETPREP_PORT", "MEETPREP_MAX_RESULTS", "MEETPREP_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MEETPREP_SETTINGS", str(tmp_path / "settings.json"))
    monkeypatch.setenv("MEETPREP_WATCH_INTERVAL", "0")
    return tmp_path


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    (root / "kickoff.md").write_text("# Acme Kickoff\n\nAgenda.\n")
    (root / "budget.md").write_text("# Budget\n\nReview.\n")
    return root.resolve()


def test_create_server(env, vault, monkeypatch, caplog):
    """Test create_server initializes all components."""
    monkeypatch.setenv("MEETPREP_VAULT", str(vault))
    config = Config.from_env()

    with caplog.at_level(logging.INFO):
        mcp, manager = create_server(config)

    try:
        assert mcp is not None
        assert mcp.name == "meetprep"
        assert manager.state == VaultState.WATCHING
        assert manager.indexer.count() == 2

        log_messages = [record.message for record in caplog.records]
        assert any("Initial index complete: 2 documents indexed" in msg for msg in log_messages)
        assert any("Registering tools" in msg for msg in log_messages)
        assert any("Server configured successfully" in msg for msg in log_messages)
    finally:
        manager.close()


def test_create_server_restores_stored_vault(env, vault, caplog):
    """Test that create_server reconnects the vault saved in settings."""
    SettingsStore(env / "settings.json").set_vault_path(str(vault))
    config = Config.from_env()

    with caplog.at_level(logging.INFO):
        mcp, manager = create_server(config)

    try:
        assert manager.vault_root == vault
        assert manager.indexer.count() == 2
        assert any("Restored vault" in record.message for record in caplog.records)
    finally:
        manager.close()


def test_create_server_without_vault(env, caplog):
    config = Config.from_env()

    with caplog.at_level(logging.INFO):
        mcp, manager = create_server(config)

    try:
        assert manager.state == VaultState.DISCONNECTED
        assert any("No vault connected yet" in record.message for record in caplog.records)
    finally:
        manager.close()


def test_create_server_with_invalid_vault(env, monkeypatch, caplog):
    monkeypatch.setenv("MEETPREP_VAULT", str(env / "missing"))
    config = Config.from_env()

    mcp, manager = create_server(config)

    try:
        assert mcp.name == "meetprep"
        assert manager.state == VaultState.DISCONNECTED
        assert "Cannot connect configured vault" in caplog.text
    finally:
        manager.close()
