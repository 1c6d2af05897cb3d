"""Tests for config module."""

from pathlib import Path

import pytest

from meetprep.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "MEETPREP_VAULT",
        "MEETPREP_PORT",
        "MEETPREP_SETTINGS",
        "MEETPREP_WATCH_INTERVAL",
        "MEETPREP_MAX_RESULTS",
        "MEETPREP_MIN_RELEVANCE",
        "MEETPREP_SNIPPET_LENGTH",
        "MEETPREP_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    """Test config loads with defaults when no env vars set."""
    config = Config.from_env()
    assert config.vault_path is None
    assert config.port == 8080
    assert config.settings_path == Path.home() / ".meetprep" / "settings.json"
    assert config.watch_interval == 2.0
    assert config.max_results == 10
    assert config.min_relevance_score == 0.15
    assert config.snippet_length == 400
    assert config.debug is False


def test_config_from_env(monkeypatch):
    """Test config loads from environment variables."""
    monkeypatch.setenv("MEETPREP_VAULT", "/notes/vault")
    monkeypatch.setenv("MEETPREP_PORT", "9000")
    monkeypatch.setenv("MEETPREP_SETTINGS", "/custom/settings.json")
    monkeypatch.setenv("MEETPREP_WATCH_INTERVAL", "0")
    monkeypatch.setenv("MEETPREP_MAX_RESULTS", "5")
    monkeypatch.setenv("MEETPREP_MIN_RELEVANCE", "0.3")
    monkeypatch.setenv("MEETPREP_SNIPPET_LENGTH", "120")
    monkeypatch.setenv("MEETPREP_DEBUG", "true")

    config = Config.from_env()
    assert config.vault_path == Path("/notes/vault")
    assert config.port == 9000
    assert config.settings_path == Path("/custom/settings.json")
    assert config.watch_interval == 0.0
    assert config.max_results == 5
    assert config.min_relevance_score == 0.3
    assert config.snippet_length == 120
    assert config.debug is True


def test_config_tilde_expansion(monkeypatch):
    """Test config expands tilde in paths."""
    monkeypatch.setenv("MEETPREP_VAULT", "~/notes")
    monkeypatch.setenv("MEETPREP_SETTINGS", "~/meetprep.json")
    config = Config.from_env()
    assert "~" not in str(config.vault_path)
    assert "~" not in str(config.settings_path)


def test_config_blank_vault_is_none(monkeypatch):
    monkeypatch.setenv("MEETPREP_VAULT", "   ")
    assert Config.from_env().vault_path is None


def test_config_invalid_port_non_numeric(monkeypatch):
    """Test config raises error for non-numeric port."""
    monkeypatch.setenv("MEETPREP_PORT", "not_a_number")
    with pytest.raises(ValueError, match="Invalid MEETPREP_PORT"):
        Config.from_env()


@pytest.mark.parametrize("port", ["0", "70000"])
def test_config_invalid_port_range(monkeypatch, port):
    """Test config raises error for out-of-range ports."""
    monkeypatch.setenv("MEETPREP_PORT", port)
    with pytest.raises(ValueError, match="Port must be between 1 and 65535"):
        Config.from_env()


@pytest.mark.parametrize(
    "name, value",
    [
        ("MEETPREP_WATCH_INTERVAL", "-1"),
        ("MEETPREP_MAX_RESULTS", "0"),
        ("MEETPREP_MIN_RELEVANCE", "1.5"),
        ("MEETPREP_SNIPPET_LENGTH", "abc"),
    ],
)
def test_config_invalid_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=f"Invalid {name}"):
        Config.from_env()


def test_context_configuration(monkeypatch):
    monkeypatch.setenv("MEETPREP_MAX_RESULTS", "3")
    monkeypatch.setenv("MEETPREP_MIN_RELEVANCE", "0.25")

    context = Config.from_env().context_configuration()

    assert context.max_results == 3
    assert context.min_relevance_score == 0.25
    assert context.snippet_length == 400
    assert context.enabled is True
