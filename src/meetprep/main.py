"""Main entry point for the meetprep MCP server."""

import argparse
import logging
import sys
from pathlib import Path

from fastmcp import FastMCP

from meetprep.config import Config
from meetprep.context.service import ContextRetrievalService
from meetprep.settings import SettingsStore
from meetprep.tools import register_tools
from meetprep.vault.errors import VaultValidationError
from meetprep.vault.manager import VaultManager

logger = logging.getLogger(__name__)


def create_server(config: Config) -> tuple[FastMCP, VaultManager]:
    """Create and configure the MCP server with all components.

    Args:
        config: Configuration instance with all settings.

    Returns:
        The server and the vault manager it serves, so the caller can close it.
    """
    mcp = FastMCP(
        name="meetprep",
        instructions=(
            "meetprep indexes a vault of markdown notes and finds the notes that "
            "matter for an upcoming meeting. Connect a vault first, then use "
            "find_context with the meeting title, description and attendees, or "
            "search_vault and read_note to browse."
        ),
    )

    logger.info("Loading settings from %s", config.settings_path)
    settings = SettingsStore(config.settings_path)

    manager = VaultManager(settings=settings, watch_interval=config.watch_interval)
    retrieval = ContextRetrievalService(
        manager.indexer,
        config=config.context_configuration(),
        settings=settings,
    )

    if config.vault_path is not None:
        logger.info("Connecting vault from MEETPREP_VAULT...")
        try:
            report = manager.connect(config.vault_path)
            logger.info("Initial index complete: %d documents indexed", report.indexed)
        except VaultValidationError as e:
            logger.warning("Cannot connect configured vault: %s", e)
    else:
        report = manager.restore()
        if report is not None:
            logger.info("Restored vault %s: %d documents indexed", report.vault_path, report.indexed)
        else:
            logger.info("No vault connected yet")

    logger.info("Registering tools...")
    register_tools(mcp, manager, retrieval)

    logger.info("Server configured successfully")
    return mcp, manager


def main() -> None:
    """Main function - starts the MCP server."""
    parser = argparse.ArgumentParser(description="meetprep - meeting context from a markdown vault")
    parser.add_argument(
        "--vault",
        help="Vault directory to connect at startup (overrides MEETPREP_VAULT)",
    )
    parser.add_argument(
        "--transport",
        choices=("stdio", "sse"),
        default="sse",
        help="MCP transport (default: sse)",
    )
    args = parser.parse_args()

    config = Config.from_env()
    if args.vault:
        config.vault_path = Path(args.vault).expanduser()

    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Print startup banner
    logger.info("=" * 50)
    logger.info("meetprep starting...")
    logger.info("  VAULT:          %s", config.vault_path or "(from settings)")
    logger.info("  PORT:           %s", config.port)
    logger.info("  SETTINGS:       %s", config.settings_path)
    logger.info("  WATCH_INTERVAL: %ss", config.watch_interval)
    logger.info("  MIN_RELEVANCE:  %s", config.min_relevance_score)
    logger.info("=" * 50)

    manager = None
    try:
        mcp, manager = create_server(config)
        if args.transport == "stdio":
            mcp.run(transport="stdio")
        else:
            logger.info("Starting MCP server on port %s...", config.port)
            mcp.run(transport="sse", host="0.0.0.0", port=config.port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        if manager is not None:
            manager.close()


if __name__ == "__main__":
    main()
