"""MCP tools for the meetprep server.

This module defines the tools exposed by the MCP server:
- connect_vault / disconnect_vault / vault_status: vault lifecycle
- search_vault: Full-text search across the vault using FTS5
- read_note: Read a complete note by path
- find_context: Rank the notes relevant to a meeting
- get_relevance_weights / set_relevance_weights: scoring weights

Tools that scan, search or read the vault run in a worker thread so the
event loop keeps serving other requests meanwhile.
"""

import asyncio
import json

from fastmcp import FastMCP

from meetprep.context.models import Meeting, RelevanceWeights
from meetprep.context.service import ContextRetrievalService
from meetprep.vault.errors import VaultError, VaultFileMissingError, VaultParseError
from meetprep.vault.manager import VaultManager
from meetprep.vault.parser import parse_frontmatter


def register_tools(
    mcp: FastMCP,
    manager: VaultManager,
    retrieval: ContextRetrievalService,
) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        manager: Vault manager owning the index
        retrieval: Context retrieval service reading that index
    """

    @mcp.tool()
    async def connect_vault(path: str) -> dict:
        """Connect a vault directory, index its markdown notes and watch it.

        Args:
            path: Directory containing the markdown notes

        Returns:
            Scan report with:
            - vault_path: Resolved vault directory
            - total_files: Markdown files found
            - indexed: Files indexed
            - errors: Files skipped, with the reason
            - scanned_at: ISO timestamp
            Or {"error": message} if the path is not a directory.
        """
        try:
            report = await asyncio.to_thread(manager.connect, path)
        except VaultError as e:
            return {"error": str(e)}
        return report.to_dict()

    @mcp.tool()
    async def disconnect_vault() -> dict:
        """Stop watching the vault and drop its index. Files are not touched."""
        await asyncio.to_thread(manager.disconnect)
        return manager.status()

    @mcp.tool()
    def vault_status() -> dict:
        """Report the vault connection state and index size."""
        return manager.status()

    @mcp.tool()
    async def search_vault(query: str, limit: int = 10) -> dict:
        """Search notes by title, content, tags and frontmatter.

        Partial words match as prefixes.

        Args:
            query: Free text query
            limit: Maximum number of results to return (default: 10)

        Returns:
            {"results": [...]} where each result has path, title, tags and
            score (higher is better), or {"error": message}.
        """
        try:
            results = await asyncio.to_thread(manager.search_files, query, limit=limit)
        except VaultError as e:
            return {"error": str(e), "results": []}
        return {
            "results": [
                {
                    "path": vault_file.path,
                    "title": vault_file.title,
                    "tags": vault_file.all_tags,
                    "score": round(score, 3),
                }
                for vault_file, score in results
            ]
        }

    @mcp.tool()
    async def read_note(path: str) -> dict:
        """Read a complete note from the vault.

        Args:
            path: Absolute path or path relative to the vault root

        Returns:
            Note with:
            - path: Requested path
            - metadata: Frontmatter mapping (None if unparseable)
            - content: Note body without frontmatter
            - exists: Whether the note was found
            - rescanned: True when the note was missing and the vault was rescanned
            - error: Error message if the note could not be read
        """
        result = {
            "path": path,
            "metadata": None,
            "content": None,
            "exists": False,
            "rescanned": False,
            "error": None,
        }
        try:
            text = await asyncio.to_thread(manager.read_file, path)
        except VaultFileMissingError as e:
            result["rescanned"] = e.rescanned
            result["error"] = str(e)
            return result
        except VaultError as e:
            result["error"] = str(e)
            return result

        result["exists"] = True
        try:
            frontmatter, body = parse_frontmatter(text, path)
        except VaultParseError:
            result["content"] = text
            return result
        result["metadata"] = json.loads(frontmatter.to_text() or "{}")
        result["content"] = body
        return result

    @mcp.tool()
    async def find_context(
        title: str,
        description: str | None = None,
        attendees: list[str] | None = None,
        location: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict:
        """Find the vault notes most relevant to a meeting.

        Args:
            title: Meeting title
            description: Invite description (conferencing boilerplate is ignored)
            attendees: "Name <email>", bare emails or bare names
            location: Meeting location (video links are ignored)
            start_date: ISO start time
            end_date: ISO end time

        Returns:
            - matches: path, title, relevance_score, matched_fields, snippets, matched_at
            - total_matches: Matches above the threshold before truncation
            - search_time: Milliseconds spent
            - retrieved_at: ISO timestamp
        """
        meeting = Meeting.from_dict(
            {
                "title": title,
                "description": description,
                "attendees": attendees or [],
                "location": location,
                "start_date": start_date,
                "end_date": end_date,
            }
        )
        context = await asyncio.to_thread(retrieval.find_relevant_context, meeting)
        return context.to_dict()

    @mcp.tool()
    def get_relevance_weights() -> dict:
        """Return the weights used to score notes against meetings."""
        return retrieval.current_weights().to_dict()

    @mcp.tool()
    def set_relevance_weights(weights: dict) -> dict:
        """Update scoring weights. Omitted weights keep their current value.

        Args:
            weights: Any of title, content, tags, attendees,
                flex_search_bonus, recency_bonus, each between 0 and 1
        """
        merged = {**retrieval.current_weights().to_dict(), **weights}
        try:
            updated = RelevanceWeights.from_dict(merged)
        except (TypeError, ValueError) as e:
            return {"error": str(e)}
        manager.settings.set_relevance_weights(updated)
        return updated.to_dict()
