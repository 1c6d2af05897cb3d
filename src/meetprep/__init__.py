"""
meetprep - meeting preparation context from a markdown vault.

Keeps a live full-text index over a directory of markdown notes and, given a
meeting (title, description, attendees, location), retrieves and ranks the
notes worth reading before it.

Stack:
- Python + FastMCP (tool surface)
- SQLite FTS5 in memory (search index)
- PyYAML (frontmatter)
- Markdown (source of truth)
"""

__version__ = "0.1.0"
