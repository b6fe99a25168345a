"""
Chat Transcript Search Tool

Case-insensitive literal substring search over the ``.txt`` transcripts
in the configured chats directory.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import config

logger = logging.getLogger(__name__)

MISSING_DIR_NOTE = "Chats directory is missing"


def resolve_chats_dir(chats_dir: Optional[str] = None) -> Path:
    """Return the chats directory, falling back to the configured one."""
    return Path(chats_dir or config.tools.chats_dir)


def find_matches(query: str, chats_dir: Path) -> list[dict]:
    """
    Scan every ``.txt`` file in ``chats_dir`` for lines containing ``query``.

    Files are visited in name order, lines are numbered from 1, and the
    matched line is returned with surrounding whitespace stripped.

    Raises:
        OSError: If the directory or one of its files cannot be read.
    """
    needle = query.lower()
    matches = []
    for path in sorted(chats_dir.iterdir()):
        if path.suffix != ".txt" or not path.is_file():
            continue
        content = path.read_text(encoding="utf-8", errors="replace")
        for number, line in enumerate(content.split("\n"), 1):
            if needle in line.lower():
                matches.append({"file": path.name, "line": number, "text": line.strip()})
    return matches


def search_chats(query: str, chats_dir: Optional[str] = None) -> dict:
    """
    Search the chat transcripts for a substring.

    Args:
        query: Text to look for (case-insensitive)
        chats_dir: Directory to search; defaults to CHATS_DIR

    Returns:
        ``{"matches": [...]}`` or ``{"error": ..., "detail": ...}``
    """
    if not query or not query.strip():
        return {
            "error": "Search query is empty",
            "detail": "Provide the text to look for as the tool input.",
        }

    directory = resolve_chats_dir(chats_dir)
    if not directory.is_dir():
        logger.debug(f"Chats directory {directory} does not exist")
        return {"matches": []}

    try:
        matches = find_matches(query, directory)
    except OSError as e:
        logger.error(f"Chat search failed in {directory}: {e}")
        return {"error": "Chats directory access failed", "detail": str(e)}

    logger.debug(f"Chat search for '{query}' found {len(matches)} matches")
    return {"matches": matches}


# Register tool with the registry
def _register():
    from .registry import ToolRegistry

    ToolRegistry.register(
        name="searchChats",
        description="Search the chat transcripts for lines containing some text",
        input_hint="search string",
        handler=search_chats,
    )


_register()
