"""
Agent Tools Package

Available tools:
- searchChats: Substring search over the chat transcripts
- calculate: Mathematical expression evaluation
- final: Ends the run with an answer (never dispatched)
"""

from .registry import ToolDefinition, ToolRegistry
from .chat_search import search_chats, find_matches
from .math_solver import calculate
from .final import FINAL_TOOL, finish

__all__ = [
    "FINAL_TOOL",
    "ToolDefinition",
    "ToolRegistry",
    "search_chats",
    "find_matches",
    "calculate",
    "finish",
]
