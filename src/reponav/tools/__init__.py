"""Tools for the repository navigator agent."""

from .base import Tool, ToolResult
from .file_tools import ListDirTool, ReadFileTool
from .registry import ToolRegistry

__all__ = [
    "Tool",
    "ToolResult",
    "ToolRegistry",
    "ListDirTool",
    "ReadFileTool",
]
