"""Tool catalog and dispatch handlers."""

from .catalog import TOOL_DEFINITIONS, TOOLS_BY_NAME, ToolDefinition
from .enhanced_tool_handler import EnhancedToolHandler
from .tool_handler import TextContent, ToolHandler, ToolResult

__all__ = [
    "TOOL_DEFINITIONS",
    "TOOLS_BY_NAME",
    "EnhancedToolHandler",
    "TextContent",
    "ToolDefinition",
    "ToolHandler",
    "ToolResult",
]
