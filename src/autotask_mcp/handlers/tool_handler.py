"""Tool dispatch and result envelopes."""

import json
import logging
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from autotask_mcp.api_helpers.autotask_client import AutotaskClient
from autotask_mcp.exceptions import InvalidToolArgumentsError, UnknownToolError

from .catalog import TOOL_DEFINITIONS, TOOLS_BY_NAME, ToolDefinition

logger = logging.getLogger(__name__)


class TextContent(BaseModel):
    """One text block of a tool result."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Wire result of a tool call."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.content)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def _dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


class ToolHandler:
    """Execute catalog tools against an ``AutotaskClient``.

    ``execute`` returns the success envelope ``{message, data, timestamp}`` and
    lets failures propagate. ``call_tool`` wraps ``execute`` and never raises:
    failures become ``{error, tool, arguments, timestamp}`` with
    ``isError=True``.
    """

    def __init__(self, client: AutotaskClient) -> None:
        self.client = client

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.describe() for tool in TOOL_DEFINITIONS]

    def get_tool(self, name: str) -> ToolDefinition:
        try:
            return TOOLS_BY_NAME[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def execute(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run ``name`` and return its success envelope.

        Raises:
            UnknownToolError: ``name`` is not in the catalog.
            InvalidToolArgumentsError: A required argument is missing.
            AutotaskError: The underlying API call failed.
        """
        tool = self.get_tool(name)
        args = dict(arguments or {})
        missing = [key for key in tool.required if args.get(key) is None]
        if missing:
            raise InvalidToolArgumentsError(name, missing)

        logger.debug("Calling tool %s with args %s", name, args)
        result, message = await tool.run(self.client, args)
        return {"message": message, "data": result, "timestamp": _timestamp()}

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolResult:
        arguments = arguments or {}
        try:
            envelope = await self.execute(name, arguments)
        except Exception as e:
            logger.error("Tool %s failed: %s", name, e)
            error = {
                "error": str(e),
                "tool": name,
                "arguments": arguments,
                "timestamp": _timestamp(),
            }
            return ToolResult(content=[TextContent(text=_dumps(error))], is_error=True)

        return ToolResult(content=[TextContent(text=_dumps(envelope))])
