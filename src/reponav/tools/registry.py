"""Registry of tools exposed to the model."""

import json
import logging
from typing import Any, Dict, List

from .base import Tool, ToolResult
from ..errors import ToolRegistrationError

logger = logging.getLogger(__name__)


class ToolRegistry:
  def __init__(self):
    self._tools: Dict[str, Tool] = {}

  def register(self, tool: Tool) -> None:
    if not tool.name:
      raise ToolRegistrationError(f"{type(tool).__name__} has no name")
    if tool.name in self._tools:
      raise ToolRegistrationError(f"Tool already registered: {tool.name}")
    self._tools[tool.name] = tool
    logger.debug("Registered tool %s", tool.name)

  def names(self) -> List[str]:
    return list(self._tools)

  def schemas(self) -> List[Dict[str, Any]]:
    return [tool.schema() for tool in self._tools.values()]

  def parse_arguments(self, arguments: str) -> Dict[str, Any]:
    """Decode a tool call's JSON arguments. Empty input means no arguments."""
    if not arguments or not arguments.strip():
      return {}
    parsed = json.loads(arguments)
    if not isinstance(parsed, dict):
      raise ValueError("tool arguments must be a JSON object")
    return parsed

  async def execute(self, name: str, arguments: str) -> ToolResult:
    """Run a tool by name. Failures come back as unsuccessful results."""
    tool = self._tools.get(name)
    if tool is None:
      return ToolResult(success=False, error=f"Unknown tool: {name}")

    try:
      kwargs = self.parse_arguments(arguments)
    except (json.JSONDecodeError, ValueError) as e:
      return ToolResult(success=False, error=f"Invalid arguments for {name}: {e}")

    try:
      return await tool.execute(**kwargs)
    except TypeError as e:
      # Model passed parameters the tool does not accept
      return ToolResult(success=False, error=f"Invalid arguments for {name}: {e}")
