"""Base classes for tools."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass

from ..errors import WorkspacePathError


@dataclass
class ToolResult:
  """Result from a tool execution."""

  success: bool
  data: Any = None
  error: Optional[str] = None

  def to_message(self) -> str:
    """Render the result as the content of a tool message."""
    if not self.success:
      return f"Error: {self.error}"
    if isinstance(self.data, str):
      return self.data
    return json.dumps(self.data, indent=2, default=str)


class Tool(ABC):
  """Base class for all tools the agent can call."""

  name: str = ""
  description: str = ""
  parameters: Dict[str, Any] = {"type": "object", "properties": {}}

  def __init__(self, workspace_dir: str = "."):
    self.workspace_dir = Path(workspace_dir).resolve()

  @abstractmethod
  async def execute(self, **kwargs: Any) -> ToolResult:
    """Execute the tool with given parameters."""

  def schema(self) -> Dict[str, Any]:
    """OpenAI function-calling definition for this tool."""
    return {
      "type": "function",
      "function": {
        "name": self.name,
        "description": self.description,
        "parameters": self.parameters,
      },
    }

  def resolve_path(self, path: str) -> Path:
    """Resolve `path` against the workspace, refusing anything outside it."""
    candidate = (self.workspace_dir / path).resolve()
    if candidate != self.workspace_dir and self.workspace_dir not in candidate.parents:
      raise WorkspacePathError(f"Path is outside the workspace: {path}")
    return candidate

  def relative(self, path: Path) -> str:
    rel = path.relative_to(self.workspace_dir).as_posix()
    return rel or "."
