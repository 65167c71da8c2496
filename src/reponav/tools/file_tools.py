"""Read-only file tools scoped to the workspace."""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .base import Tool, ToolResult
from ..errors import WorkspacePathError

logger = logging.getLogger(__name__)

IGNORE_DIRS = {".venv", "venv", ".git", "node_modules", "__pycache__", ".pytest_cache", ".mypy_cache", "dist", "build"}
IGNORE_PATTERNS = [
  "*.pyc",
  "*.egg-info",
  ".coverage",
  "*.log",
  "*.tmp",
  ".DS_Store",
  "*.min.js",
  "*.min.css",
]
MAX_FILE_SIZE = 100000  # characters per read


def should_ignore(path: Path) -> bool:
  if path.name in IGNORE_DIRS:
    return True
  return any(fnmatch.fnmatch(path.name, pattern) for pattern in IGNORE_PATTERNS)


def is_text_file(path: Path) -> bool:
  with open(path, "rb") as f:
    chunk = f.read(512)
  return b"\0" not in chunk


def git_ignored(workspace_dir: Path, paths: Iterable[Path]) -> Set[Path]:
  """Return the subset of `paths` that git ignores, if the workspace is a repo."""
  paths = list(paths)
  if not paths:
    return set()

  try:
    import git
  except ImportError:
    # GitPython refuses to import when no git executable is installed
    logger.debug("git unavailable, skipping .gitignore filtering")
    return set()

  try:
    repo = git.Repo(workspace_dir, search_parent_directories=True)
  except (git.InvalidGitRepositoryError, git.NoSuchPathError):
    return set()
  if repo.working_tree_dir is None:
    return set()

  root = Path(repo.working_tree_dir).resolve()
  try:
    ignored = repo.ignored(*[p.relative_to(root).as_posix() for p in paths])
  except git.GitCommandError as e:
    logger.debug("git check-ignore failed: %s", e)
    return set()
  return {(root / p.rstrip("/")).resolve() for p in ignored}


class ListDirTool(Tool):
  """List the entries of a workspace directory."""

  name = "list_dir"
  description = (
    "List files and subdirectories of a directory in the repository. "
    "Paths are relative to the repository root; directories end with '/'."
  )
  parameters = {
    "type": "object",
    "properties": {
      "path": {"type": "string", "description": "Directory to list, relative to the repository root. Defaults to '.'"},
    },
    "required": [],
  }

  async def execute(self, path: str = ".") -> ToolResult:
    try:
      directory = self.resolve_path(path)
    except WorkspacePathError as e:
      return ToolResult(success=False, error=str(e))

    if not directory.is_dir():
      return ToolResult(success=False, error=f"Not a directory: {path}")

    try:
      entries = [p for p in sorted(directory.iterdir(), key=lambda p: p.name) if not should_ignore(p)]
    except OSError as e:
      return ToolResult(success=False, error=f"Cannot list {path}: {e}")

    ignored = git_ignored(self.workspace_dir, entries)
    lines: List[str] = []
    for entry in entries:
      if entry.resolve() in ignored:
        continue
      rel = self.relative(entry)
      lines.append(f"{rel}/" if entry.is_dir() else rel)

    return ToolResult(success=True, data="\n".join(lines) if lines else "(empty directory)")


class ReadFileTool(Tool):
  """Read a text file from the workspace, optionally a line range."""

  name = "read_file"
  description = (
    "Read the contents of a text file in the repository. Optionally pass "
    "start_line and end_line (1-based, inclusive) to read part of a large file."
  )
  parameters = {
    "type": "object",
    "properties": {
      "path": {"type": "string", "description": "File to read, relative to the repository root"},
      "start_line": {"type": "integer", "description": "First line to return (1-based)"},
      "end_line": {"type": "integer", "description": "Last line to return (inclusive)"},
    },
    "required": ["path"],
  }

  def __init__(self, workspace_dir: str = ".", max_file_size: int = MAX_FILE_SIZE):
    super().__init__(workspace_dir)
    self.max_file_size = max_file_size

  async def execute(self, path: str, start_line: Optional[int] = None, end_line: Optional[int] = None) -> ToolResult:
    try:
      file_path = self.resolve_path(path)
    except WorkspacePathError as e:
      return ToolResult(success=False, error=str(e))

    if not file_path.is_file():
      return ToolResult(success=False, error=f"File not found: {path}")

    try:
      if not is_text_file(file_path):
        return ToolResult(success=False, error=f"Binary file not supported: {path}")
      with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        content = f.read(self.max_file_size + 1)
    except OSError as e:
      return ToolResult(success=False, error=f"Cannot read {path}: {e}")

    truncated = len(content) > self.max_file_size
    if truncated:
      content = content[: self.max_file_size]

    if start_line is not None or end_line is not None:
      lines = content.splitlines(keepends=True)
      start = max((start_line or 1) - 1, 0)
      end = end_line if end_line is not None else len(lines)
      if start >= len(lines) or end <= start:
        return ToolResult(success=False, error=f"Line range {start_line}-{end_line} is outside {path} ({len(lines)} lines)")
      content = "".join(lines[start:end])
      # A range inside the read window is complete even if the file is larger
      truncated = truncated and end >= len(lines)

    if truncated:
      content += "\n... [truncated]"

    return ToolResult(success=True, data=content)
