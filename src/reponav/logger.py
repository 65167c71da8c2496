"""Logging setup backed by rich."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_console: Optional[Console] = None


def get_console() -> Console:
  """Shared stderr console for log records."""
  global _console
  if _console is None:
    _console = Console(stderr=True)
  return _console


def setup_logging(verbose: bool = False) -> None:
  level = logging.DEBUG if verbose else logging.WARNING
  logging.basicConfig(
    level=level,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=get_console(), rich_tracebacks=True, show_path=verbose)],
    force=True,
  )
  # Keep HTTP client chatter out of debug output
  for name in ("httpx", "httpcore", "openai"):
    logging.getLogger(name).setLevel(max(level, logging.INFO))
