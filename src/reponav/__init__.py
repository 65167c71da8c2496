import sys
import asyncio
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from .ui import TerminalUI
from .config import init_config, resolve_settings
from .errors import ConfigError
from .logger import setup_logging
from .runner import RepoNavigator


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("question", nargs=-1, type=click.UNPROCESSED)
@click.option("--project-root", default=".", help="Repository to inspect (default: current directory)")
@click.option("--model", default=None, help="Model to use (overrides OPENAI_MODEL and reponav.toml)")
@click.option("--max-iterations", type=int, default=None, help="Maximum agent turns before giving up")
@click.option("--init", "init", is_flag=True, help="Create a reponav.toml file with configuration settings and exit")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
def main(
  question: Tuple[str, ...],
  project_root: str,
  model: Optional[str],
  max_iterations: Optional[int],
  init: bool,
  verbose: bool,
):
  """
  Repo Navigator - ask questions about a local code repository.

  The agent lists and reads files in the project root to answer QUESTION,
  and streams its markdown answer to standard output.
  """
  load_dotenv()
  setup_logging(verbose)
  ui = TerminalUI()

  if init:
    ui.show_config_created(init_config(project_root))
    return

  text = " ".join(question).strip()
  if not text:
    ui.show_usage()
    sys.exit(1)

  try:
    settings = resolve_settings(project_root, model=model, max_iterations=max_iterations)
  except ConfigError as e:
    ui.show_error(str(e))
    sys.exit(1)

  navigator = RepoNavigator(settings, ui=ui)
  sys.exit(asyncio.run(navigator.ask(text)))
