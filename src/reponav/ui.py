import sys
import time
import threading
from typing import Any, Dict, Optional, TextIO

from rich.live import Live
from rich.markup import escape
from rich.console import Console

from .config import API_KEY_ENV_VAR, CONFIG_FILE_NAME

USAGE = 'Usage: reponav "Your question about this repo"'


class TerminalUI:
  """Answer text goes to stdout untouched; everything else goes to stderr."""

  def __init__(self, out: Optional[TextIO] = None):
    self.console = Console(stderr=True)
    self.out = out or sys.stdout
    self.loading_live = None
    self.loading_task = None
    self.loading_active = False
    self.wrote_text = False

  def _add_spacing(self):
    """Add a blank line for consistent spacing between status blocks."""
    self.console.print()

  def write_text(self, content: str):
    """Write answer text as it streams in."""
    self.stop_loading()
    self.out.write(content)
    self.out.flush()
    self.wrote_text = True

  def finish_output(self):
    """Final newline for nice shell prompt"""
    self.out.write("\n")
    self.out.flush()

  def show_usage(self):
    self.console.print(USAGE, highlight=False)

  def show_tool_use(self, name: str, arguments: Dict[str, Any]):
    """Show a tool call in Claude Code style"""
    if self.wrote_text:
      # Keep status lines off the end of a partially written answer line
      self.out.write("\n")
      self.out.flush()
      self.wrote_text = False
    args = ", ".join(f"{key}={value!r}" for key, value in arguments.items())
    self.console.print(
      f"[bright_white]⏺[/bright_white] [bold bright_white]{escape(name)}[/bold bright_white]([bright_yellow]{escape(args)}[/bright_yellow])"
    )

  def show_tool_result(self, success: bool, output: str):
    if not success:
      self.console.print(f"  [bright_white]⎿[/bright_white]  [bright_red]{escape(output[:200])}[/bright_red]")
      return

    lines = output.splitlines()
    summary = f"{len(lines)} line{'s' if len(lines) != 1 else ''}"
    self.console.print(f"  [bright_white]⎿[/bright_white]  [white]{summary}[/white]")

  def show_notice(self, message: str):
    self._add_spacing()
    self.console.print(f"[yellow]● {escape(message)}[/yellow]")

  def show_llm_retry(self, attempt: int, max_retries: int, error: str):
    self.console.print(f"  [bright_white]LLM request failed (attempt {attempt}/{max_retries}): {escape(error[:50])}...[/bright_white]")
    self.console.print(f"  [bright_white]Retrying in {2 ** (attempt - 1)} seconds...[/bright_white]")

  def show_llm_retry_success(self, final_attempt: int):
    self.console.print(f"  [bright_white]● LLM request succeeded on attempt {final_attempt}[/bright_white]")

  def show_llm_retry_failed(self, max_retries: int, final_error: str):
    self.console.print(f"  [red]● LLM request failed after {max_retries} attempts[/red]")
    self.console.print(f"  [red]Final error: {escape(final_error[:100])}...[/red]")

  def show_error(self, error: str):
    """Show error in Claude Code style"""
    self.stop_loading()
    self._add_spacing()
    self.console.print(f"[bright_red]⏺[/bright_red] [bright_red]{escape(error)}[/bright_red]")

  def show_config_created(self, path: Optional[str]):
    if path is None:
      self.console.print(f"[#EB999A]● {CONFIG_FILE_NAME} already exists[/#EB999A]")
      return
    self.console.print(f"[#60875F]● Created {escape(path)}[/#60875F]")
    self.console.print(f"[yellow]● Set the {API_KEY_ENV_VAR} environment variable with your API key[/yellow]")

  def start_loading(self, message: str = "Thinking"):
    """Start animated loading indicator that disappears when stopped."""
    if self.loading_active or not self.console.is_terminal:
      return

    self.loading_active = True

    def animate_loading():
      animation_count = 0
      start_time = time.time()
      while self.loading_active:
        bullets = ["○", "◐", "◑", "●"]
        bullet = bullets[animation_count % 4]
        dots = "." * ((animation_count % 3) + 1)
        spaces = " " * (3 - len(dots))
        elapsed_seconds = int(time.time() - start_time)

        loading_text = f"[dim white]{bullet} {message}{dots}{spaces} ({elapsed_seconds}s)[/dim white]"

        if self.loading_live is None:
          # transient=True makes the loading indicator disappear when stopped
          self.loading_live = Live(loading_text, console=self.console, refresh_per_second=4, transient=True)
          self.loading_live.start()
        else:
          self.loading_live.update(loading_text)

        time.sleep(0.25)
        animation_count += 1

    self.loading_task = threading.Thread(target=animate_loading, daemon=True)
    self.loading_task.start()

  def stop_loading(self):
    """Stop animated loading indicator"""
    if not self.loading_active:
      return

    self.loading_active = False

    if self.loading_task:
      self.loading_task.join(timeout=0.5)
      self.loading_task = None

    if self.loading_live:
      self.loading_live.stop()
      self.loading_live = None
