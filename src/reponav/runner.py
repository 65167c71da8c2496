import logging
from contextlib import aclosing
from typing import Any, Optional

from .ui import TerminalUI
from .agent import RepoNavigatorAgent, create_agent
from .config import Settings
from .models import event_field, event_type, extract_text
from .prompts import build_task_prompt
from .stream import to_event_stream

logger = logging.getLogger(__name__)


class RepoNavigator:
  """Asks one question of the agent and streams the answer to the terminal."""

  def __init__(self, settings: Settings, ui: Optional[TerminalUI] = None, agent: Optional[RepoNavigatorAgent] = None):
    self.settings = settings
    self.ui = ui or TerminalUI()
    self.agent = agent or create_agent(settings, ui_callback=self._ui_callback)

  def _ui_callback(self, action: str, *args):
    """Callback for agent to show UI messages"""
    if action == "show_llm_retry":
      self.ui.show_llm_retry(*args)
    elif action == "show_llm_retry_success":
      self.ui.show_llm_retry_success(*args)
    elif action == "show_llm_retry_failed":
      self.ui.show_llm_retry_failed(*args)
    elif action == "start_loading":
      self.ui.start_loading(*args)
    elif action == "stop_loading":
      self.ui.stop_loading()

  def handle_event(self, event: Any) -> None:
    text = extract_text(event)
    if text is not None:
      self.ui.write_text(text)
      return

    kind = event_type(event)
    if kind == "tool_use":
      self.ui.show_tool_use(event_field(event, "name", "?"), event_field(event, "arguments") or {})
    elif kind == "tool_result":
      self.ui.show_tool_result(bool(event_field(event, "success")), str(event_field(event, "output", "")))
    elif kind == "error":
      self.ui.show_notice(str(event_field(event, "message", "")))
    else:
      logger.debug("Ignoring event %r", event)

  async def ask(self, question: str) -> int:
    """Stream the answer to `question`. Returns the process exit status."""
    prompt = build_task_prompt(self.settings.workspace_dir, question)
    logger.debug("Running task with model %s in %s", self.settings.model, self.settings.workspace_dir)

    try:
      result = self.agent.run_task(prompt, self.settings.model)
      async with aclosing(to_event_stream(result)) as events:
        async for event in events:
          self.handle_event(event)
      self.ui.finish_output()
    except Exception as e:
      logger.debug("Task stream failed", exc_info=True)
      self.ui.show_error(f"Fatal error while streaming task events: {e}")
      return 1
    finally:
      self.ui.stop_loading()

    return 0
