import json
import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from .config import Settings
from .errors import AgentError
from .models import ErrorEvent, TextEvent, ToolResultEvent, ToolUseEvent
from .prompts import SYSTEM_PROMPT
from .tools import ListDirTool, ReadFileTool, ToolRegistry

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)


class TaskStream:
  """Handle for one running task. Iterate `events()` to drive it."""

  def __init__(self, agent: "RepoNavigatorAgent", prompt: str, model: str):
    self.agent = agent
    self.prompt = prompt
    self.model = model

  def events(self) -> AsyncIterator[Any]:
    return self.agent._run(self.prompt, self.model)


class RepoNavigatorAgent:
  def __init__(
    self,
    workspace_dir: str,
    api_key: str,
    api_base_url: Optional[str] = None,
    max_iterations: int = 20,
    ui_callback: Optional[Callable] = None,
    client: Optional[Any] = None,
    max_retries: int = 3,
    retry_base_delay: float = 1.0,
  ):
    self.workspace_dir = workspace_dir
    self.client = client or AsyncOpenAI(api_key=api_key, base_url=api_base_url)
    self.tools = ToolRegistry()
    self.max_iterations = max_iterations
    self.ui_callback = ui_callback  # For showing retry messages and the loading indicator
    self.max_retries = max_retries
    self.retry_base_delay = retry_base_delay

  def _notify_ui(self, event: str, *args) -> None:
    if self.ui_callback:
      self.ui_callback(event, *args)

  def run_task(self, prompt: str, model: str) -> TaskStream:
    """Start a task. Nothing is sent until the returned stream is iterated."""
    return TaskStream(self, prompt, model)

  async def _open_stream(self, messages: List[Dict[str, Any]], model: str):
    """Open a streaming completion with exponential backoff retry logic"""
    last_error = None

    for attempt in range(self.max_retries):
      try:
        if attempt > 0:
          self._notify_ui("show_llm_retry", attempt, self.max_retries, str(last_error))

        kwargs = {"model": model, "messages": messages, "stream": True}
        tool_schemas = self.tools.schemas()
        if tool_schemas:
          kwargs["tools"] = tool_schemas

        stream = await self.client.chat.completions.create(**kwargs)

        if attempt > 0:
          self._notify_ui("show_llm_retry_success", attempt + 1)
        return stream

      except RETRYABLE_ERRORS as e:
        last_error = e
        logger.debug("Completion attempt %d failed: %s", attempt + 1, e)
        if attempt < self.max_retries - 1:
          # Exponential backoff: 1s, 2s, 4s
          await asyncio.sleep(self.retry_base_delay * 2**attempt)
        else:
          self._notify_ui("show_llm_retry_failed", self.max_retries, str(e))
          raise AgentError(f"LLM request failed after {self.max_retries} attempts: {e}") from e
      except openai.APIError as e:
        raise AgentError(f"LLM request failed: {e}") from e

  async def _run(self, prompt: str, model: str) -> AsyncIterator[Any]:
    messages: List[Dict[str, Any]] = [
      {"role": "system", "content": SYSTEM_PROMPT},
      {"role": "user", "content": prompt},
    ]

    for iteration in range(self.max_iterations):
      logger.debug("Agent turn %d/%d", iteration + 1, self.max_iterations)
      self._notify_ui("start_loading")
      try:
        stream = await self._open_stream(messages, model)

        text_parts: List[str] = []
        pending_calls: Dict[int, Dict[str, str]] = {}

        try:
          # Closing the stream releases the HTTP response when the consumer stops early
          async with stream:
            async for chunk in stream:
              self._notify_ui("stop_loading")
              if not chunk.choices:
                continue
              delta = chunk.choices[0].delta

              if delta.content:
                text_parts.append(delta.content)
                yield TextEvent(content=delta.content)

              for call in delta.tool_calls or []:
                slot = pending_calls.setdefault(call.index, {"id": "", "name": "", "arguments": ""})
                if call.id:
                  slot["id"] = call.id
                if call.function is not None:
                  if call.function.name:
                    slot["name"] = call.function.name
                  if call.function.arguments:
                    slot["arguments"] += call.function.arguments
        except openai.APIError as e:
          raise AgentError(f"LLM stream failed: {e}") from e
      finally:
        self._notify_ui("stop_loading")

      if not pending_calls:
        return

      tool_calls = [pending_calls[index] for index in sorted(pending_calls)]
      messages.append(
        {
          "role": "assistant",
          "content": "".join(text_parts) or None,
          "tool_calls": [
            {"id": call["id"], "type": "function", "function": {"name": call["name"], "arguments": call["arguments"]}}
            for call in tool_calls
          ],
        }
      )

      for call in tool_calls:
        yield ToolUseEvent(tool_call_id=call["id"], name=call["name"], arguments=self._decode_arguments(call["arguments"]))
        result = await self.tools.execute(call["name"], call["arguments"])
        output = result.to_message()
        yield ToolResultEvent(tool_call_id=call["id"], name=call["name"], success=result.success, output=output)
        messages.append({"role": "tool", "tool_call_id": call["id"], "content": output})

    yield ErrorEvent(message=f"Stopped after {self.max_iterations} iterations without a final answer")

  def _decode_arguments(self, arguments: str) -> Dict[str, Any]:
    try:
      return self.tools.parse_arguments(arguments)
    except (json.JSONDecodeError, ValueError):
      return {"raw": arguments}


def create_agent(settings: Settings, ui_callback: Optional[Callable] = None) -> RepoNavigatorAgent:
  """Build an agent for the workspace with the file tools registered."""
  agent = RepoNavigatorAgent(
    workspace_dir=settings.workspace_dir,
    api_key=settings.api_key,
    api_base_url=settings.api_base_url,
    max_iterations=settings.max_iterations,
    ui_callback=ui_callback,
  )

  # Give the agent the ability to inspect the repo
  agent.tools.register(ListDirTool(settings.workspace_dir))
  agent.tools.register(ReadFileTool(settings.workspace_dir))

  return agent
