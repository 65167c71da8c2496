"""Shared fixtures for all tests."""

import copy
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from reponav.config import Settings


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
  """Create a small repository layout to navigate."""
  (tmp_path / "src").mkdir()
  (tmp_path / "src" / "app.py").write_text("def main():\n    return 'hello'\n")
  (tmp_path / "src" / "__pycache__").mkdir()
  (tmp_path / "src" / "__pycache__" / "app.cpython-312.pyc").write_bytes(b"\0\0\0")
  (tmp_path / "README.md").write_text("# Demo\nLine 2\nLine 3\n")
  return tmp_path


@pytest.fixture
def settings(workspace: Path) -> Settings:
  return Settings(api_key="test-key", model="test-model", workspace_dir=str(workspace))


def text_chunk(content: str) -> SimpleNamespace:
  """A streamed completion chunk carrying text."""
  return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content, tool_calls=None))])


def tool_call_chunk(index: int, call_id: Optional[str] = None, name: Optional[str] = None, arguments: str = "") -> SimpleNamespace:
  """A streamed completion chunk carrying (part of) a tool call."""
  call = SimpleNamespace(index=index, id=call_id, function=SimpleNamespace(name=name, arguments=arguments))
  return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=None, tool_calls=[call]))])


class FakeStream:
  """Async context manager and iterator over scripted chunks, like openai's `AsyncStream`."""

  def __init__(self, chunks: List[Any]):
    self.chunks = list(chunks)
    self.closed = False

  async def __aenter__(self):
    return self

  async def __aexit__(self, *exc_info):
    self.closed = True

  def __aiter__(self):
    return self

  async def __anext__(self):
    if self.closed or not self.chunks:
      raise StopAsyncIteration
    return self.chunks.pop(0)


class FakeCompletions:
  """Scripted stand-in for `client.chat.completions`.

  Each entry in `responses` is either a list of chunks, streamed back in
  order, or an exception raised when the completion is opened.
  """

  def __init__(self, responses: List[Any]):
    self.responses = list(responses)
    self.calls: List[Dict[str, Any]] = []
    self.streams: List[FakeStream] = []

  async def create(self, **kwargs):
    self.calls.append(copy.deepcopy(kwargs))
    response = self.responses.pop(0)
    if isinstance(response, BaseException):
      raise response
    stream = FakeStream(response)
    self.streams.append(stream)
    return stream


class FakeClient:
  def __init__(self, responses: List[Any]):
    self.chat = SimpleNamespace(completions=FakeCompletions(responses))

  @property
  def calls(self) -> List[Dict[str, Any]]:
    return self.chat.completions.calls
