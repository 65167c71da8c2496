"""Event models emitted by the agent runtime."""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field, field_validator

TEXT_EVENT_TYPE = "text"


class TextEvent(BaseModel):
  """A chunk of answer text streamed from the model."""
  type: Literal["text"] = "text"
  content: str


class ToolUseEvent(BaseModel):
  """The model asked for a tool to be run."""
  type: Literal["tool_use"] = "tool_use"
  tool_call_id: str
  name: str
  arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResultEvent(BaseModel):
  """Outcome of a tool call, as reported back to the model."""
  type: Literal["tool_result"] = "tool_result"
  tool_call_id: str
  name: str
  success: bool
  output: str = ""

  @field_validator("output", mode="before")
  @classmethod
  def validate_output(cls, v):
    if v is None:
      return ""
    return str(v)


class ErrorEvent(BaseModel):
  """Non-fatal notice from the runtime, e.g. the iteration limit was hit."""
  type: Literal["error"] = "error"
  message: str


def event_field(event: Any, name: str, default: Any = None) -> Any:
  """Read a field from a mapping-style or attribute-style event."""
  if isinstance(event, dict):
    return event.get(name, default)
  return getattr(event, name, default)


def event_type(event: Any) -> Optional[str]:
  """Read the `type` discriminator from an event."""
  value = event_field(event, "type")
  return value if isinstance(value, str) else None


def extract_text(event: Any) -> Optional[str]:
  """Return the text payload of a text event, or None for any other event."""
  if event is None or event_type(event) != TEXT_EVENT_TYPE:
    return None
  content = event_field(event, "content")
  return content if isinstance(content, str) else None
