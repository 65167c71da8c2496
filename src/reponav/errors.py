"""Exceptions raised by reponav."""


class RepoNavError(Exception):
  """Base class for reponav errors."""


class ConfigError(RepoNavError):
  """Invalid or unreadable configuration."""


class MissingEnvironmentError(ConfigError):
  """A required environment variable is not set."""

  def __init__(self, name: str):
    self.name = name
    super().__init__(f"Missing required env var: {name}")


class AgentError(RepoNavError):
  """The model provider rejected or failed a request."""


class ToolRegistrationError(RepoNavError):
  """A tool could not be registered with the agent."""


class WorkspacePathError(RepoNavError):
  """A tool was asked to touch a path outside the workspace."""
