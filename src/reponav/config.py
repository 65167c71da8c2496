"""Configuration for reponav: constants, environment and reponav.toml."""

import os
from typing import Any, Dict, Optional

import tomli
import tomli_w
from pydantic import BaseModel, ValidationError, field_validator

from .errors import ConfigError, MissingEnvironmentError

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_API_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MAX_ITERATIONS = 20
API_KEY_ENV_VAR = "OPENAI_API_KEY"
MODEL_ENV_VAR = "OPENAI_MODEL"
BASE_URL_ENV_VAR = "OPENAI_BASE_URL"
CONFIG_FILE_NAME = "reponav.toml"


class Settings(BaseModel):
  """Resolved runtime settings for one invocation."""
  api_key: str
  api_base_url: str = DEFAULT_API_BASE_URL
  model: str = DEFAULT_MODEL
  max_iterations: int = DEFAULT_MAX_ITERATIONS
  workspace_dir: str

  @field_validator("max_iterations")
  @classmethod
  def validate_max_iterations(cls, v):
    if v < 1:
      raise ValueError("max_iterations must be at least 1")
    return v

  @field_validator("workspace_dir")
  @classmethod
  def validate_workspace_dir(cls, v):
    path = os.path.abspath(v)
    if not os.path.isdir(path):
      raise ValueError(f"workspace directory does not exist: {path}")
    return path


def get_required_env(name: str) -> str:
  value = os.getenv(name)
  if not value:
    raise MissingEnvironmentError(name)
  return value


def config_path(project_root: str) -> str:
  return os.path.join(os.path.abspath(project_root), CONFIG_FILE_NAME)


def load_config(project_root: str = ".") -> Dict[str, Any]:
  """Load reponav.toml from the project root, or an empty dict if absent."""
  path = config_path(project_root)
  if not os.path.exists(path):
    return {}
  try:
    with open(path, "rb") as f:
      return tomli.load(f)
  except tomli.TOMLDecodeError as e:
    raise ConfigError(f"Invalid {CONFIG_FILE_NAME}: {e}") from e


def save_config(project_root: str, config: Dict[str, Any]) -> str:
  path = config_path(project_root)
  with open(path, "wb") as f:
    tomli_w.dump(config, f)
  return path


def init_config(project_root: str = ".") -> Optional[str]:
  """Write a default reponav.toml. Returns None if one already exists."""
  if os.path.exists(config_path(project_root)):
    return None
  return save_config(
    project_root,
    {
      "api_base_url": DEFAULT_API_BASE_URL,
      "model": DEFAULT_MODEL,
      "max_iterations": DEFAULT_MAX_ITERATIONS,
    },
  )


def resolve_settings(
  project_root: str = ".",
  model: Optional[str] = None,
  max_iterations: Optional[int] = None,
) -> Settings:
  """Merge CLI options, environment and reponav.toml into Settings.

  Precedence is CLI option, then environment variable, then config file,
  then the built-in default.
  """
  config = load_config(project_root)
  api_key = get_required_env(API_KEY_ENV_VAR)

  try:
    return Settings(
      api_key=api_key,
      api_base_url=os.getenv(BASE_URL_ENV_VAR) or config.get("api_base_url", DEFAULT_API_BASE_URL),
      model=model or os.getenv(MODEL_ENV_VAR) or config.get("model", DEFAULT_MODEL),
      max_iterations=max_iterations if max_iterations is not None else config.get("max_iterations", DEFAULT_MAX_ITERATIONS),
      workspace_dir=project_root,
    )
  except ValidationError as e:
    raise ConfigError(str(e)) from e
