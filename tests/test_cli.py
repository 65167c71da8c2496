"""Tests for the reponav command line."""

from __future__ import annotations

import os

import pytest
from click.testing import CliRunner

import reponav
from reponav.config import API_KEY_ENV_VAR, CONFIG_FILE_NAME, MODEL_ENV_VAR


class FakeNavigator:
  instances = []

  def __init__(self, settings, ui=None):
    self.settings = settings
    self.questions = []
    FakeNavigator.instances.append(self)

  async def ask(self, question: str) -> int:
    self.questions.append(question)
    return 0


@pytest.fixture
def runner() -> CliRunner:
  return CliRunner()


@pytest.fixture(autouse=True)
def fake_navigator(monkeypatch):
  FakeNavigator.instances = []
  monkeypatch.setattr(reponav, "RepoNavigator", FakeNavigator)
  monkeypatch.delenv(MODEL_ENV_VAR, raising=False)


class TestMain:
  def test_empty_question_exits_with_usage(self, runner: CliRunner):
    result = runner.invoke(reponav.main, [])
    assert result.exit_code == 1
    assert "Usage: reponav" in result.output
    assert FakeNavigator.instances == []

  def test_whitespace_question_counts_as_empty(self, runner: CliRunner):
    result = runner.invoke(reponav.main, ["  ", ""])
    assert result.exit_code == 1

  def test_missing_api_key(self, runner: CliRunner, monkeypatch):
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    with runner.isolated_filesystem():
      result = runner.invoke(reponav.main, ["What", "is", "this?"])
    assert result.exit_code == 1
    assert f"Missing required env var: {API_KEY_ENV_VAR}" in result.output
    assert FakeNavigator.instances == []

  def test_question_words_are_joined(self, runner: CliRunner, monkeypatch):
    monkeypatch.setenv(API_KEY_ENV_VAR, "sk-test")
    with runner.isolated_filesystem():
      result = runner.invoke(reponav.main, ["How", "does", "routing", "work?", "--model", "custom-model"])
    assert result.exit_code == 0
    navigator = FakeNavigator.instances[0]
    assert navigator.questions == ["How does routing work?"]
    assert navigator.settings.model == "custom-model"

  def test_project_root_option(self, runner: CliRunner, monkeypatch, tmp_path):
    monkeypatch.setenv(API_KEY_ENV_VAR, "sk-test")
    result = runner.invoke(reponav.main, ["--project-root", str(tmp_path), "question"])
    assert result.exit_code == 0
    assert FakeNavigator.instances[0].settings.workspace_dir == str(tmp_path)

  def test_navigator_status_becomes_exit_code(self, runner: CliRunner, monkeypatch):
    class FailingNavigator(FakeNavigator):
      async def ask(self, question: str) -> int:
        return 1

    monkeypatch.setattr(reponav, "RepoNavigator", FailingNavigator)
    monkeypatch.setenv(API_KEY_ENV_VAR, "sk-test")
    with runner.isolated_filesystem():
      result = runner.invoke(reponav.main, ["question"])
    assert result.exit_code == 1

  def test_init_creates_config(self, runner: CliRunner):
    with runner.isolated_filesystem():
      result = runner.invoke(reponav.main, ["--init"])
      assert result.exit_code == 0
      assert os.path.exists(CONFIG_FILE_NAME)
      assert "Created" in result.output

      again = runner.invoke(reponav.main, ["--init"])
      assert again.exit_code == 0
      assert "already exists" in again.output
