"""Tests for the best-effort git initializer.

Subprocesses are replaced by a scripted ``run_command`` so the tests do not
depend on a local git installation or identity.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from exgen.git import (
    GitStatus,
    get_git_status,
    initialize_git,
    is_git_repository,
    write_gitignore,
)
from exgen.utils import Available, Unavailable


pytestmark = pytest.mark.unit


def scripted_git(responses: dict[str, tuple[int, str, str]]) -> AsyncMock:
    """A ``run_command`` double answering by git sub-command."""

    async def _run(cmd, cwd=None, timeout=120, capture=True, env=None):
        key = " ".join(cmd[1:3]) if cmd[1] in ("diff", "config") else cmd[1]
        return responses.get(key, (0, "", ""))

    return AsyncMock(side_effect=_run)


@pytest.fixture
def git_available(monkeypatch):
    monkeypatch.setattr("exgen.git.probe_command", AsyncMock(return_value=Available("git", "git 2.43")))


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "proj"
    path.mkdir()
    (path / "package.json").write_text("{}")
    return path


# ---------------------------------------------------------------------------
# initialize_git
# ---------------------------------------------------------------------------

class TestInitializeGit:

    async def test_git_unavailable(self, project, recording_logger, monkeypatch):
        monkeypatch.setattr(
            "exgen.git.probe_command", AsyncMock(return_value=Unavailable("git", "not installed"))
        )
        assert await initialize_git(project, recording_logger) is False
        assert "Git is not available" in recording_logger.messages("warn")[0]

    async def test_already_a_repository(self, project, recording_logger, git_available, monkeypatch):
        (project / ".git").mkdir()
        run = scripted_git({"branch": (0, "main", "")})
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is False
        assert ["git", "init"] not in [call.args[0] for call in run.await_args_list]
        assert "Directory is already a Git repository on branch main" in recording_logger.messages("info")

    async def test_existing_dirty_repository(self, project, recording_logger, git_available, monkeypatch):
        (project / ".git").mkdir()
        run = scripted_git({"branch": (0, "dev", ""), "diff --quiet": (1, "", "")})
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is False
        assert (
            "Directory is already a Git repository on branch dev with uncommitted changes"
            in recording_logger.messages("info")
        )

    async def test_success(self, project, recording_logger, git_available, monkeypatch):
        run = scripted_git({
            "diff --cached": (1, "", ""),
            "config --global": (0, "someone", ""),
        })
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is True

        commands = [call.args[0] for call in run.await_args_list]
        assert commands[0] == ["git", "init"]
        assert ["git", "add", "."] in commands
        assert ["git", "commit", "-m", "Initial commit: Created with EXGEN"] in commands
        assert (project / ".gitignore").is_file()
        assert "Git repository initialized" in recording_logger.messages("success")

    async def test_nothing_staged_skips_commit(self, project, recording_logger, git_available, monkeypatch):
        run = scripted_git({"diff --cached": (0, "", "")})
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is True
        assert not any(call.args[0][1] == "commit" for call in run.await_args_list)

    async def test_missing_identity_is_a_hint(self, project, recording_logger, git_available, monkeypatch):
        run = scripted_git({
            "diff --cached": (1, "", ""),
            "commit": (128, "", "Please tell me who you are.\n\n  git config --global user.email"),
        })
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is True
        assert "Git user configuration needed - skipping initial commit" in recording_logger.messages("info")
        assert recording_logger.messages("warn") == []

    async def test_failure_never_raises(self, project, recording_logger, git_available, monkeypatch):
        run = scripted_git({"init": (1, "", "fatal: cannot mkdir")})
        monkeypatch.setattr("exgen.git.run_command", run)

        assert await initialize_git(project, recording_logger) is False
        assert "Failed to initialize Git repository" in recording_logger.messages("warn")[0]
        assert "Continuing without Git initialization..." in recording_logger.messages("info")

    async def test_os_error_never_raises(self, project, recording_logger, git_available, monkeypatch):
        monkeypatch.setattr("exgen.git.run_command", AsyncMock(side_effect=PermissionError("denied")))
        assert await initialize_git(project, recording_logger) is False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestGitHelpers:

    def test_write_gitignore_keeps_existing(self, project):
        (project / ".gitignore").write_text("custom\n")
        write_gitignore(project)
        assert (project / ".gitignore").read_text() == "custom\n"

    def test_write_gitignore_default(self, project):
        content = write_gitignore(project).read_text()
        assert "node_modules" in content

    def test_is_git_repository(self, project):
        assert not is_git_repository(project)
        (project / ".git").mkdir()
        assert is_git_repository(project)

    async def test_status_not_a_repo(self, project):
        assert await get_git_status(project) == GitStatus(is_repo=False)

    async def test_status_dirty(self, project, monkeypatch):
        (project / ".git").mkdir()

        async def _run(cmd, cwd=None, timeout=120, capture=True, env=None):
            if cmd[1] == "branch":
                return (0, "main", "")
            if "--cached" in cmd:
                return (0, "", "")
            return (1, "", "")

        monkeypatch.setattr("exgen.git.run_command", _run)
        status = await get_git_status(project)
        assert status == GitStatus(is_repo=True, has_uncommitted_changes=True, current_branch="main")
