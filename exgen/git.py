"""Best-effort git repository initialisation for generated projects.

Nothing in this module raises to its caller: a missing git binary, an
existing repository or a failed commit all end as a logged message and a
``False`` (or empty) result.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError

from exgen.constants import GIT_COMMIT_MESSAGE
from exgen.logger import Logger
from exgen.scaffolder.templates import TemplateRenderer
from exgen.utils import probe_command, run_command

_IDENTITY_HINTS = (
    "Configure Git with: git config --global user.name 'Your Name'",
    "Configure Git with: git config --global user.email 'your.email@example.com'",
)


class GitCommandError(Exception):
    """Raised internally when a git command exits non-zero."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


@dataclass(frozen=True)
class GitStatus:
    """Snapshot of a project directory's repository state."""

    is_repo: bool
    has_uncommitted_changes: bool = False
    current_branch: Optional[str] = None


async def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 60.0,
) -> tuple[str, str]:
    """Run a git command and return ``(stdout, stderr)``.

    Raises GitCommandError if the command exits with a non-zero code.
    """
    cmd = ["git", *args]
    cmd_str = " ".join(cmd)
    returncode, stdout, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    if returncode != 0:
        raise GitCommandError(
            f"Git command failed (exit {returncode}): {cmd_str}\n{stderr}".rstrip(),
            command=cmd_str,
            stderr=stderr,
        )
    return stdout, stderr


def is_git_repository(path: str | Path) -> bool:
    return (Path(path) / ".git").exists()


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


async def initialize_git(project_path: str | Path, logger: Logger) -> bool:
    """Create a repository with an initial commit in *project_path*.

    Returns:
        ``True`` if a repository was created, ``False`` if the step was
        skipped or failed.
    """
    path = Path(project_path)

    probe = await probe_command("git")
    if not probe:
        logger.warn("Git is not available - skipping repository initialization")
        logger.info("Please install Git: https://git-scm.com/downloads")
        return False

    status = await get_git_status(path)
    if status.is_repo:
        message = "Directory is already a Git repository"
        if status.current_branch:
            message += f" on branch {status.current_branch}"
        if status.has_uncommitted_changes:
            message += " with uncommitted changes"
        logger.info(message)
        return False

    try:
        with logger.status("Initializing Git repository..."):
            await _run_git("init", cwd=path)
            write_gitignore(path)
            committed = await create_initial_commit(path, logger)
    except (GitCommandError, OSError, TemplateError) as exc:
        logger.warn(f"Failed to initialize Git repository: {exc}")
        logger.info("Continuing without Git initialization...")
        return False

    if committed:
        logger.success("Git repository initialized")
    else:
        logger.success("Git repository initialized (no initial commit)")
    await suggest_git_config(path, logger)
    return True


def write_gitignore(project_path: Path) -> Path:
    """Write the default ``.gitignore`` unless the project already has one."""
    target = project_path / ".gitignore"
    if not target.exists():
        content = TemplateRenderer().render("gitignore.j2", {})
        target.write_text(content, encoding="utf-8")
    return target


async def create_initial_commit(project_path: Path, logger: Logger) -> bool:
    """Stage everything and commit it.

    Returns ``False`` without raising when nothing is staged or the user's
    git identity is not configured.
    """
    await _run_git("add", ".", cwd=project_path)

    returncode, _, _ = await run_command(
        ["git", "diff", "--cached", "--quiet", "--exit-code"], cwd=project_path
    )
    if returncode == 0:
        logger.debug("Nothing staged; skipping initial commit")
        return False

    try:
        await _run_git("commit", "-m", GIT_COMMIT_MESSAGE, cwd=project_path)
    except GitCommandError as exc:
        if "user.email" in exc.stderr or "user.name" in exc.stderr:
            logger.info("Git user configuration needed - skipping initial commit")
            for hint in _IDENTITY_HINTS:
                logger.info(hint)
            return False
        raise
    return True


async def suggest_git_config(project_path: Path, logger: Logger) -> None:
    """Print configuration hints when no global identity is set."""
    missing: list[str] = []
    for key, hint in zip(("user.name", "user.email"), _IDENTITY_HINTS):
        try:
            returncode, stdout, _ = await run_command(
                ["git", "config", "--global", key], cwd=project_path
            )
        except OSError:
            return
        if returncode != 0 or not stdout:
            missing.append(hint)

    if missing:
        logger.info("Git configuration recommendations:")
        for hint in missing:
            logger.info(f"  {hint}")


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


async def get_git_status(project_path: str | Path) -> GitStatus:
    """Report whether *project_path* is a repository, is dirty, and its branch."""
    path = Path(project_path)
    if not is_git_repository(path):
        return GitStatus(is_repo=False)

    try:
        unstaged, _, _ = await run_command(["git", "diff", "--quiet", "--exit-code"], cwd=path)
        staged, _, _ = await run_command(
            ["git", "diff", "--cached", "--quiet", "--exit-code"], cwd=path
        )
        returncode, branch, _ = await run_command(["git", "branch", "--show-current"], cwd=path)
    except OSError:
        return GitStatus(is_repo=False)

    return GitStatus(
        is_repo=True,
        has_uncommitted_changes=unstaged != 0 or staged != 0,
        current_branch=branch if returncode == 0 and branch else None,
    )
