"""Run git as a subprocess and interpret its output."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

_NO_COMMITS = (
    "fatal: ambiguous argument 'HEAD': unknown revision or path not in the working tree."
)
_NO_UPSTREAM = "fatal: no upstream configured for branch"


class GitError(RuntimeError):
    """Raised when git cannot be run or exits with a failure."""


def string_from_bytes(data: bytes) -> str:
    """Decode UTF-8 command output and strip surrounding whitespace."""
    try:
        return data.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise GitError("cannot extract command output") from exc


def git_in_dir(directory: str | Path, args: Iterable[str]) -> str:
    """Run git with ``args`` inside ``directory`` and return its trimmed stdout."""
    arguments = [arg.strip() for arg in args]
    try:
        completed = subprocess.run(
            ["git", "-C", str(directory), *arguments],
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise GitError(
            f"error while running git in directory `{directory}` with args `{arguments}`"
        ) from exc
    logger.debug("git %s: output = %r", arguments, completed)
    stdout = string_from_bytes(completed.stdout)
    if completed.returncode == 0:
        return stdout
    stderr = string_from_bytes(completed.stderr)
    message = f"error while running git with args `{arguments}"
    if stdout or stderr:
        message += ":"
    if stdout:
        message += f"\n- stdout: {stdout}"
    if stderr:
        message += f"\n- stderr: {stderr}"
    raise GitError(message)


def changed_files(output: str) -> list[str]:
    """File names from ``git status --porcelain`` output, skipping typechanges."""
    return [
        line.rsplit(" ", 1)[-1]
        for line in (raw.strip() for raw in output.splitlines())
        if not line.startswith("T ")
    ]


def _reword_no_commits(error: GitError) -> GitError:
    if _NO_COMMITS in str(error):
        return GitError("git repository does not contain any commit.")
    return error


class Repo:
    """A git repository together with the branch and remote it started on."""

    def __init__(self, directory: str | Path) -> None:
        """Open the repository; raises GitError if it has no commit."""
        self.directory = Path(directory)
        logger.debug("initializing directory %s", self.directory)
        try:
            remote, branch = self._current_remote_and_branch()
        except GitError as exc:
            raise GitError(f"cannot determine current branch: {exc}") from exc
        self.original_remote = remote
        self.original_branch = branch

    @classmethod
    def init(cls, directory: str | Path) -> Repo:
        """Create a repository in ``directory`` with one commit adding a README."""
        directory = Path(directory)
        git_in_dir(directory, ["init"])
        git_in_dir(directory, ["config", "user.name", "author_name"])
        git_in_dir(directory, ["config", "user.email", "author@example.com"])
        (directory / "README.md").write_text("# my awesome project")
        git_in_dir(directory, ["add", "."])
        git_in_dir(directory, ["commit", "-m", "add README"])
        logger.debug("repo initialized at %s", directory)
        return cls(directory)

    def _current_remote_and_branch(self) -> tuple[str, str]:
        try:
            output = git_in_dir(
                self.directory,
                ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
            )
        except GitError as exc:
            text = str(exc)
            if _NO_UPSTREAM in text:
                branch = self._current_branch()
                logger.warning("no upstream configured for branch %s", branch)
                return "origin", branch
            raise _reword_no_commits(exc) from exc
        remote, slash, branch = output.partition("/")
        if not slash:
            raise GitError("cannot determine current remote and branch")
        return remote, branch

    def _current_branch(self) -> str:
        try:
            return git_in_dir(self.directory, ["rev-parse", "--abbrev-ref", "HEAD"])
        except GitError as exc:
            raise _reword_no_commits(exc) from exc

    def git(self, args: Iterable[str]) -> str:
        """Run a git command in the repository directory."""
        return git_in_dir(self.directory, args)

    def is_clean(self) -> None:
        """Raise GitError if there are uncommitted changes."""
        changes = self.changes_except_typechanges()
        if changes:
            raise GitError(
                "the working directory of this project has uncommitted changes. "
                f"Please commit or stash these changes:\n{changes}"
            )

    def checkout_new_branch(self, branch: str) -> None:
        self.git(["checkout", "-b", branch])

    def add_all_and_commit(self, message: str) -> None:
        self.git(["add", "."])
        self.git(["commit", "-m", message])

    def changes_except_typechanges(self) -> list[str]:
        return changed_files(self.git(["status", "--porcelain"]))

    def add(self, paths: Iterable[str | Path]) -> None:
        self.git(["add", *(str(path) for path in paths)])

    def commit(self, message: str) -> None:
        self.git(["commit", "-m", message])

    def push(self, obj: str) -> None:
        self.git(["push", self.original_remote, obj])

    def fetch(self, obj: str) -> None:
        self.git(["fetch", self.original_remote, obj])

    def force_push(self, obj: str) -> None:
        self.git(["push", self.original_remote, obj, "--force"])

    def checkout_head(self) -> None:
        """Go back to the branch the repository was on when opened."""
        self.git(["checkout", self.original_branch])

    def stash_pop(self) -> None:
        self.git(["stash", "pop"])

    def checkout(self, obj: str) -> None:
        self.git(["checkout", obj])

    def _nth_commit_at_path(self, nth: int, path: str | Path) -> str:
        output = self.git(["log", "--format=%H", "-n", str(nth), "--", str(path)])
        commits = output.splitlines()
        if len(commits) < nth:
            raise GitError("not enough commits")
        commit = commits[nth - 1]
        logger.debug("nth_commit found: %s", commit)
        return commit

    def checkout_last_commit_at_path(self, path: str | Path) -> None:
        """Check out the latest commit that touched ``path``."""
        self.checkout(self._nth_commit_at_path(1, path))

    def checkout_previous_commit_at_path(self, path: str | Path) -> None:
        """Check out the second latest commit that touched ``path``."""
        self.checkout(self._nth_commit_at_path(2, path))

    def current_commit_message(self) -> str:
        return self.git(["log", "-1", "--pretty=format:%B"])

    def current_commit_hash(self) -> str:
        return self.git(["log", "-1", "--pretty=format:%H"])

    def tag(self, name: str) -> str:
        """Create a git tag."""
        return self.git(["tag", name])

    def get_tag_commit(self, tag: str) -> str | None:
        """Commit hash of ``tag``, or None if it cannot be resolved."""
        try:
            return self.git(["rev-list", "-n", "1", tag])
        except GitError:
            return None

    def is_ancestor(self, maybe_ancestor_commit: str, descendant_commit: str) -> bool:
        """True if the first commit comes before the second one."""
        try:
            self.git(
                ["merge-base", "--is-ancestor", maybe_ancestor_commit, descendant_commit]
            )
        except GitError:
            return False
        return True

    def original_remote_url(self) -> str:
        """Url of the remote the repository was on when opened."""
        return self.git(["config", "--get", f"remote.{self.original_remote}.url"])

    def tag_exists(self, tag: str) -> bool:
        try:
            output = self.git(["tag", "-l", tag])
        except GitError as exc:
            raise GitError(f"cannot determine if git tag exists: {exc}") from exc
        return len(output.splitlines()) >= 1